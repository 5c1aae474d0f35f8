# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

# ensure all ORM tables are registered in metadata before create_all
import staffing.models  # noqa: F401
from staffing.core.config import Settings
from staffing.core.db import build_engine, build_session_factory, get_db
from staffing.models import Base


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "staffing_test.db"


@pytest.fixture()
def cfg(db_path) -> Settings:
    """
    File-backed SQLite per test: every session gets its own connection, so
    threads can race on real transactions (":memory:" would share one).
    """
    return Settings(
        db_url=f"sqlite:///{db_path}",
        db_lock_timeout_ms=10_000,
        schedule_retry_delays=[0.0, 0.0],
    )


@pytest.fixture()
def engine(cfg):
    eng = build_engine(cfg)
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    from staffing.main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()

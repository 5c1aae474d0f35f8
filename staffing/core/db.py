# staffing/core/db.py
from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from staffing.core.config import Settings, settings


def build_engine(cfg: Settings) -> Engine:
    url = make_url(cfg.database_url)

    if url.get_backend_name() == "sqlite":
        # busy timeout bounds how long a writer waits for the database lock
        eng = create_engine(
            url,
            future=True,
            connect_args={
                "check_same_thread": False,
                "timeout": cfg.db_lock_timeout_ms / 1000,
            },
        )

        @event.listens_for(eng, "connect")
        def _sqlite_pragmas(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return eng

    return create_engine(url, future=True, pool_pre_ping=True)


def build_session_factory(eng: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=eng,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


engine = build_engine(settings)
SessionLocal = build_session_factory(engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

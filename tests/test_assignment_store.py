import uuid
from datetime import datetime, timezone

import pytest

from staffing.models.consultant import Consultant
from staffing.services.assignment_store import SqlAssignmentStore
from staffing.services.errors import NotFoundError, ReferentialError, ValidationError
from tests.factories import at, make_assignment, make_consultant, make_project


@pytest.fixture()
def store(db, cfg):
    return SqlAssignmentStore(db, cfg)


@pytest.fixture()
def c1(db):
    return make_consultant(db, name="C1")


@pytest.fixture()
def p1(db):
    return make_project(db, name="P1")


def test_insert_generates_id_and_derives_hours(store, c1, p1):
    with store.transaction():
        row = store.insert(
            consultant_id=c1.id,
            project_id=p1.id,
            start_time=datetime(2024, 1, 1, 9, tzinfo=timezone.utc),
            end_time=datetime(2024, 1, 1, 17, tzinfo=timezone.utc),
        )

    assert isinstance(row.id, uuid.UUID)
    assert row.hours == 8
    assert row.status == "scheduled"

    with store.transaction():
        loaded = store.get(row.id, refresh=True)

    assert loaded.hours == 8
    assert loaded.start_time == at(9)
    assert loaded.start_time.tzinfo is not None


def test_insert_with_missing_project_is_referential_error(store, db, c1):
    with pytest.raises(ReferentialError):
        with store.transaction():
            store.insert(consultant_id=c1.id, project_id=uuid.uuid4(), start_time=at(9), end_time=at(10))

    with store.transaction():
        assert store.list().total == 0


def test_lock_consultant_missing_is_referential_error(store):
    with pytest.raises(ReferentialError):
        with store.transaction():
            store.lock_consultant(uuid.uuid4())


def test_lock_consultant_bumps_schedule_version(store, db, c1):
    with store.transaction():
        store.lock_consultant(c1.id)
        store.lock_consultant(c1.id)

    with db.begin():
        assert db.get(Consultant, c1.id, populate_existing=True).schedule_version == 2


def test_find_overlapping_filters(store, db, c1, p1):
    other = make_consultant(db, name="other")
    a = make_assignment(db, consultant_id=c1.id, project_id=p1.id, start_time=at(10), end_time=at(12))
    make_assignment(db, consultant_id=c1.id, project_id=p1.id, start_time=at(12), end_time=at(13))
    make_assignment(
        db, consultant_id=c1.id, project_id=p1.id, start_time=at(11), end_time=at(14), status="cancelled"
    )
    make_assignment(
        db, consultant_id=c1.id, project_id=p1.id, start_time=at(11), end_time=at(14), status="completed"
    )
    make_assignment(db, consultant_id=other.id, project_id=p1.id, start_time=at(10), end_time=at(12))

    with store.transaction():
        hits = store.find_overlapping(c1.id, at(11), at(12))
        boundary = store.find_overlapping(c1.id, at(13), at(15))
        excluded = store.find_overlapping(c1.id, at(11), at(12), exclude_id=a.id)

    assert [h.id for h in hits] == [a.id]
    assert boundary == []
    assert excluded == []


def test_find_overlapping_active_counts(store, db, c1, p1):
    a = make_assignment(
        db, consultant_id=c1.id, project_id=p1.id, start_time=at(10), end_time=at(12), status="active"
    )

    with store.transaction():
        hits = store.find_overlapping(c1.id, at(9), at(17))

    assert [h.id for h in hits] == [a.id]


def test_get_missing(store):
    with pytest.raises(NotFoundError):
        with store.transaction():
            store.get(uuid.uuid4())


def test_update_recomputes_hours_only_when_bounds_change(store, db, c1, p1):
    a = make_assignment(db, consultant_id=c1.id, project_id=p1.id, start_time=at(9), end_time=at(17))
    before = a.updated_at

    with store.transaction():
        row = store.update(a.id, {"notes": "n"})
    assert row.hours == 8
    assert row.notes == "n"
    assert row.updated_at >= before

    with store.transaction():
        row = store.update(a.id, {"start_time": at(13)})
    assert row.hours == 4

    with store.transaction():
        assert store.get(a.id, refresh=True).hours == 4


def test_update_rejects_hours_and_unknown_status(store, db, c1, p1):
    a = make_assignment(db, consultant_id=c1.id, project_id=p1.id, start_time=at(9), end_time=at(17))

    with pytest.raises(ValidationError):
        with store.transaction():
            store.update(a.id, {"hours": 1})

    with pytest.raises(ValidationError):
        with store.transaction():
            store.update(a.id, {"status": "paused"})


def test_update_missing(store):
    with pytest.raises(NotFoundError):
        with store.transaction():
            store.update(uuid.uuid4(), {"notes": "x"})


def test_update_to_missing_consultant_is_referential_error(store, db, c1, p1):
    a = make_assignment(db, consultant_id=c1.id, project_id=p1.id, start_time=at(9), end_time=at(17))

    with pytest.raises(ReferentialError):
        with store.transaction():
            store.update(a.id, {"consultant_id": uuid.uuid4()})

    with store.transaction():
        assert store.get(a.id, refresh=True).consultant_id == c1.id


def test_window_check_constraint_is_translated(store, db, c1, p1):
    a = make_assignment(db, consultant_id=c1.id, project_id=p1.id, start_time=at(9), end_time=at(17))

    # the store alone does not validate windows; the table does
    with pytest.raises(ValidationError):
        with store.transaction():
            store.update(a.id, {"start_time": at(18)})


def test_remove(store, db, c1, p1):
    a = make_assignment(db, consultant_id=c1.id, project_id=p1.id, start_time=at(9), end_time=at(17))

    with store.transaction():
        store.remove(a.id)

    with pytest.raises(NotFoundError):
        with store.transaction():
            store.get(a.id)

    with pytest.raises(NotFoundError):
        with store.transaction():
            store.remove(a.id)


def test_list_orders_by_start_desc_and_pages(store, db, c1, p1):
    p2 = make_project(db, name="P2")
    other = make_consultant(db, name="other")
    for day in range(1, 6):
        make_assignment(
            db, consultant_id=c1.id, project_id=p1.id, start_time=at(9, day=day), end_time=at(10, day=day)
        )
    make_assignment(db, consultant_id=c1.id, project_id=p2.id, start_time=at(9, day=9), end_time=at(10, day=9))
    make_assignment(db, consultant_id=other.id, project_id=p1.id, start_time=at(9, day=8), end_time=at(10, day=8))

    with store.transaction():
        first = store.list(page=1, page_size=3)
        last = store.list(page=3, page_size=3)
        by_consultant = store.list(consultant_id=c1.id, page_size=10)
        both = store.list(consultant_id=c1.id, project_id=p1.id, page_size=10)

    assert first.total == 7
    assert [r.start_time.day for r in first.items] == [9, 8, 5]
    assert [r.start_time.day for r in last.items] == [1]

    assert by_consultant.total == 6
    assert both.total == 5
    assert all(r.project_id == p1.id and r.consultant_id == c1.id for r in both.items)


def test_list_rejects_bad_paging(store):
    with pytest.raises(ValidationError):
        with store.transaction():
            store.list(page=0)


def test_exception_inside_transaction_rolls_back(store, db, c1, p1):
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.insert(consultant_id=c1.id, project_id=p1.id, start_time=at(9), end_time=at(10))
            raise RuntimeError("boom")

    with store.transaction():
        assert store.list().total == 0

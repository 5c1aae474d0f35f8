from uuid import uuid4

import pytest


@pytest.fixture()
def c1(client):
    r = client.post("/api/consultants", json={"name": "C1", "email": f"c1-{uuid4().hex[:6]}@example.com"})
    assert r.status_code == 201, r.text
    return r.json()["id"]


@pytest.fixture()
def p1(client):
    r = client.post(
        "/api/projects",
        json={"name": "P1", "client": "ACME", "start_date": "2024-01-01", "end_date": "2024-12-31"},
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


def _create(client, consultant_id, project_id, start, end, **extra):
    body = {
        "consultant_id": consultant_id,
        "project_id": project_id,
        "start_time": start,
        "end_time": end,
        **extra,
    }
    return client.post("/api/assignments", json=body)


def test_create_returns_full_record_with_derived_hours(client, c1, p1):
    r = _create(client, c1, p1, "2024-01-01T09:00:00Z", "2024-01-01T17:00:00Z", notes="kickoff")
    assert r.status_code == 201, r.text

    body = r.json()
    assert body["hours"] == 8
    assert body["status"] == "scheduled"
    assert body["notes"] == "kickoff"
    assert body["consultant_id"] == c1

    got = client.get(f"/api/assignments/{body['id']}")
    assert got.status_code == 200
    assert got.json()["hours"] == 8


def test_conflict_is_400_schedule_conflict_with_blocking_id(client, c1, p1):
    first = _create(client, c1, p1, "2024-01-01T10:00:00Z", "2024-01-01T12:00:00Z").json()

    r = _create(client, c1, p1, "2024-01-01T11:00:00Z", "2024-01-01T13:00:00Z")

    assert r.status_code == 400, r.text
    body = r.json()
    assert body["error"] == "SCHEDULE_CONFLICT"
    assert body["conflicting_assignment_id"] == first["id"]
    assert body["message"]


def test_c1_scenario_over_http(client, c1, p1):
    first = _create(client, c1, p1, "2024-01-01T10:00:00Z", "2024-01-01T12:00:00Z").json()

    assert _create(client, c1, p1, "2024-01-01T11:00:00Z", "2024-01-01T13:00:00Z").status_code == 400

    r = client.patch(f"/api/assignments/{first['id']}", json={"status": "cancelled"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "cancelled"

    retry = _create(client, c1, p1, "2024-01-01T11:00:00Z", "2024-01-01T13:00:00Z")
    assert retry.status_code == 201, retry.text


def test_back_to_back_is_allowed(client, c1, p1):
    assert _create(client, c1, p1, "2024-01-01T10:00:00Z", "2024-01-01T12:00:00Z").status_code == 201
    assert _create(client, c1, p1, "2024-01-01T12:00:00Z", "2024-01-01T13:00:00Z").status_code == 201


def test_end_before_start_is_400_with_field_detail(client, c1, p1):
    r = _create(client, c1, p1, "2024-01-01T12:00:00Z", "2024-01-01T10:00:00Z")

    assert r.status_code == 400, r.text
    body = r.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"] == [{"field": "end_time", "message": "end before start"}]


@pytest.mark.parametrize(
    "override",
    [
        {"start_time": "2024-01-01T09:00:00"},  # no offset
        {"consultant_id": "not-a-uuid"},
        {"hours": 3},  # derived, never accepted
    ],
)
def test_malformed_body_is_400(client, c1, p1, override):
    body = {
        "consultant_id": c1,
        "project_id": p1,
        "start_time": "2024-01-01T09:00:00Z",
        "end_time": "2024-01-01T17:00:00Z",
        **override,
    }
    r = client.post("/api/assignments", json=body)

    assert r.status_code == 400, r.text
    assert r.json()["error"] == "VALIDATION_ERROR"
    assert r.json()["details"]


def test_unknown_consultant_is_404(client, p1):
    r = _create(client, str(uuid4()), p1, "2024-01-01T09:00:00Z", "2024-01-01T17:00:00Z")
    assert r.status_code == 404, r.text
    assert r.json()["error"] == "NOT_FOUND"


def test_unknown_project_is_404(client, c1):
    r = _create(client, c1, str(uuid4()), "2024-01-01T09:00:00Z", "2024-01-01T17:00:00Z")
    assert r.status_code == 404, r.text


def test_get_missing_is_404(client):
    r = client.get(f"/api/assignments/{uuid4()}")
    assert r.status_code == 404
    assert r.json()["error"] == "NOT_FOUND"


def test_patch_notes_only_keeps_window(client, c1, p1):
    a = _create(client, c1, p1, "2024-01-01T10:00:00Z", "2024-01-01T12:00:00Z").json()

    r = client.patch(f"/api/assignments/{a['id']}", json={"notes": "remote"})

    assert r.status_code == 200, r.text
    assert r.json()["notes"] == "remote"
    assert r.json()["start_time"] == a["start_time"]


def test_patch_window_into_conflict_is_400(client, c1, p1):
    _create(client, c1, p1, "2024-01-01T10:00:00Z", "2024-01-01T12:00:00Z")
    b = _create(client, c1, p1, "2024-01-01T13:00:00Z", "2024-01-01T15:00:00Z").json()

    r = client.patch(f"/api/assignments/{b['id']}", json={"start_time": "2024-01-01T11:30:00Z"})

    assert r.status_code == 400, r.text
    assert r.json()["error"] == "SCHEDULE_CONFLICT"
    assert client.get(f"/api/assignments/{b['id']}").json()["start_time"] == b["start_time"]


def test_patch_window_recomputes_hours(client, c1, p1):
    a = _create(client, c1, p1, "2024-01-01T09:00:00Z", "2024-01-01T17:00:00Z").json()

    r = client.patch(f"/api/assignments/{a['id']}", json={"end_time": "2024-01-01T11:00:00Z"})

    assert r.status_code == 200, r.text
    assert r.json()["hours"] == 2


def test_patch_missing_is_404(client):
    r = client.patch(f"/api/assignments/{uuid4()}", json={"notes": "x"})
    assert r.status_code == 404


def test_delete_then_get_is_404(client, c1, p1):
    a = _create(client, c1, p1, "2024-01-01T09:00:00Z", "2024-01-01T17:00:00Z").json()

    assert client.delete(f"/api/assignments/{a['id']}").status_code == 204
    assert client.get(f"/api/assignments/{a['id']}").status_code == 404
    assert client.delete(f"/api/assignments/{a['id']}").status_code == 404

    # the window is free again
    assert _create(client, c1, p1, "2024-01-01T09:00:00Z", "2024-01-01T17:00:00Z").status_code == 201


def test_list_pagination_and_filters(client, c1, p1):
    for day in range(1, 4):
        _create(client, c1, p1, f"2024-01-0{day}T09:00:00Z", f"2024-01-0{day}T10:00:00Z")

    r = client.get("/api/assignments", params={"page": 1, "limit": 2, "consultant_id": c1})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total"] == 3
    assert body["page"] == 1
    assert body["total_pages"] == 2
    assert [a["start_time"][:10] for a in body["data"]] == ["2024-01-03", "2024-01-02"]

    other = client.get("/api/assignments", params={"consultant_id": str(uuid4())}).json()
    assert other["total"] == 0
    assert other["data"] == []


def test_list_rejects_bad_paging(client):
    r = client.get("/api/assignments", params={"page": 0})
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "page"


def test_responses_embed_consultant_and_project(client, c1, p1):
    created = _create(client, c1, p1, "2024-01-01T09:00:00Z", "2024-01-01T10:00:00Z").json()
    assert created["consultant"]["id"] == c1
    assert created["project"]["id"] == p1

    got = client.get(f"/api/assignments/{created['id']}").json()
    assert got["consultant"]["name"] == "C1"
    assert got["project"]["client"] == "ACME"

    listed = client.get("/api/assignments").json()["data"]
    assert [(a["consultant"]["id"], a["project"]["name"]) for a in listed] == [(c1, "P1")]


def test_patch_to_another_consultant_embeds_the_new_one(client, c1, p1):
    other = client.post("/api/consultants", json={"name": "C2", "email": f"c2-{uuid4().hex[:6]}@example.com"})
    created = _create(client, c1, p1, "2024-01-01T09:00:00Z", "2024-01-01T10:00:00Z").json()

    r = client.patch(f"/api/assignments/{created['id']}", json={"consultant_id": other.json()["id"]})

    assert r.status_code == 200, r.text
    assert r.json()["consultant"]["name"] == "C2"


def test_store_unavailable_after_retries_is_503(client, c1, p1, monkeypatch):
    from contextlib import contextmanager

    from staffing.core.config import settings
    from staffing.services.assignment_store import SqlAssignmentStore
    from staffing.services.errors import TransientStoreError

    attempts = {"n": 0}

    @contextmanager
    def always_locked(self):
        attempts["n"] += 1
        raise TransientStoreError("database is locked")
        yield

    monkeypatch.setattr(settings, "schedule_retry_delays", [0.0, 0.0])
    monkeypatch.setattr(SqlAssignmentStore, "transaction", always_locked)

    r = _create(client, c1, p1, "2024-01-01T09:00:00Z", "2024-01-01T10:00:00Z")

    assert r.status_code == 503, r.text
    body = r.json()
    assert body["error"] == "STORE_UNAVAILABLE"
    assert body["message"]
    assert attempts["n"] == 3

    assert client.get("/api/assignments").status_code == 503

"""HTTP surface: trigger delivery, callables, manual job runs."""
import pytest
from fastapi.testclient import TestClient

from crewnotify.main import app

from tests.conftest import TODAY, token


@pytest.fixture()
def client(ctx):
    # No context manager: lifespan (scheduler) stays off
    return TestClient(app)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_list_triggers(client):
    names = {t["name"] for t in client.get("/triggers").json()["triggers"]}
    assert {"event_written", "status_written", "poll_created", "crew_message_created", "contact_joined"} <= names
    assert "signal_accepted" in names
    assert len(names) == 14


def test_document_write_runs_matching_triggers(client, transport, crew):
    r = client.post(
        "/triggers/documents",
        json={
            "path": "crews/c1/events/e1",
            "after": {"title": "Picnic", "startDate": "2025-03-14", "endDate": "2025-03-14", "createdBy": "alice"},
        },
    )
    assert r.status_code == 200
    assert r.json() == {"path": "crews/c1/events/e1", "results": {"event_written": 4}, "failed": {}}
    assert len(transport.sent) == 4


def test_crew_update_runs_each_settings_trigger(client, transport, crew):
    after = {**crew, "name": "Saturday Club", "activity": "Bowling", "updatedBy": "bob"}
    r = client.post("/triggers/documents", json={"path": "/crews/c1/", "before": crew, "after": after})
    body = r.json()
    assert r.status_code == 200
    assert body["results"] == {"crew_activity_updated": 3, "crew_name_updated": 3, "crew_photo_updated": 0}


def test_document_write_with_no_trigger(client, transport):
    r = client.post("/triggers/documents", json={"path": "matches/m1", "after": {"x": 1}})
    assert r.status_code == 200
    assert r.json()["results"] == {}


def test_transport_failure_returns_502(client, transport, crew):
    transport.fail_all = True
    r = client.post(
        "/triggers/documents",
        json={"path": "crews/c1/events/e1", "after": {"title": "Picnic", "startDate": "2025-03-14", "createdBy": "alice"}},
    )
    assert r.status_code == 502
    assert "event_written" in r.json()["failed"]


def test_named_trigger(client, transport, crew, seed):
    seed(f"crews/c1/statuses/{TODAY}/userStatuses/bob", {"upForGoingOutTonight": True})
    r = client.post(
        "/triggers/status_written",
        json={
            "params": {"crewId": "c1", "date": TODAY, "userId": "alice"},
            "after": {"upForGoingOutTonight": True},
        },
    )
    assert r.status_code == 200
    assert r.json() == {"trigger": "status_written", "sent": 1}
    assert transport.recipients == [token("bob")]


def test_unknown_named_trigger_is_404(client):
    assert client.post("/triggers/nope", json={}).status_code == 404


def test_named_trigger_failure_is_502(client, transport, crew):
    transport.fail_all = True
    r = client.post(
        "/triggers/poll_deleted",
        json={"params": {"pollId": "p1"}, "before": {"crewId": "c1", "createdBy": "alice", "title": "Trip"}},
    )
    assert r.status_code == 502


def test_poke_over_http(client, transport, crew, seed):
    seed(f"crews/c1/statuses/{TODAY}/userStatuses/alice", {"upForGoingOutTonight": True})
    r = client.post(
        "/callable/pokeCrew",
        json={"data": {"crewId": "c1", "date": TODAY, "userId": "alice"}},
        headers={"X-Caller-Id": "alice"},
    )
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert len(transport.sent) == 3


def test_callable_errors_use_error_body(client, crew):
    r = client.post("/callable/pokeCrew", json={"crewId": "c1", "date": TODAY, "userId": "alice"})
    assert r.status_code == 401
    assert r.json()["error"]["status"] == "unauthenticated"

    r = client.post(
        "/callable/remindPollNonResponders",
        json={"pollId": "p1", "userId": "alice"},
        headers={"X-Caller-Id": "bob"},
    )
    assert r.status_code == 403
    assert r.json() == {"error": {"status": "permission-denied", "message": "You can only act on your own behalf."}}


def test_callable_missing_args(client):
    r = client.post("/callable/remindPollNonResponders", headers={"X-Caller-Id": "alice"})
    assert r.status_code == 400
    assert r.json()["error"]["status"] == "invalid-argument"


def test_run_job(client, transport, crew, seed):
    seed("crews/c1/events/e1", {"title": "Picnic", "startDate": TODAY, "endDate": TODAY})
    r = client.post("/jobs/todays_events_digest/run")
    assert r.status_code == 200
    assert r.json() == {"job_id": "todays_events_digest", "sent": 4}


def test_run_unknown_job(client):
    assert client.post("/jobs/nope/run").status_code == 404
    assert client.get("/jobs").json() == {"jobs": ["todays_events_digest", "tomorrows_events_digest"]}


def test_signal_update_runs_signal_trigger(client, transport, crew):
    before = {"senderId": "alice", "targetType": "crews", "targetIds": ["c1"], "status": "active", "responses": []}
    after = {**before, "responses": [{"responderId": "bob", "response": "accept"}]}
    r = client.post("/triggers/documents", json={"path": "signals/s1", "before": before, "after": after})
    assert r.status_code == 200
    assert r.json()["results"] == {"signal_accepted": 2}

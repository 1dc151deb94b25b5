"""Tests for the RSVP endpoints.

Covers:
- Save / fetch a response
- Attending limit and waiting list through the API
- Anonymous responders: event toggle and redaction
- Validation errors (unknown event, unknown user, bad status)
- 503 when the database is unreachable
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gatherpress.config import settings
from gatherpress.database import get_db
from gatherpress.main import app
from tests.conftest import create_test_event, create_test_user


def _rsvp(client, event_id, user_id, status="attending", **fields):
    return client.post(f"/api/events/{event_id}/rsvps", json={"user_id": user_id, "status": status, **fields})


@pytest.fixture
def limit_of_one(monkeypatch):
    monkeypatch.setattr(settings, "MAX_ATTENDING_LIMIT", 1)


class TestSaveRsvp:
    def test_save_and_get(self, client):
        user = create_test_user(client)
        event = create_test_event(client)

        resp = _rsvp(client, event["event_id"], user["user_id"])
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["response"]["status"] == "attending"
        assert data["responses"]["attending"]["count"] == 1
        assert data["responses"]["attending"]["responses"][0]["name"] == "Test User"

        resp = client.get(f"/api/events/{event['event_id']}/rsvps/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["status"] == "attending"
        assert resp.json()["id"] == data["response"]["id"]

    def test_guests_clamped_by_event_limit(self, client):
        user = create_test_user(client)
        event = create_test_event(client, max_guest_limit=2)

        data = _rsvp(client, event["event_id"], user["user_id"], guests=4).json()
        assert data["response"]["guests"] == 2
        assert data["responses"]["attending"]["count"] == 3

    def test_waiting_list_when_full(self, client, limit_of_one):
        alice = create_test_user(client, login="alice", name="Alice")
        bob = create_test_user(client, login="bob", name="Bob")
        event = create_test_event(client)

        assert _rsvp(client, event["event_id"], alice["user_id"]).json()["response"]["status"] == "attending"
        data = _rsvp(client, event["event_id"], bob["user_id"]).json()
        assert data["response"]["status"] == "waiting_list"
        assert data["responses"]["waiting_list"]["count"] == 1

    def test_decline_promotes_waiting_list(self, client, limit_of_one):
        alice = create_test_user(client, login="alice", name="Alice")
        bob = create_test_user(client, login="bob", name="Bob")
        event = create_test_event(client)
        _rsvp(client, event["event_id"], alice["user_id"])
        _rsvp(client, event["event_id"], bob["user_id"])

        data = _rsvp(client, event["event_id"], alice["user_id"], status="not_attending").json()

        attending = data["responses"]["attending"]["responses"]
        assert [r["id"] for r in attending] == [bob["user_id"]]
        resp = client.get(f"/api/events/{event['event_id']}/rsvps/{bob['user_id']}")
        assert resp.json()["status"] == "attending"

    def test_no_status_removes_response(self, client):
        user = create_test_user(client)
        event = create_test_event(client)
        _rsvp(client, event["event_id"], user["user_id"])

        data = _rsvp(client, event["event_id"], user["user_id"], status="no_status").json()
        assert data["response"]["status"] == "no_status"
        assert data["responses"]["all"]["count"] == 0


class TestAnonymous:
    def test_anonymous_redacted_unless_requested(self, client):
        user = create_test_user(client, login="shy", name="Shy Person")
        event = create_test_event(client, enable_anonymous_rsvp=True)

        data = _rsvp(client, event["event_id"], user["user_id"], anonymous=True).json()
        assert data["response"]["anonymous"] is True
        record = data["responses"]["attending"]["responses"][0]
        assert record["id"] == 0
        assert record["name"] == "Anonymous"
        assert record["profile"] == ""

        public = client.get(f"/api/events/{event['event_id']}/rsvps").json()
        assert public["all"]["responses"][0]["name"] == "Anonymous"

        full = client.get(f"/api/events/{event['event_id']}/rsvps?show_identities=true").json()
        assert full["all"]["responses"][0]["id"] == user["user_id"]
        assert full["all"]["responses"][0]["name"] == "Shy Person"

    def test_anonymous_ignored_when_event_disallows(self, client):
        user = create_test_user(client)
        event = create_test_event(client)

        data = _rsvp(client, event["event_id"], user["user_id"], anonymous=True).json()
        assert data["response"]["anonymous"] is False
        assert data["responses"]["attending"]["responses"][0]["name"] == "Test User"

    def test_anonymous_decline_removes_response(self, client):
        user = create_test_user(client)
        event = create_test_event(client, enable_anonymous_rsvp=True)
        _rsvp(client, event["event_id"], user["user_id"])

        data = _rsvp(client, event["event_id"], user["user_id"], status="not_attending", anonymous=True).json()
        assert data["response"]["status"] == "no_status"
        resp = client.get(f"/api/events/{event['event_id']}/rsvps/{user['user_id']}")
        assert resp.json()["id"] == 0
        assert resp.json()["status"] == "no_status"


class TestRoles:
    def test_leaders_listed_first(self, client):
        member = create_test_user(client, login="member", name="Member")
        leader = create_test_user(client, login="leader", name="Leader")
        event = create_test_event(client)
        _rsvp(client, event["event_id"], member["user_id"])
        _rsvp(client, event["event_id"], leader["user_id"])

        resp = client.put(f"/api/users/{leader['user_id']}/role", json={"role": "Organizer"})
        assert resp.status_code == 200

        listing = client.get(f"/api/events/{event['event_id']}/rsvps").json()
        assert [r["id"] for r in listing["all"]["responses"]] == [leader["user_id"], member["user_id"]]
        assert listing["all"]["responses"][0]["role"] == "Organizer"


class TestValidation:
    def test_invalid_status(self, client):
        user = create_test_user(client)
        event = create_test_event(client)
        resp = _rsvp(client, event["event_id"], user["user_id"], status="maybe")
        assert resp.status_code == 400

    def test_unknown_event(self, client):
        user = create_test_user(client)
        assert _rsvp(client, 999, user["user_id"]).status_code == 404
        assert client.get("/api/events/999/rsvps").status_code == 404

    def test_unknown_user(self, client):
        event = create_test_event(client)
        assert _rsvp(client, event["event_id"], 999).status_code == 404

    def test_invalid_user_id_lookup(self, client):
        event = create_test_event(client)
        assert client.get(f"/api/events/{event['event_id']}/rsvps/0").status_code == 404

    def test_no_response_yet(self, client):
        user = create_test_user(client)
        event = create_test_event(client)
        resp = client.get(f"/api/events/{event['event_id']}/rsvps/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["status"] == "no_status"
        assert resp.json()["id"] == 0

    def test_empty_listing(self, client):
        event = create_test_event(client)
        data = client.get(f"/api/events/{event['event_id']}/rsvps").json()
        assert data["all"]["count"] == 0
        assert data["attending"]["count"] == 0
        assert data["waiting_list"]["responses"] == []


class TestStorageUnavailable:
    @pytest.fixture
    def broken_db(self, client, tmp_path):
        broken = create_engine(f"sqlite:///{tmp_path}/missing/dir/x.db")
        BrokenSession = sessionmaker(bind=broken)

        def _override_get_db():
            session = BrokenSession()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = _override_get_db
        yield
        broken.dispose()

    def test_endpoints_return_503(self, client, broken_db):
        assert _rsvp(client, 1, 1).status_code == 503
        assert client.get("/api/events/1/rsvps").status_code == 503
        assert client.get("/api/events/1/rsvps/1").status_code == 503

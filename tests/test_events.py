"""Tests for the event catalog.

Covers:
- Event create / list / get / update / delete
- Optimistic locking: version mismatch → 409
- Soft delete: deleted events disappear from reads
- participant_limit cannot drop below the confirmed count
- Derived availability on every read
- Mutation ledger entries for catalog writes
"""
from datetime import timedelta
from tests.conftest import create_test_event, event_payload, register


class TestEventCreate:
    """Event creation and initial state."""

    def test_create_event(self, client):
        resp = client.post("/api/events/?actor=admin", json=event_payload(title="Meetup", participant_limit=30))
        assert resp.status_code == 201
        data = resp.json()
        assert data["title"] == "Meetup"
        assert data["participant_limit"] == 30
        assert data["confirmed_count"] == 0
        assert data["waitlist_count"] == 0
        assert data["availability"] == "Open"
        assert data["catalog_status"] == "Confirmed"
        assert data["version"] == 1

    def test_create_event_keeps_catalog_status(self, client):
        event = create_test_event(client, catalog_status="Waitlist")
        assert event["catalog_status"] == "Waitlist"
        assert event["availability"] == "Open"

    def test_create_event_rejects_non_positive_limit(self, client):
        resp = client.post("/api/events/?actor=admin", json=event_payload(participant_limit=0))
        assert resp.status_code == 422

    def test_create_event_rejects_blank_venue(self, client):
        resp = client.post("/api/events/?actor=admin", json=event_payload(venue=""))
        assert resp.status_code == 422

    def test_create_event_requires_actor(self, client):
        resp = client.post("/api/events/", json=event_payload())
        assert resp.status_code == 422

    def test_create_past_event_is_expired(self, client):
        event = create_test_event(client, starts_in=timedelta(hours=-2))
        assert event["availability"] == "Expired"


class TestEventRead:
    """List and detail reads."""

    def test_get_event(self, client):
        event = create_test_event(client, title="Detail")
        resp = client.get(f"/api/events/{event['event_id']}")
        assert resp.status_code == 200
        assert resp.json()["title"] == "Detail"

    def test_get_unknown_event_404(self, client):
        resp = client.get("/api/events/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"

    def test_get_event_invalid_id_422(self, client):
        resp = client.get("/api/events/not-a-uuid")
        assert resp.status_code == 422

    def test_list_events_ordered_by_start(self, client):
        create_test_event(client, title="Later", starts_in=timedelta(days=5))
        create_test_event(client, title="Sooner", starts_in=timedelta(days=1))
        resp = client.get("/api/events/")
        assert resp.status_code == 200
        titles = [e["title"] for e in resp.json()]
        assert titles == ["Sooner", "Later"]

    def test_list_reflects_counters_and_full_status(self, client):
        event = create_test_event(client, participant_limit=1)
        register(client, event["event_id"], "a@example.com")
        register(client, event["event_id"], "b@example.com")

        listed = client.get("/api/events/").json()[0]
        assert listed["confirmed_count"] == 1
        assert listed["waitlist_count"] == 1
        assert listed["availability"] == "Full"


class TestEventUpdate:
    """Event update with optimistic locking."""

    def test_update_event(self, client):
        event = create_test_event(client)
        resp = client.put(
            f"/api/events/{event['event_id']}?actor=admin",
            json={"title": "Renamed", "venue": "Annex", "version": 1},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Renamed"
        assert data["venue"] == "Annex"
        assert data["version"] == 2

    def test_update_version_mismatch(self, client):
        event = create_test_event(client)
        resp = client.put(
            f"/api/events/{event['event_id']}?actor=admin",
            json={"title": "Stale", "version": 999},
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == "VERSION_CONFLICT"

    def test_update_rejects_blank_text_fields(self, client):
        event = create_test_event(client, title="Keep")
        for field in ("title", "venue", "organiser"):
            resp = client.put(
                f"/api/events/{event['event_id']}?actor=admin",
                json={field: "", "version": 1},
            )
            assert resp.status_code == 422, field

        unchanged = client.get(f"/api/events/{event['event_id']}").json()
        assert unchanged["title"] == "Keep"
        assert unchanged["version"] == 1

    def test_update_cannot_touch_counters(self, client):
        event = create_test_event(client)
        resp = client.put(
            f"/api/events/{event['event_id']}?actor=admin",
            json={"confirmed_count": 50, "version": 1},
        )
        assert resp.status_code == 200
        assert resp.json()["confirmed_count"] == 0

    def test_raise_limit_reopens_full_event(self, client):
        event = create_test_event(client, participant_limit=1)
        register(client, event["event_id"], "a@example.com")
        assert client.get(f"/api/events/{event['event_id']}").json()["availability"] == "Full"

        resp = client.put(
            f"/api/events/{event['event_id']}?actor=admin",
            json={"participant_limit": 3, "version": 1},
        )
        assert resp.status_code == 200
        assert resp.json()["availability"] == "Open"

    def test_limit_cannot_drop_below_confirmed(self, client):
        event = create_test_event(client, participant_limit=3)
        for email in ("a@example.com", "b@example.com"):
            register(client, event["event_id"], email)

        resp = client.put(
            f"/api/events/{event['event_id']}?actor=admin",
            json={"participant_limit": 1, "version": 1},
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == "CAPACITY_EXCEEDED"

        unchanged = client.get(f"/api/events/{event['event_id']}").json()
        assert unchanged["participant_limit"] == 3
        assert unchanged["version"] == 1

    def test_limit_can_drop_to_confirmed(self, client):
        event = create_test_event(client, participant_limit=3)
        for email in ("a@example.com", "b@example.com"):
            register(client, event["event_id"], email)

        resp = client.put(
            f"/api/events/{event['event_id']}?actor=admin",
            json={"participant_limit": 2, "version": 1},
        )
        assert resp.status_code == 200
        assert resp.json()["availability"] == "Full"


class TestEventDelete:
    """Soft delete."""

    def test_delete_hides_event(self, client):
        event = create_test_event(client)
        resp = client.delete(f"/api/events/{event['event_id']}?actor=admin&version=1")
        assert resp.status_code == 200
        assert resp.json()["deleted_at"] is not None
        assert resp.json()["version"] == 2

        assert client.get(f"/api/events/{event['event_id']}").status_code == 404
        assert client.get("/api/events/").json() == []

    def test_delete_version_mismatch(self, client):
        event = create_test_event(client)
        resp = client.delete(f"/api/events/{event['event_id']}?actor=admin&version=7")
        assert resp.status_code == 409

    def test_delete_twice_404(self, client):
        event = create_test_event(client)
        client.delete(f"/api/events/{event['event_id']}?actor=admin&version=1")
        resp = client.delete(f"/api/events/{event['event_id']}?actor=admin&version=2")
        assert resp.status_code == 404

    def test_registration_on_deleted_event_404(self, client):
        event = create_test_event(client)
        client.delete(f"/api/events/{event['event_id']}?actor=admin&version=1")
        resp = register(client, event["event_id"], "late@example.com")
        assert resp.status_code == 404


class TestCatalogMutationLedger:
    """Every catalog write appends an EventMutation."""

    def test_create_update_delete_write_mutations(self, client, db):
        from uuid import UUID
        from app.models.event_mutation import EventMutation

        event = create_test_event(client, title="Before")
        client.put(f"/api/events/{event['event_id']}?actor=alice", json={"title": "After", "version": 1})
        client.delete(f"/api/events/{event['event_id']}?actor=alice&version=2")

        mutations = db.query(EventMutation).filter(
            EventMutation.event_id == UUID(event["event_id"])
        ).all()
        by_action = {m.action_type.value: m for m in mutations}
        assert set(by_action) == {"create", "update", "delete"}
        assert by_action["create"].before_snapshot is None
        assert by_action["create"].actor == "admin"
        assert by_action["update"].before_snapshot["title"] == "Before"
        assert by_action["update"].after_snapshot["title"] == "After"
        assert by_action["update"].actor == "alice"
        assert by_action["delete"].after_snapshot["deleted"] is True

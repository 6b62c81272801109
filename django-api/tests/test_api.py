"""Integration tests for the staffing HTTP API.

Run with: pytest tests/test_api.py -v
"""

import pytest
from rest_framework.test import APIClient

from staffing.stores.django_store import DjangoEntityStore
from staffing.handlers import views
from staffing.stores.interfaces import (
    MAPS,
    MARKERS,
    ROOT_PARTITION,
    SCHEDULES,
    SESSIONS,
    STAFF,
    TIME_SLOT_INFO,
    VENUE,
    Subscription,
)
from staffing.stores.memory_store import InMemoryEntityStore


@pytest.fixture
def store():
    store = DjangoEntityStore()
    store.put(ROOT_PARTITION, SESSIONS, "s1", {"name": "Day one", "ownerId": "alice"})
    store.put(ROOT_PARTITION, SESSIONS, "s2", {"name": "Day two", "ownerId": "alice"})
    store.put(ROOT_PARTITION, SESSIONS, "s9", {"name": "Bob's", "ownerId": "bob"})
    store.put("s1", STAFF, "staff-1", {"id": "staff-1", "name": "Bora", "avatar": "x", "role": "Security"})
    store.put("s1", STAFF, "staff-2", {"id": "staff-2", "name": "Minji", "avatar": "x", "role": "Info"})
    store.put(
        "s1",
        SCHEDULES,
        "sch-1",
        {"day": 0, "time": "09:00", "event": "Gate", "location": "Main", "staffIds": ["staff-1"]},
    )
    return store


@pytest.fixture
def editor(api_client: APIClient, django_user_model) -> APIClient:
    user = django_user_model.objects.create_user(username="alice", password="pw")
    api_client.force_authenticate(user)
    return api_client


@pytest.mark.django_db
class TestSessions:
    """Tests for /api/sessions"""

    def test_requires_authentication(self, api_client: APIClient, store):
        response = api_client.get("/api/sessions")
        assert response.status_code == 403

    def test_lists_own_sessions(self, editor, store):
        response = editor.get("/api/sessions")
        assert response.status_code == 200
        assert [s["id"] for s in response.data["results"]] == ["s1", "s2"]
        assert response.data["activeSessionId"] == "s1"

    def test_switch_active_session(self, editor, store):
        response = editor.put("/api/sessions/active", {"session": "s2"}, format="json")
        assert response.status_code == 200
        assert editor.get("/api/sessions").data["activeSessionId"] == "s2"

    def test_rename_empty_name_is_validation_error(self, editor, store):
        response = editor.patch("/api/sessions/s1", {"name": " "}, format="json")
        assert response.status_code == 400
        assert response.data["code"] == "VALIDATION_FAILED"

    def test_rename_other_owner_session_not_found(self, editor, store):
        response = editor.patch("/api/sessions/s9", {"name": "Mine"}, format="json")
        assert response.status_code == 404

    def test_import_requires_confirmation(self, editor, store):
        response = editor.post("/api/sessions/s2/import", {"source": "s1"}, format="json")
        assert response.status_code == 409
        assert response.data["code"] == "CONFIRMATION_REQUIRED"
        assert store.snapshot("s2", STAFF) == {}

    def test_import_with_confirmation(self, editor, store):
        response = editor.post("/api/sessions/s2/import", {"source": "s1", "confirm": True}, format="json")
        assert response.status_code == 204
        assert sorted(store.snapshot("s2", STAFF)) == ["staff-1", "staff-2"]


@pytest.mark.django_db
class TestSlots:
    """Tests for slot views and marker moves."""

    def test_slot_view_includes_derived_marker(self, editor, store):
        response = editor.get("/api/sessions/s1/slots/0/09:00")
        assert response.status_code == 200
        (marker,) = response.data["markers"]
        assert marker["id"] == "default-marker-staff-1-0-09:00"
        assert marker["isDerived"] is True
        assert [s["id"] for s in response.data["unassignedStaff"]] == ["staff-2"]

    def test_invalid_slot_rejected(self, editor, store):
        response = editor.get("/api/sessions/s1/slots/7/09:00")
        assert response.status_code == 400

    def test_moving_derived_marker_persists_it(self, editor, store):
        response = editor.put(
            "/api/sessions/s1/markers/default-marker-staff-1-0-09:00",
            {"x": 120, "y": 40, "staffIds": ["staff-1"], "day": 0, "time": "09:00"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["id"] == "marker-staff-1-0-0900"
        assert response.data["x"] == 100.0
        assert store.get("s1", MARKERS, "marker-staff-1-0-0900") is not None

    def test_copy_slot_requires_confirmation(self, editor, store):
        payload = {"source": {"day": 0, "time": "09:00"}, "target": {"day": 1, "time": "09:00"}}
        response = editor.post("/api/sessions/s1/slots/copy", payload, format="json")
        assert response.status_code == 409

        response = editor.post("/api/sessions/s1/slots/copy", {**payload, "confirm": True}, format="json")
        assert response.status_code == 204
        copied = [d for d in store.snapshot("s1", SCHEDULES).values() if d["day"] == 1]
        assert [d["event"] for d in copied] == ["Gate"]

    def test_toggle_schedule(self, editor, store):
        response = editor.post("/api/sessions/s1/schedules/sch-1/toggle")
        assert response.data == {"id": "sch-1", "isCompleted": True}

    def test_toggle_unknown_schedule(self, editor, store):
        response = editor.post("/api/sessions/s1/schedules/nope/toggle")
        assert response.status_code == 404
        assert response.data["code"] == "SCHEDULE_NOT_FOUND"

    def test_delete_staff_requires_confirmation(self, editor, store):
        response = editor.delete("/api/sessions/s1/staff/staff-1", {}, format="json")
        assert response.status_code == 409
        assert store.get("s1", STAFF, "staff-1") is not None

        response = editor.delete("/api/sessions/s1/staff/staff-1", {"confirm": True}, format="json")
        assert response.status_code == 204
        assert store.get("s1", STAFF, "staff-1") is None
        assert store.get("s1", SCHEDULES, "sch-1")["staffIds"] == []


@pytest.mark.django_db
class TestPublicViewer:
    """Tests for /api/public"""

    def test_no_public_session(self, api_client, store):
        response = api_client.get("/api/public")
        assert response.status_code == 404
        assert response.data["code"] == "no_public_session"

    def test_shared_session_is_readable_anonymously(self, editor, api_client, store):
        editor.put("/api/sessions/public", {"session": "s1"}, format="json")

        response = APIClient().get("/api/public")

        assert response.status_code == 200
        assert response.data["session"] == "s1"
        assert [s["name"] for s in response.data["staff"]] == ["Bora", "Minji"]

    def test_editor_sees_public_session(self, editor, store):
        editor.put("/api/sessions/public", {"session": "s2"}, format="json")
        assert editor.get("/api/sessions/public").data == {"session": "s2"}

    def test_stop_sharing(self, editor, store):
        editor.put("/api/sessions/public", {"session": "s1"}, format="json")
        editor.put("/api/sessions/public", {"session": "none"}, format="json")

        response = APIClient().get("/api/public")

        assert response.status_code == 404
        assert store.get("s1", VENUE, "main-venue")["isPublic"] is False

    def test_viewer_payload_carries_maps_and_titles(self, editor, store):
        store.put("s1", MAPS, "day0-0900", {"day": 0, "time": "09:00", "mapImageUrl": "/hall.png"})
        store.put("s1", TIME_SLOT_INFO, "day0-0900", {"day": 0, "time": "09:00", "title": "Doors"})
        editor.put("/api/sessions/public", {"session": "s1"}, format="json")

        response = APIClient().get("/api/public")

        assert response.status_code == 200
        assert response.data["maps"][0]["mapImageUrl"] == "/hall.png"
        assert response.data["timeSlotInfos"][0]["title"] == "Doors"
        assert response.data["scheduleTemplates"] == []
        assert response.data["venueName"] == ""

    def test_public_slot_view(self, editor, store):
        """A viewer gets the same reconciled slot as an editor."""
        store.put("s1", MAPS, "day0-0900", {"day": 0, "time": "09:00", "mapImageUrl": "/hall.png"})
        store.put("s1", TIME_SLOT_INFO, "day0-0900", {"day": 0, "time": "09:00", "title": "Doors"})
        editor.put("/api/sessions/public", {"session": "s1"}, format="json")

        response = APIClient().get("/api/public/slots/0/09:00")

        assert response.status_code == 200
        assert response.data["session"] == "s1"
        assert response.data["mapImageUrl"] == "/hall.png"
        assert response.data["title"] == "Doors"
        assert [m["id"] for m in response.data["markers"]] == ["default-marker-staff-1-0-09:00"]

    def test_public_slot_view_rejects_invalid_slot(self, editor, store):
        editor.put("/api/sessions/public", {"session": "s1"}, format="json")
        response = APIClient().get("/api/public/slots/0/09:15")
        assert response.status_code == 400

    def test_public_slot_view_without_public_session(self, api_client, store):
        response = api_client.get("/api/public/slots/0/09:00")
        assert response.status_code == 404

    def test_loading_is_not_reported_as_failure(self, api_client, monkeypatch):
        """A projection whose snapshots have not arrived yet answers 503 with a loading message."""

        class SilentStore(InMemoryEntityStore):
            def subscribe(self, partition, collection, on_snapshot, on_error):
                return Subscription(lambda: None)

        silent = SilentStore()
        silent.put("s1", VENUE, "main-venue", {"name": "Arena", "notification": "", "isPublic": True})
        monkeypatch.setattr(views, "get_store", lambda: silent)

        response = api_client.get("/api/public")

        assert response.status_code == 503
        assert response.data["code"] == "loading"
        assert response.data["message"] != views.PROJECTION_STATUS[views.ProjectionStatus.LOAD_FAILED][1]

"""Unit tests for the public viewer projection.

Run with: pytest tests/test_public_projection.py -v
"""

from django.core.cache import cache

from staffing.services.public_projection import (
    PUBLIC_SESSION_CACHE_KEY,
    ProjectionStatus,
    PublicProjectionGate,
    find_public_session_id,
)
from staffing.stores.interfaces import STAFF, VENUE
from staffing.stores.memory_store import InMemoryEntityStore


def make_public(store, session_id, is_public=True):
    store.put(session_id, VENUE, "main-venue", {"name": "Arena", "notification": "Hi", "isPublic": is_public})


class TestFindPublicSession:
    def test_none_is_cached_as_empty(self, store):
        assert find_public_session_id(store) is None
        assert cache.get(PUBLIC_SESSION_CACHE_KEY) == ""

    def test_cached_answer_is_reused(self, store):
        cache.set(PUBLIC_SESSION_CACHE_KEY, "s2")
        assert find_public_session_id(store) == "s2"


class TestPublicProjectionGate:
    """Tests for PublicProjectionGate."""

    def test_no_public_session(self, store):
        with PublicProjectionGate(store) as gate:
            assert gate.status is ProjectionStatus.NO_PUBLIC_SESSION
            assert gate.data is None

    def test_public_session_is_readable(self, store):
        make_public(store, "s1")
        store.put("s1", STAFF, "a", {"name": "A", "avatar": "x"})

        with PublicProjectionGate(store) as gate:
            assert gate.status is ProjectionStatus.READY
            assert gate.session_id == "s1"
            assert [s.id for s in gate.data.staff] == ["a"]
            assert gate.data.notification == "Hi"

    def test_unpublished_while_open_drops_data(self, store):
        """Scenario: an administrator stops sharing while a viewer is watching."""
        make_public(store, "s1")
        gate = PublicProjectionGate(store).open()
        assert gate.status is ProjectionStatus.READY

        store.patch("s1", VENUE, "main-venue", {"isPublic": False})

        assert gate.status is ProjectionStatus.NO_LONGER_PUBLIC
        assert gate.data is None
        assert store.hub.listener_count("s1") == 0
        gate.close()

    def test_unreadable_session_is_access_denied(self):
        store = InMemoryEntityStore(can_read=lambda partition: partition != "s1")
        make_public(store, "s1")
        with PublicProjectionGate(store) as gate:
            assert gate.status is ProjectionStatus.ACCESS_DENIED
            assert gate.data is None

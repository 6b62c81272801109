"""Tests for the ORM-backed store, signals and cache behavior.

Run with: pytest tests/test_cache.py -v
"""

import pytest
from django.core.cache import cache

from staffing.domain.errors import BatchWriteError
from staffing.models import Document
from staffing.services.public_projection import PUBLIC_SESSION_CACHE_KEY, find_public_session_id
from staffing.stores.django_store import DjangoEntityStore, hub
from staffing.stores.interfaces import STAFF, VENUE


@pytest.fixture
def store():
    return DjangoEntityStore()


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on document changes."""

    def test_venue_save_invalidates_public_session_cache(self, store):
        """Saving a venue document invalidates the public:session cache key."""
        cache.set(PUBLIC_SESSION_CACHE_KEY, "s9")
        store.put("s1", VENUE, "main-venue", {"isPublic": True})
        assert cache.get(PUBLIC_SESSION_CACHE_KEY) is None
        assert find_public_session_id(store) == "s1"

    def test_venue_delete_invalidates_public_session_cache(self, store):
        store.put("s1", VENUE, "main-venue", {"isPublic": True})
        cache.set(PUBLIC_SESSION_CACHE_KEY, "s1")
        store.delete("s1", VENUE, "main-venue")
        assert cache.get(PUBLIC_SESSION_CACHE_KEY) is None

    def test_other_collections_keep_cache(self, store):
        cache.set(PUBLIC_SESSION_CACHE_KEY, "s1")
        store.put("s1", STAFF, "a", {"name": "A"})
        assert cache.get(PUBLIC_SESSION_CACHE_KEY) == "s1"


@pytest.mark.django_db
class TestDjangoEntityStore:
    """Tests for DjangoEntityStore."""

    def test_patch_merges_json(self, store):
        store.put("s1", STAFF, "a", {"name": "A", "role": "Info"})
        store.patch("s1", STAFF, "a", {"role": "Medical"})
        assert store.get("s1", STAFF, "a") == {"name": "A", "role": "Medical"}

    def test_failed_batch_rolls_back(self, store):
        batch = store.batch()
        batch.set("s1", STAFF, "a", {"name": "A"})
        batch.patch("s1", STAFF, "missing", {"name": "X"})
        with pytest.raises(BatchWriteError):
            batch.commit()
        assert not Document.objects.filter(partition="s1").exists()

    def test_find_in_group_filters_json_fields(self, store):
        store.put("s1", VENUE, "main-venue", {"isPublic": True})
        store.put("s2", VENUE, "main-venue", {"isPublic": False})
        assert [p for p, _, _ in store.find_in_group(VENUE, isPublic=True)] == ["s1"]

    def test_subscribers_notified_after_commit(self, store, django_capture_on_commit_callbacks):
        received = []
        subscription = store.subscribe("s1", STAFF, received.append, pytest.fail)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                store.batch().set("s1", STAFF, "a", {"name": "A"}).set("s1", STAFF, "b", {"name": "B"}).commit()
        finally:
            subscription.close()

        assert received[0] == {}
        assert sorted(received[-1]) == ["a", "b"]
        assert hub.listener_count("s1") == 0

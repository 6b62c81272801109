"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from staffing.domain.errors import BatchWriteError
from staffing.services.venue_data import VenueDataAggregate
from staffing.stores.interfaces import ROOT_PARTITION, SESSIONS
from staffing.stores.memory_store import InMemoryEntityStore

OWNER = "alice"


class FailingBatchStore(InMemoryEntityStore):
    """In-memory store whose next commit can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_next = False
        self.commits = 0

    def commit(self, ops):
        if self.fail_next:
            self.fail_next = False
            raise BatchWriteError()
        self.commits += 1
        super().commit(ops)


def add_session(store, session_id: str, name: str = "", owner_id: str = OWNER) -> None:
    store.put(ROOT_PARTITION, SESSIONS, session_id, {"name": name or session_id, "ownerId": owner_id})


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def store() -> FailingBatchStore:
    store = FailingBatchStore()
    add_session(store, "s1", "Day one")
    add_session(store, "s2", "Day two")
    return store


@pytest.fixture
def aggregate(store):
    aggregate = VenueDataAggregate(store, "s1").open()
    yield aggregate
    aggregate.close()

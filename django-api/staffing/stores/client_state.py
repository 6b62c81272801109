"""Client-local persistent state (the browser-context key/value store).

Holds the active session id for one client. Values are not synchronized
through the entity store; other tabs learn about changes only through
the broadcast channel or by reading at their own start-up.
"""

from abc import ABC, abstractmethod

from django.core.cache import cache

ACTIVE_SESSION_KEY = "activeSessionId"


class ClientStateStore(ABC):
    """Interface for one client's local key/value storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class InMemoryClientState(ClientStateStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class CacheClientState(ClientStateStore):
    """Client state kept in the Django cache under a per-client namespace."""

    def __init__(self, client_id: str) -> None:
        self._prefix = f"client:{client_id}:"

    def get(self, key: str) -> str | None:
        return cache.get(self._prefix + key)

    def set(self, key: str, value: str) -> None:
        cache.set(self._prefix + key, value, timeout=None)

    def remove(self, key: str) -> None:
        cache.delete(self._prefix + key)

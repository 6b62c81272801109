"""Same-origin publish/subscribe channel between tabs of one client.

Messages are ``{"key": ..., "newValue": ...}``. Delivery is at least once
and receivers keep only the last value per key; no ordering is promised
between senders.
"""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Message = dict[str, Any]
Handler = Callable[[Message], None]

_channels: dict[str, "BroadcastChannel"] = {}


class BroadcastChannel:
    """Named channel; one instance per name per process."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[Handler] = []

    @classmethod
    def named(cls, name: str) -> "BroadcastChannel":
        if name not in _channels:
            _channels[name] = cls(name)
        return _channels[name]

    def add_listener(self, handler: Handler) -> Callable[[], None]:
        self._handlers.append(handler)

        def remove() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return remove

    def post(self, key: str, new_value: Any, sender: Handler | None = None) -> None:
        """Deliver to every listener except ``sender`` (a tab does not hear itself)."""
        message = {"key": key, "newValue": new_value}
        for handler in list(self._handlers):
            if handler is not sender:
                handler(message)


class LastValueInbox:
    """Receiver side: remembers the newest value seen per key."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

    def __call__(self, message: Message) -> None:
        key = message.get("key")
        if not key:
            logger.warning("Ignoring malformed broadcast message: %r", message)
            return
        self.values[key] = message.get("newValue")

    def latest(self, key: str) -> Any:
        return self.values.get(key)

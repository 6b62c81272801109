"""Fan-out of collection change notifications to snapshot listeners."""

import copy
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass

from staffing.stores.interfaces import ErrorCallback, Snapshot, SnapshotCallback, Subscription

logger = logging.getLogger(__name__)

CollectionKey = tuple[str, str]


@dataclass(eq=False)
class _Listener:
    on_snapshot: SnapshotCallback
    on_error: ErrorCallback


class SubscriptionHub:
    """Registry of listeners per (partition, collection).

    ``publish`` reloads the collection through ``loader`` and hands each
    listener a full snapshot.
    """

    def __init__(self, loader: Callable[[str, str], Snapshot]) -> None:
        self._loader = loader
        self._listeners: dict[CollectionKey, list[_Listener]] = defaultdict(list)

    def add(
        self,
        partition: str,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        key = (partition, collection)
        listener = _Listener(on_snapshot, on_error)
        self._listeners[key].append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(key, None)

        return Subscription(unsubscribe)

    def listener_count(self, partition: str | None = None) -> int:
        return sum(
            len(listeners)
            for (p, _), listeners in self._listeners.items()
            if partition is None or p == partition
        )

    def publish(self, partition: str, collection: str) -> None:
        key = (partition, collection)
        listeners = list(self._listeners.get(key, ()))
        if not listeners:
            return
        try:
            snapshot = self._loader(partition, collection)
        except Exception as exc:
            logger.warning("Snapshot load failed for %s/%s: %s", partition, collection, exc)
            for listener in listeners:
                listener.on_error(exc)
            return
        for listener in listeners:
            # Each listener gets its own copy so one cannot mutate another's view.
            listener.on_snapshot(copy.deepcopy(snapshot))

    def fail(self, exc: Exception, partition: str | None = None) -> None:
        """Report a store-side error to every listener (optionally of one partition)."""
        for (p, _), listeners in list(self._listeners.items()):
            if partition is None or p == partition:
                for listener in list(listeners):
                    listener.on_error(exc)

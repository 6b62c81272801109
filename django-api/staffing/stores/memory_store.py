"""In-process implementation of the EntityStore.

Used by single-process deployments and by the test suite. Batches are
applied to a copy of the touched collections and swapped in only when
every op succeeded.
"""

import copy
import logging
from collections.abc import Callable
from typing import Any

from staffing.domain.errors import BatchWriteError
from staffing.stores.interfaces import (
    Document,
    EntityStore,
    ErrorCallback,
    OpKind,
    Snapshot,
    SnapshotCallback,
    StoreAccessError,
    Subscription,
    WriteOp,
)
from staffing.stores.subscriptions import CollectionKey, SubscriptionHub

logger = logging.getLogger(__name__)


class InMemoryEntityStore(EntityStore):
    """Dict-backed store with synchronous snapshot delivery."""

    def __init__(self, can_read: Callable[[str], bool] | None = None) -> None:
        self._collections: dict[CollectionKey, dict[str, Document]] = {}
        self._can_read = can_read or (lambda partition: True)
        self.hub = SubscriptionHub(self.snapshot)

    def get(self, partition: str, collection: str, doc_id: str) -> Document | None:
        doc = self._collections.get((partition, collection), {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def snapshot(self, partition: str, collection: str) -> Snapshot:
        return copy.deepcopy(self._collections.get((partition, collection), {}))

    def find_in_group(self, collection: str, **filters: Any) -> list[tuple[str, str, Document]]:
        matches = []
        for (partition, name), docs in sorted(self._collections.items()):
            if name != collection:
                continue
            for doc_id, doc in sorted(docs.items()):
                if all(doc.get(k) == v for k, v in filters.items()):
                    matches.append((partition, doc_id, copy.deepcopy(doc)))
        return matches

    def partitions(self) -> list[str]:
        return sorted({partition for partition, _ in self._collections})

    def subscribe(
        self,
        partition: str,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        if not self._can_read(partition):
            on_error(StoreAccessError(f"read denied for partition {partition!r}"))
            return Subscription(lambda: None)
        subscription = self.hub.add(partition, collection, on_snapshot, on_error)
        on_snapshot(self.snapshot(partition, collection))
        return subscription

    def commit(self, ops: tuple[WriteOp, ...]) -> None:
        touched = {(op.partition, op.collection) for op in ops}
        staged = {key: copy.deepcopy(self._collections.get(key, {})) for key in touched}
        try:
            for op in ops:
                self._apply(staged[(op.partition, op.collection)], op)
        except Exception as exc:
            logger.warning("Batch of %d ops rejected: %s", len(ops), exc)
            raise BatchWriteError() from exc

        for key, docs in staged.items():
            if docs:
                self._collections[key] = docs
            else:
                self._collections.pop(key, None)
        for partition, collection in sorted(touched):
            self.hub.publish(partition, collection)

    def _apply(self, docs: dict[str, Document], op: WriteOp) -> None:
        if op.kind is OpKind.SET:
            docs[op.doc_id] = copy.deepcopy(op.data)
        elif op.kind is OpKind.PATCH:
            if op.doc_id not in docs:
                raise KeyError(f"{op.collection}/{op.doc_id} does not exist")
            docs[op.doc_id].update(copy.deepcopy(op.data))
        elif op.kind is OpKind.DELETE:
            docs.pop(op.doc_id, None)

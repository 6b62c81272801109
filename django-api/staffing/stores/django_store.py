"""Django ORM implementation of the EntityStore.

Batches run inside ``transaction.atomic``. Subscriptions are fed by the
post_save/post_delete receivers in staffing/signals.py, which publish on
the process-wide hub once the surrounding transaction commits.
"""

import logging
from typing import Any

from django.db import DatabaseError, transaction

from staffing.domain.errors import BatchWriteError
from staffing.models import Document as DocumentRecord
from staffing.stores.interfaces import (
    Document,
    EntityStore,
    ErrorCallback,
    OpKind,
    Snapshot,
    SnapshotCallback,
    StoreUnavailableError,
    Subscription,
    WriteOp,
)
from staffing.stores.subscriptions import SubscriptionHub

logger = logging.getLogger(__name__)


def _load_snapshot(partition: str, collection: str) -> Snapshot:
    rows = DocumentRecord.objects.filter(partition=partition, collection=collection)
    return {row.doc_id: row.data for row in rows}


hub = SubscriptionHub(_load_snapshot)


class DjangoEntityStore(EntityStore):
    """Database-backed entity store using Django ORM."""

    def get(self, partition: str, collection: str, doc_id: str) -> Document | None:
        row = DocumentRecord.objects.filter(
            partition=partition, collection=collection, doc_id=doc_id
        ).first()
        return row.data if row else None

    def snapshot(self, partition: str, collection: str) -> Snapshot:
        return _load_snapshot(partition, collection)

    def find_in_group(self, collection: str, **filters: Any) -> list[tuple[str, str, Document]]:
        lookups = {f"data__{field}": value for field, value in filters.items()}
        rows = DocumentRecord.objects.filter(collection=collection, **lookups)
        return [(row.partition, row.doc_id, row.data) for row in rows]

    def subscribe(
        self,
        partition: str,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        try:
            current = _load_snapshot(partition, collection)
        except DatabaseError as exc:
            on_error(StoreUnavailableError(str(exc)))
            return Subscription(lambda: None)
        subscription = hub.add(partition, collection, on_snapshot, on_error)
        on_snapshot(current)
        return subscription

    def commit(self, ops: tuple[WriteOp, ...]) -> None:
        try:
            with transaction.atomic():
                for op in ops:
                    self._apply(op)
        except (DatabaseError, DocumentRecord.DoesNotExist) as exc:
            logger.warning("Batch of %d ops rolled back: %s", len(ops), exc)
            raise BatchWriteError() from exc

    def _apply(self, op: WriteOp) -> None:
        key = {"partition": op.partition, "collection": op.collection, "doc_id": op.doc_id}
        if op.kind is OpKind.SET:
            DocumentRecord.objects.update_or_create(**key, defaults={"data": op.data})
        elif op.kind is OpKind.PATCH:
            row = DocumentRecord.objects.select_for_update().get(**key)
            row.data = {**row.data, **op.data}
            row.save(update_fields=["data", "updated_at"])
        elif op.kind is OpKind.DELETE:
            DocumentRecord.objects.filter(**key).delete()

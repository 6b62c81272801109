"""Store interfaces (repository pattern).

Stores must be swappable. They deal in plain documents (dicts keyed by
string id) partitioned by session; services convert to domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

Document = dict[str, Any]
Snapshot = dict[str, Document]
SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[Exception], None]

# Partition key for collections that are not scoped to a session.
ROOT_PARTITION = ""

SESSIONS = "sessions"
VENUE = "venue"
STAFF = "staff"
ROLES = "roles"
SCHEDULES = "schedules"
MARKERS = "markers"
MAPS = "maps"
SCHEDULE_TEMPLATES = "scheduleTemplates"
POSITIONS = "positions"
TIME_SLOT_INFO = "timeSlotInfo"

SESSION_COLLECTIONS = (
    VENUE,
    STAFF,
    ROLES,
    SCHEDULES,
    MARKERS,
    MAPS,
    SCHEDULE_TEMPLATES,
    POSITIONS,
    TIME_SLOT_INFO,
)


class StoreAccessError(Exception):
    """The store refused access to a partition."""


class StoreUnavailableError(Exception):
    """The store could not be reached."""


class OpKind(Enum):
    SET = "set"
    PATCH = "patch"
    DELETE = "delete"


@dataclass(frozen=True)
class WriteOp:
    kind: OpKind
    partition: str
    collection: str
    doc_id: str
    data: Document = field(default_factory=dict)


class WriteBatch:
    """Collects writes and commits them atomically: all applied or none."""

    def __init__(self, store: "EntityStore") -> None:
        self._store = store
        self._ops: list[WriteOp] = []

    def set(self, partition: str, collection: str, doc_id: str, data: Document) -> "WriteBatch":
        self._ops.append(WriteOp(OpKind.SET, partition, collection, doc_id, dict(data)))
        return self

    def patch(self, partition: str, collection: str, doc_id: str, data: Document) -> "WriteBatch":
        self._ops.append(WriteOp(OpKind.PATCH, partition, collection, doc_id, dict(data)))
        return self

    def delete(self, partition: str, collection: str, doc_id: str) -> "WriteBatch":
        self._ops.append(WriteOp(OpKind.DELETE, partition, collection, doc_id))
        return self

    @property
    def ops(self) -> tuple[WriteOp, ...]:
        return tuple(self._ops)

    def __len__(self) -> int:
        return len(self._ops)

    def commit(self) -> None:
        """Apply every collected write.

        Raises:
            BatchWriteError: If any write fails; none of them is visible.
        """
        if not self._ops:
            return
        self._store.commit(self.ops)
        self._ops.clear()


class Subscription:
    """Handle returned by ``subscribe``; ``close`` is idempotent."""

    def __init__(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe = unsubscribe
        self.active = True

    def close(self) -> None:
        if self.active:
            self.active = False
            self._unsubscribe()


class EntityStore(ABC):
    """Interface for session-partitioned document persistence."""

    @abstractmethod
    def get(self, partition: str, collection: str, doc_id: str) -> Document | None:
        """Return a copy of one document, or None if not found."""
        ...

    @abstractmethod
    def snapshot(self, partition: str, collection: str) -> Snapshot:
        """Return a copy of every document of a collection, keyed by id."""
        ...

    @abstractmethod
    def find_in_group(self, collection: str, **filters: Any) -> list[tuple[str, str, Document]]:
        """Scan a collection across all partitions.

        Returns (partition, doc_id, document) for documents whose fields
        equal every filter value.
        """
        ...

    @abstractmethod
    def subscribe(
        self,
        partition: str,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        """Deliver the current snapshot now and a full snapshot after every change."""
        ...

    @abstractmethod
    def commit(self, ops: tuple[WriteOp, ...]) -> None:
        """Apply ops atomically.

        Raises:
            BatchWriteError: If any op fails; no op is visible.
        """
        ...

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def put(self, partition: str, collection: str, doc_id: str, data: Document) -> None:
        self.batch().set(partition, collection, doc_id, data).commit()

    def patch(self, partition: str, collection: str, doc_id: str, data: Document) -> None:
        self.batch().patch(partition, collection, doc_id, data).commit()

    def delete(self, partition: str, collection: str, doc_id: str) -> None:
        self.batch().delete(partition, collection, doc_id).commit()

"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Documents in the entity store are plain dicts keyed in camelCase;
``from_document``/``to_document`` are the only translation points.
Django ORM models are in staffing/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

from staffing.domain.value_objects import CENTER, DERIVED_MARKER_PREFIX, Point, Slot

VENUE_DOC_ID = "main-venue"


class StaffRole(Enum):
    SECURITY = "Security"
    MEDICAL = "Medical"
    OPERATIONS = "Operations"
    INFO = "Info"


DEFAULT_STAFF_ROLE = StaffRole.OPERATIONS


@dataclass(frozen=True)
class Session:
    """A tenant partition holding one event's data."""

    id: str
    name: str
    owner_id: str

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(id=doc_id, name=doc.get("name", ""), owner_id=doc.get("ownerId", ""))

    def to_document(self) -> dict[str, Any]:
        return {"name": self.name, "ownerId": self.owner_id}


@dataclass(frozen=True)
class VenueInfo:
    """The per-session ``venue`` document."""

    name: str = ""
    notification: str = ""
    is_public: bool = False

    @classmethod
    def from_document(cls, doc: dict[str, Any] | None) -> Self:
        if not doc:
            return cls()
        return cls(
            name=doc.get("name", ""),
            notification=doc.get("notification", ""),
            is_public=bool(doc.get("isPublic", False)),
        )

    def to_document(self) -> dict[str, Any]:
        return {"name": self.name, "notification": self.notification, "isPublic": self.is_public}


@dataclass(frozen=True)
class StaffMember:
    id: str
    name: str
    avatar: str
    role: StaffRole = DEFAULT_STAFF_ROLE
    position_id: str | None = None

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        try:
            role = StaffRole(doc.get("role"))
        except ValueError:
            role = DEFAULT_STAFF_ROLE
        return cls(
            id=doc_id,
            name=doc.get("name", ""),
            avatar=doc.get("avatar", ""),
            role=role,
            position_id=doc.get("positionId"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "avatar": self.avatar,
            "role": self.role.value,
            "positionId": self.position_id,
        }


@dataclass(frozen=True)
class ScheduleItem:
    id: str
    day: int
    time: str
    event: str
    location: str = ""
    staff_ids: tuple[str, ...] = ()
    role_name: str | None = None
    is_completed: bool = False

    @property
    def slot(self) -> Slot:
        return Slot(self.day, self.time)

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(
            id=doc_id,
            day=int(doc.get("day", 0)),
            time=doc.get("time", ""),
            event=doc.get("event", ""),
            location=doc.get("location") or "",
            staff_ids=tuple(doc.get("staffIds") or ()),
            role_name=doc.get("roleName"),
            is_completed=bool(doc.get("isCompleted", False)),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "day": self.day,
            "time": self.time,
            "event": self.event,
            "location": self.location,
            "staffIds": list(self.staff_ids),
            "roleName": self.role_name,
            "isCompleted": self.is_completed,
        }


@dataclass(frozen=True)
class PersistedMarker:
    """A marker stored in the entity store. ``staff_ids`` is never empty."""

    id: str
    staff_ids: tuple[str, ...]
    day: int
    time: str
    x: float
    y: float

    is_derived = False

    def __post_init__(self) -> None:
        if not self.staff_ids:
            raise ValueError("A marker must carry at least one staff member")
        point = Point(self.x, self.y)
        object.__setattr__(self, "x", point.x)
        object.__setattr__(self, "y", point.y)

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(
            id=doc_id,
            staff_ids=tuple(doc.get("staffIds") or ()),
            day=int(doc.get("day", 0)),
            time=doc.get("time", ""),
            x=doc.get("x", CENTER.x),
            y=doc.get("y", CENTER.y),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "staffIds": list(self.staff_ids),
            "day": self.day,
            "time": self.time,
            "x": self.x,
            "y": self.y,
        }


@dataclass(frozen=True)
class DerivedMarker:
    """Placeholder for a scheduled staff member with no persisted marker.

    Never stored; sits at the map center until a drag promotes it.
    """

    staff_id: str
    day: int
    time: str

    is_derived = True
    x = CENTER.x
    y = CENTER.y

    @property
    def id(self) -> str:
        return f"{DERIVED_MARKER_PREFIX}{self.staff_id}-{self.day}-{self.time}"

    @property
    def staff_ids(self) -> tuple[str, ...]:
        return (self.staff_id,)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "staffIds": [self.staff_id],
            "day": self.day,
            "time": self.time,
            "x": self.x,
            "y": self.y,
        }


Marker = PersistedMarker | DerivedMarker


@dataclass(frozen=True)
class PersistedMarkerRef:
    marker_id: str


@dataclass(frozen=True)
class DerivedMarkerRef:
    marker_id: str


MarkerRef = PersistedMarkerRef | DerivedMarkerRef


def parse_marker_ref(marker_id: str) -> MarkerRef:
    """Tag an incoming marker id as persisted or derived.

    This is the only place that looks at the id convention; callers
    branch on the returned type.
    """
    if marker_id.startswith(DERIVED_MARKER_PREFIX):
        return DerivedMarkerRef(marker_id)
    return PersistedMarkerRef(marker_id)


def promoted_marker_id(staff_id: str, slot: Slot) -> str:
    """Stable id a derived marker receives when first persisted."""
    return f"marker-{staff_id}-{slot.day}-{slot.compact_time}"


@dataclass(frozen=True)
class MapInfo:
    id: str
    day: int
    time: str
    map_image_url: str

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(
            id=doc_id,
            day=int(doc.get("day", 0)),
            time=doc.get("time", ""),
            map_image_url=doc.get("mapImageUrl", ""),
        )

    def to_document(self) -> dict[str, Any]:
        return {"day": self.day, "time": self.time, "mapImageUrl": self.map_image_url}


@dataclass(frozen=True)
class TimeSlotInfo:
    id: str
    day: int
    time: str
    title: str

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(
            id=doc_id,
            day=int(doc.get("day", 0)),
            time=doc.get("time", ""),
            title=doc.get("title", ""),
        )

    def to_document(self) -> dict[str, Any]:
        return {"day": self.day, "time": self.time, "title": self.title}


@dataclass(frozen=True)
class Task:
    """One entry of a role or template. Identity is the event text."""

    event: str
    location: str | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Self:
        return cls(event=doc.get("event", ""), location=doc.get("location") or None)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"event": self.event}
        if self.location:
            doc["location"] = self.location
        return doc


def _tasks_from(raw: Any) -> tuple[Task, ...]:
    return tuple(Task.from_document(t) for t in raw or ())


@dataclass(frozen=True)
class Role:
    """Day-scoped bundle of tasks assignable to staff."""

    id: str
    name: str
    day: int
    tasks: tuple[Task, ...] = ()
    order: int | None = None

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(
            id=doc_id,
            name=doc.get("name", ""),
            day=int(doc.get("day", 0)),
            tasks=_tasks_from(doc.get("tasks")),
            order=doc.get("order"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "day": self.day,
            "tasks": [t.to_document() for t in self.tasks],
            "order": self.order,
        }


@dataclass(frozen=True)
class ScheduleTemplate:
    """Day-agnostic task bundle, copied into a Role for a given day."""

    id: str
    name: str
    tasks: tuple[Task, ...] = ()

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(id=doc_id, name=doc.get("name", ""), tasks=_tasks_from(doc.get("tasks")))

    def to_document(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "tasks": [t.to_document() for t in self.tasks]}


@dataclass(frozen=True)
class Position:
    id: str
    name: str
    color: str

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> Self:
        return cls(id=doc_id, name=doc.get("name", ""), color=doc.get("color", ""))

    def to_document(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}


@dataclass(frozen=True)
class VenueData:
    """Composed, deterministically ordered view of one session."""

    staff: tuple[StaffMember, ...] = ()
    roles: tuple[Role, ...] = ()
    schedule: tuple[ScheduleItem, ...] = ()
    markers: tuple[PersistedMarker, ...] = ()
    maps: tuple[MapInfo, ...] = ()
    schedule_templates: tuple[ScheduleTemplate, ...] = ()
    positions: tuple[Position, ...] = ()
    time_slot_infos: tuple[TimeSlotInfo, ...] = ()
    venue: VenueInfo = field(default_factory=VenueInfo)

    @property
    def notification(self) -> str:
        return self.venue.notification

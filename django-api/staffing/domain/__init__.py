from staffing.domain.models import (
    DerivedMarker,
    MapInfo,
    Marker,
    PersistedMarker,
    Position,
    Role,
    ScheduleItem,
    ScheduleTemplate,
    Session,
    StaffMember,
    StaffRole,
    Task,
    TimeSlotInfo,
    VenueData,
    VenueInfo,
)
from staffing.domain.value_objects import DAYS, TIME_SLOTS, ImageReference, MapBounds, Point, Slot

__all__ = [
    "Session",
    "VenueInfo",
    "StaffMember",
    "StaffRole",
    "ScheduleItem",
    "PersistedMarker",
    "DerivedMarker",
    "Marker",
    "MapInfo",
    "TimeSlotInfo",
    "Role",
    "Task",
    "ScheduleTemplate",
    "Position",
    "VenueData",
    "Slot",
    "Point",
    "MapBounds",
    "ImageReference",
    "DAYS",
    "TIME_SLOTS",
]

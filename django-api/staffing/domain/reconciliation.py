"""Slot reconciliation: who is on the map for one (day, time), and where.

Every function here is a pure recompute over whatever snapshots are
currently cached, so the result does not depend on the order in which
collections arrived from the store.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from staffing.domain.models import (
    DerivedMarker,
    MapInfo,
    Marker,
    PersistedMarker,
    ScheduleItem,
    StaffMember,
    TimeSlotInfo,
    VenueData,
)
from staffing.domain.value_objects import Slot


def _in_slot(item: ScheduleItem | PersistedMarker | MapInfo | TimeSlotInfo, slot: Slot) -> bool:
    return item.day == slot.day and item.time == slot.time


def scheduled_staff_ids(schedule: Iterable[ScheduleItem], slot: Slot) -> list[str]:
    """Staff ids assigned to any schedule row of the slot, first-seen order."""
    seen: dict[str, None] = {}
    for item in schedule:
        if _in_slot(item, slot):
            for staff_id in item.staff_ids:
                if staff_id:
                    seen.setdefault(staff_id, None)
    return list(seen)


def slot_markers(markers: Iterable[PersistedMarker], slot: Slot) -> list[PersistedMarker]:
    return [m for m in markers if _in_slot(m, slot)]


def reconcile_markers(
    markers: Iterable[PersistedMarker],
    schedule: Iterable[ScheduleItem],
    slot: Slot,
) -> list[Marker]:
    """Persisted markers of the slot plus a derived one per unplaced scheduled staff."""
    persisted = slot_markers(markers, slot)
    placed = {staff_id for m in persisted for staff_id in m.staff_ids}

    result: list[Marker] = list(persisted)
    for staff_id in scheduled_staff_ids(schedule, slot):
        if staff_id not in placed:
            result.append(DerivedMarker(staff_id=staff_id, day=slot.day, time=slot.time))
    return result


def effective_map_image(maps: Iterable[MapInfo], slot: Slot, default_image: str) -> str:
    for info in maps:
        if _in_slot(info, slot) and info.map_image_url:
            return info.map_image_url
    return default_image


def unassigned_staff(staff: Iterable[StaffMember], markers: Iterable[Marker]) -> list[StaffMember]:
    """Staff not represented by any of the given (slot-scoped) markers."""
    on_map = {staff_id for m in markers for staff_id in m.staff_ids}
    return [s for s in staff if s.id not in on_map]


@dataclass(frozen=True)
class SlotView:
    slot: Slot
    markers: tuple[Marker, ...]
    map_image_url: str
    unassigned_staff: tuple[StaffMember, ...]
    schedule: tuple[ScheduleItem, ...]
    title: str = ""
    notification: str = ""


def reconcile_slot(data: VenueData, slot: Slot, default_image: str) -> SlotView:
    """Everything a map surface renders for one slot."""
    markers = reconcile_markers(data.markers, data.schedule, slot)
    title = next((info.title for info in data.time_slot_infos if _in_slot(info, slot)), "")
    return SlotView(
        slot=slot,
        markers=tuple(markers),
        map_image_url=effective_map_image(data.maps, slot, default_image),
        unassigned_staff=tuple(unassigned_staff(data.staff, markers)),
        schedule=tuple(item for item in data.schedule if _in_slot(item, slot)),
        title=title,
        notification=data.notification,
    )

"""Starter data written into a fresh session."""

from collections.abc import Iterator
from typing import Any

from staffing.stores.interfaces import MAPS, MARKERS, ROLES, SCHEDULES, STAFF

PLACEHOLDER_AVATAR = "https://picsum.photos/seed/avatar-{n}/100/100"

_STAFF = [
    ("staff-1", "Bora Lee", "Security"),
    ("staff-2", "Seojun Park", "Medical"),
    ("staff-3", "Minji Kim", "Info"),
    ("staff-4", "Hyunwoo Choi", "Operations"),
    ("staff-5", "Daeun Jung", "Operations"),
]

_ROLES = [
    ("role-1", "Security team", 0, [{"event": "Zone patrol", "location": "All zones"}, {"event": "Gate control"}]),
    ("role-2", "Medical team", 0, [{"event": "Medical booth standby", "location": "Medical center"}]),
    ("role-3", "Info team", 1, [{"event": "Visitor guidance", "location": "Main gate"}]),
]

_SCHEDULE = [
    ("sch-1", 0, "09:00", "Opening gate security check", "Main gate", ["staff-1"]),
    ("sch-2", 0, "10:00", "Medical booth setup", "Medical center", ["staff-2"]),
    ("sch-3", 1, "10:30", "Visitor guidance and route check", "All zones", ["staff-3"]),
]

_MARKERS = [
    ("marker-staff-1-0-0900", ["staff-1"], 0, "09:00", 20, 30),
    ("marker-staff-2-0-1000", ["staff-2"], 0, "10:00", 50, 50),
    ("marker-staff-3-1-1030", ["staff-3"], 1, "10:30", 80, 70),
]


def seed_documents(map_image_url: str) -> Iterator[tuple[str, str, dict[str, Any]]]:
    """Yield (collection, doc_id, document) for the starter data set."""
    for n, (staff_id, name, role) in enumerate(_STAFF, start=1):
        yield STAFF, staff_id, {
            "id": staff_id,
            "name": name,
            "avatar": PLACEHOLDER_AVATAR.format(n=n),
            "role": role,
            "positionId": None,
        }
    for order, (role_id, name, day, tasks) in enumerate(_ROLES):
        yield ROLES, role_id, {"id": role_id, "name": name, "day": day, "tasks": tasks, "order": order}
    for schedule_id, day, time, event, location, staff_ids in _SCHEDULE:
        yield SCHEDULES, schedule_id, {
            "id": schedule_id,
            "day": day,
            "time": time,
            "event": event,
            "location": location,
            "staffIds": staff_ids,
            "roleName": None,
            "isCompleted": False,
        }
    for marker_id, staff_ids, day, time, x, y in _MARKERS:
        yield MARKERS, marker_id, {"id": marker_id, "staffIds": staff_ids, "day": day, "time": time, "x": x, "y": y}
        map_id = f"day{day}-{time.replace(':', '')}"
        yield MAPS, map_id, {"day": day, "time": time, "mapImageUrl": map_image_url}

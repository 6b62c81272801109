"""Drag-relocate protocol for markers on a map surface.

Pointer-down on a marker registers window-level move/up listeners on a
``PointerEventBus``. Movement past the threshold turns the press into a
drag (editable surfaces only); the drag updates a local preview point and
commits exactly once on release. A release without a drag is a click and
toggles the marker's popover. Every exit path removes the listeners.

This module drives an interactive map surface (a long-lived client such as
a map window); the request/response API never constructs it. Over HTTP the
same commit arrives as PUT /api/sessions/<id>/markers/<marker_id>.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from staffing.conf import get_setting
from staffing.domain.models import Marker, PersistedMarker
from staffing.domain.value_objects import MapBounds, Point, Slot

logger = logging.getLogger(__name__)

POINTER_MOVE = "pointermove"
POINTER_UP = "pointerup"


class MarkerWriter(Protocol):
    def update_marker_position(
        self,
        marker_id: str,
        x: float,
        y: float,
        staff_ids: Sequence[str] | None = None,
        day: int | None = None,
        time: str | None = None,
    ) -> PersistedMarker | None: ...

    def add_marker(self, staff_id: str, day: int, time: str, x: float, y: float) -> PersistedMarker: ...

    def assign_role_to_staff(self, role_id: str, staff_ids: Sequence[str], day: int, time: str) -> list[str]: ...


@dataclass(frozen=True)
class PointerEvent:
    client_x: float
    client_y: float


PointerHandler = Callable[[PointerEvent], None]


class PointerEventBus:
    """Window-level pointer listeners."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[PointerHandler]] = {POINTER_MOVE: [], POINTER_UP: []}

    def add(self, event_type: str, handler: PointerHandler) -> None:
        self._handlers[event_type].append(handler)

    def remove(self, event_type: str, handler: PointerHandler) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def dispatch(self, event_type: str, event: PointerEvent) -> None:
        for handler in list(self._handlers[event_type]):
            handler(event)

    def listener_count(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())


class GestureState(Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    DRAGGING = "dragging"
    CLICKED = "clicked"


class MarkerDragGesture:
    """One map surface's marker interaction state machine."""

    def __init__(
        self,
        writer: MarkerWriter,
        bus: PointerEventBus,
        bounds: Callable[[], MapBounds],
        is_draggable: bool,
        threshold: float | None = None,
    ) -> None:
        self._writer = writer
        self._bus = bus
        self._bounds = bounds
        self.is_draggable = is_draggable
        self.threshold = threshold if threshold is not None else get_setting("DRAG_THRESHOLD_PX")
        self.state = GestureState.IDLE
        self.marker: Marker | None = None
        self.preview: Point | None = None
        self.open_marker_id: str | None = None
        self.last_outcome: GestureState | None = None
        self._start = (0.0, 0.0)

    def pointer_down(self, marker: Marker, client_x: float, client_y: float) -> None:
        if self.state is not GestureState.IDLE:
            self._finish()
        if self.open_marker_id and self.open_marker_id != marker.id:
            self.open_marker_id = None
        self.marker = marker
        self._start = (client_x, client_y)
        self.state = GestureState.PRESSED
        self._bus.add(POINTER_MOVE, self._on_move)
        self._bus.add(POINTER_UP, self._on_up)

    def _on_move(self, event: PointerEvent) -> None:
        if self.marker is None:
            return
        moved_x = abs(event.client_x - self._start[0])
        moved_y = abs(event.client_y - self._start[1])

        if self.state is GestureState.PRESSED and (moved_x > self.threshold or moved_y > self.threshold):
            if not self.is_draggable:
                return
            self.state = GestureState.DRAGGING
            self.open_marker_id = None

        if self.state is GestureState.DRAGGING:
            # Local only; the store is written once, on release.
            self.preview = self._bounds().normalize(event.client_x, event.client_y)

    def _on_up(self, event: PointerEvent) -> None:
        marker = self.marker
        try:
            if marker is None:
                return
            if self.state is GestureState.DRAGGING:
                point = self._bounds().normalize(event.client_x, event.client_y)
                self._writer.update_marker_position(
                    marker.id, point.x, point.y, list(marker.staff_ids), marker.day, marker.time
                )
                self.last_outcome = GestureState.DRAGGING
            else:
                self.state = GestureState.CLICKED
                self.open_marker_id = None if self.open_marker_id == marker.id else marker.id
                self.last_outcome = GestureState.CLICKED
        finally:
            self._finish()

    def cancel(self) -> None:
        """Abandon the gesture without writing anything."""
        self._finish()

    def teardown(self) -> None:
        """Surface is going away, possibly mid-drag."""
        self._finish()
        self.open_marker_id = None

    def _finish(self) -> None:
        self._bus.remove(POINTER_MOVE, self._on_move)
        self._bus.remove(POINTER_UP, self._on_up)
        self.marker = None
        self.preview = None
        self.state = GestureState.IDLE


class PaletteDrop:
    """Drops from outside the map: unassigned staff, or a role's task bundle."""

    def __init__(self, writer: MarkerWriter, slot: Slot, is_draggable: bool) -> None:
        self._writer = writer
        self.slot = slot
        self.is_draggable = is_draggable

    def drop_staff(
        self, staff_id: str, client_x: float, client_y: float, bounds: MapBounds | None
    ) -> PersistedMarker | None:
        """Create a marker where a staff member was released; None if not over the map."""
        if not self.is_draggable or bounds is None or not bounds.contains(client_x, client_y):
            return None
        point = bounds.normalize(client_x, client_y)
        return self._writer.add_marker(staff_id, self.slot.day, self.slot.time, point.x, point.y)

    def drop_task_bundle(self, role_id: str, target: Marker | None) -> list[str]:
        """Give the staff of the target marker the role's tasks at this slot."""
        if not self.is_draggable or target is None:
            return []
        return self._writer.assign_role_to_staff(role_id, list(target.staff_ids), self.slot.day, self.slot.time)

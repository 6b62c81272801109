"""Unit tests for the marker drag protocol and palette drops.

Run with: pytest tests/test_drag.py -v
"""

import pytest

from staffing.domain.models import DerivedMarker, PersistedMarker
from staffing.domain.value_objects import MapBounds, Point, Slot
from staffing.services.drag import (
    POINTER_MOVE,
    POINTER_UP,
    GestureState,
    MarkerDragGesture,
    PaletteDrop,
    PointerEvent,
    PointerEventBus,
)
from staffing.stores.interfaces import MARKERS, SCHEDULES, STAFF

BOUNDS = MapBounds(left=0, top=0, width=200, height=100)
MARKER = PersistedMarker(id="m1", staff_ids=("a",), day=0, time="09:00", x=10, y=10)


class RecordingWriter:
    def __init__(self):
        self.moves = []
        self.added = []
        self.assigned = []

    def update_marker_position(self, marker_id, x, y, staff_ids=None, day=None, time=None):
        self.moves.append((marker_id, x, y, staff_ids, day, time))

    def add_marker(self, staff_id, day, time, x, y):
        self.added.append((staff_id, day, time, x, y))
        return PersistedMarker(id="m-new", staff_ids=(staff_id,), day=day, time=time, x=x, y=y)

    def assign_role_to_staff(self, role_id, staff_ids, day, time):
        self.assigned.append((role_id, list(staff_ids), day, time))
        return ["sch-1"]


@pytest.fixture
def bus():
    return PointerEventBus()


@pytest.fixture
def writer():
    return RecordingWriter()


def gesture(writer, bus, is_draggable=True):
    return MarkerDragGesture(writer, bus, lambda: BOUNDS, is_draggable, threshold=5)


def move(bus, x, y):
    bus.dispatch(POINTER_MOVE, PointerEvent(x, y))


def release(bus, x, y):
    bus.dispatch(POINTER_UP, PointerEvent(x, y))


class TestDragGesture:
    """Tests for MarkerDragGesture."""

    def test_small_movement_is_a_click(self, writer, bus):
        g = gesture(writer, bus)
        g.pointer_down(MARKER, 10, 10)
        move(bus, 13, 12)
        assert g.state is GestureState.PRESSED
        release(bus, 13, 12)

        assert writer.moves == []
        assert g.last_outcome is GestureState.CLICKED
        assert g.open_marker_id == "m1"

    def test_second_click_closes_popover(self, writer, bus):
        g = gesture(writer, bus)
        for _ in range(2):
            g.pointer_down(MARKER, 10, 10)
            release(bus, 10, 10)
        assert g.open_marker_id is None

    def test_drag_commits_exactly_once_on_release(self, writer, bus):
        g = gesture(writer, bus)
        g.pointer_down(MARKER, 10, 10)
        move(bus, 60, 20)
        move(bus, 100, 50)

        assert g.state is GestureState.DRAGGING
        assert g.preview == Point(50, 50)
        assert writer.moves == []

        release(bus, 100, 50)

        assert writer.moves == [("m1", 50.0, 50.0, ["a"], 0, "09:00")]
        assert g.last_outcome is GestureState.DRAGGING
        assert g.open_marker_id is None

    def test_listeners_removed_after_release(self, writer, bus):
        g = gesture(writer, bus)
        g.pointer_down(MARKER, 10, 10)
        assert bus.listener_count() == 2
        release(bus, 10, 10)
        assert bus.listener_count() == 0

    def test_read_only_surface_never_drags(self, writer, bus):
        g = gesture(writer, bus, is_draggable=False)
        g.pointer_down(MARKER, 10, 10)
        move(bus, 150, 90)
        assert g.state is GestureState.PRESSED
        assert g.preview is None
        release(bus, 150, 90)

        assert writer.moves == []
        assert g.last_outcome is GestureState.CLICKED

    def test_teardown_mid_drag_writes_nothing(self, writer, bus):
        g = gesture(writer, bus)
        g.pointer_down(MARKER, 10, 10)
        move(bus, 100, 50)
        g.teardown()
        release(bus, 100, 50)

        assert writer.moves == []
        assert bus.listener_count() == 0
        assert g.state is GestureState.IDLE

    def test_release_outside_map_is_clamped(self, writer, bus):
        g = gesture(writer, bus)
        g.pointer_down(MARKER, 10, 10)
        move(bus, 400, -50)
        release(bus, 400, -50)
        assert writer.moves[0][1:3] == (100.0, 0.0)

    def test_dragging_derived_marker_persists_it(self, store, aggregate, bus):
        """A derived marker dragged on the map is written under its promoted id."""
        store.put("s1", STAFF, "a", {"id": "a", "name": "A", "avatar": "x"})
        store.put("s1", SCHEDULES, "sch-1", {"day": 0, "time": "09:00", "event": "Gate", "staffIds": ["a"]})
        (derived,) = aggregate.slot_view(0, "09:00").markers
        assert isinstance(derived, DerivedMarker)

        g = MarkerDragGesture(aggregate, bus, lambda: BOUNDS, True, threshold=5)
        g.pointer_down(derived, 100, 50)
        move(bus, 40, 20)
        release(bus, 40, 20)

        doc = store.get("s1", MARKERS, "marker-a-0-0900")
        assert (doc["x"], doc["y"], doc["staffIds"]) == (20.0, 20.0, ["a"])


class TestPaletteDrop:
    """Tests for drops from the staff and role palettes."""

    def test_drop_inside_map_creates_marker(self, writer):
        drop = PaletteDrop(writer, Slot(0, "09:00"), is_draggable=True)
        marker = drop.drop_staff("a", 50, 25, BOUNDS)
        assert writer.added == [("a", 0, "09:00", 25.0, 25.0)]
        assert marker.id == "m-new"

    def test_drop_outside_map_is_ignored(self, writer):
        drop = PaletteDrop(writer, Slot(0, "09:00"), is_draggable=True)
        assert drop.drop_staff("a", 500, 25, BOUNDS) is None
        assert writer.added == []

    def test_read_only_surface_ignores_drops(self, writer):
        drop = PaletteDrop(writer, Slot(0, "09:00"), is_draggable=False)
        assert drop.drop_staff("a", 50, 25, BOUNDS) is None
        assert drop.drop_task_bundle("role-1", MARKER) == []

    def test_task_bundle_goes_to_marker_staff(self, writer):
        drop = PaletteDrop(writer, Slot(0, "09:00"), is_draggable=True)
        assert drop.drop_task_bundle("role-1", MARKER) == ["sch-1"]
        assert writer.assigned == [("role-1", ["a"], 0, "09:00")]

    def test_task_bundle_without_target(self, writer):
        drop = PaletteDrop(writer, Slot(0, "09:00"), is_draggable=True)
        assert drop.drop_task_bundle("role-1", None) == []

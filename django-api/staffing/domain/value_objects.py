"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self

DAYS: tuple[int, ...] = (0, 1, 2, 3)


def _build_time_slots() -> tuple[str, ...]:
    slots = []
    for hour in range(7, 24):
        slots.append(f"{hour:02d}:00")
        slots.append(f"{hour:02d}:30")
    slots.append("00:00")
    return tuple(slots)


TIME_SLOTS: tuple[str, ...] = _build_time_slots()

DERIVED_MARKER_PREFIX = "default-marker-"


def clamp_percent(value: float) -> float:
    """Clamp a coordinate to the [0, 100] percentage range."""
    return max(0.0, min(100.0, float(value)))


@dataclass(frozen=True)
class Slot:
    """A (day, time) cell of the schedule/map grid."""

    day: int
    time: str

    def __post_init__(self) -> None:
        if self.day not in DAYS:
            raise ValueError(f"Day must be one of {DAYS}")
        if self.time not in TIME_SLOTS:
            raise ValueError(f"Unknown time slot: {self.time}")

    @property
    def compact_time(self) -> str:
        """Time label without the colon, e.g. ``0930``."""
        return self.time.replace(":", "")

    @property
    def map_id(self) -> str:
        return f"day{self.day}-{self.compact_time}"

    @classmethod
    def from_values(cls, day: int | str, time: str) -> Self:
        try:
            day_value = int(day)
        except (TypeError, ValueError):
            raise ValueError("Day must be an integer") from None
        return cls(day=day_value, time=time)

    def __str__(self) -> str:
        return f"day {self.day} {self.time}"


@dataclass(frozen=True)
class Point:
    """Marker position in percentage coordinates, always clamped."""

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", clamp_percent(self.x))
        object.__setattr__(self, "y", clamp_percent(self.y))


CENTER = Point(50, 50)


@dataclass(frozen=True)
class MapBounds:
    """Client-space rectangle of the rendered map surface."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Map bounds must have a positive size")

    def contains(self, client_x: float, client_y: float) -> bool:
        return (
            self.left <= client_x <= self.left + self.width
            and self.top <= client_y <= self.top + self.height
        )

    def normalize(self, client_x: float, client_y: float) -> Point:
        """Convert client coordinates into a clamped percentage point."""
        return Point(
            x=(client_x - self.left) / self.width * 100,
            y=(client_y - self.top) / self.height * 100,
        )


@dataclass(frozen=True)
class ImageReference:
    """Opaque image value (data URL or external URL) with a size ceiling.

    The content is never inspected; only its encoded length is checked.
    """

    value: str
    max_bytes: int

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Image is required")
        if len(self.value.encode("utf-8")) > self.max_bytes:
            raise ValueError(f"Image exceeds {self.max_bytes // (1024 * 1024)}MB limit")

    def __str__(self) -> str:
        return self.value

"""Clock time <-> pixel mapping for the vertical time grid."""

import math
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class GridConfig:
    """Geometry of the day column."""

    start_hour: int = 7
    end_hour: int = 21
    hour_height: int = 60  # px per hour
    snap_minutes: int = 15
    min_event_height: int = 18


@dataclass(frozen=True)
class ClockTime:
    """A wall-clock time of day."""

    hour: int
    minute: int

    def format(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class EventBox:
    """Vertical placement of an event block, in pixels."""

    top: float
    height: float


class TimeGridMapper:
    """
    Converts between clock times and vertical offsets in the day column.

    Pure arithmetic - no I/O, no clock access.
    """

    def __init__(self, config: GridConfig | None = None):
        self.config = config or GridConfig()

    @property
    def grid_height(self) -> int:
        return (self.config.end_hour - self.config.start_hour) * self.config.hour_height

    def hours(self) -> list[int]:
        """Hour labels shown down the time gutter."""
        return list(range(self.config.start_hour, self.config.end_hour))

    def time_to_offset(self, hour: int, minute: int) -> float:
        """Pixel offset of a clock time from the top of the grid."""
        height = self.config.hour_height
        return (hour - self.config.start_hour) * height + (minute / 60) * height

    def snap_to_grid(self, total_minutes: float, granularity: int | None = None) -> int:
        """
        Round minutes-from-grid-start to the nearest granularity multiple.

        Halves round up, so 7.5 minutes snaps to 15 with the default step.
        """
        step = self.config.snap_minutes if granularity is None else granularity
        if step <= 0:
            raise ValueError(f"Snap granularity must be positive, got {step}")
        return int(math.floor(total_minutes / step + 0.5)) * step

    def clamp_offset(self, pixel_y: float) -> float:
        """Keep an offset inside the grid."""
        return min(max(pixel_y, 0), self.grid_height)

    def offset_to_clock(self, pixel_y: float) -> ClockTime:
        """Clock time at a pixel offset, snapped to the grid."""
        minutes = pixel_y / self.config.hour_height * 60
        total = self.config.start_hour * 60 + self.snap_to_grid(minutes)
        return ClockTime(hour=total // 60, minute=total % 60)

    def event_box(self, start: datetime, end: datetime) -> EventBox:
        """Top and height of an event block. Height never drops below the minimum."""
        top = self.time_to_offset(start.hour, start.minute)
        bottom = self.time_to_offset(end.hour, end.minute)
        return EventBox(top=top, height=max(bottom - top, self.config.min_event_height))

    def now_line_offset(self, now: datetime) -> float | None:
        """Offset of the current-time line, or None when it falls outside the grid."""
        offset = self.time_to_offset(now.hour, now.minute)
        if 0 < offset < self.grid_height:
            return offset
        return None

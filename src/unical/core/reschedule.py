"""Drop gesture -> new event placement - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from .events import CalendarEvent, RescheduleIntent, to_instant, to_local
from .timegrid import TimeGridMapper


@dataclass(frozen=True)
class DropGesture:
    """Where the user released a dragged event."""

    event_id: str
    pixel_y: float  # relative to the top of the day column
    target_date: date
    scroll_offset: float = 0


@dataclass(frozen=True)
class SecondaryFields:
    """Time fields in the appointment record's own format."""

    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str | None = None

    def to_dict(self) -> dict:
        data = {"date": self.date, "startTime": self.start_time}
        if self.end_time:
            data["endTime"] = self.end_time
        return data


def plan_reschedule(
    event: CalendarEvent,
    drop: DropGesture,
    mapper: TimeGridMapper,
    tz: ZoneInfo,
) -> RescheduleIntent:
    """
    Compute an event's new start and end from a drop.

    The original duration is kept. Events without an explicit end stay
    open-ended.
    """
    clock = mapper.offset_to_clock(mapper.clamp_offset(drop.pixel_y + drop.scroll_offset))
    d = drop.target_date
    new_start = to_instant(datetime(d.year, d.month, d.day, clock.hour, clock.minute, tzinfo=tz))
    new_end = new_start + (event.end - event.start) if event.end is not None else None
    return RescheduleIntent(event_id=event.id, new_start=new_start, new_end=new_end)


def secondary_fields(intent: RescheduleIntent, tz: ZoneInfo) -> SecondaryFields:
    """Derive the appointment's date and HH:MM fields from the new instants."""
    start = to_local(intent.new_start, tz)
    end_time = None
    if intent.new_end is not None:
        end_time = to_local(intent.new_end, tz).strftime("%H:%M")
    return SecondaryFields(
        date=start.date().isoformat(),
        start_time=start.strftime("%H:%M"),
        end_time=end_time,
    )

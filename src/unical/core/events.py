"""Calendar event projections - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from zoneinfo import ZoneInfo

MINUTE_MS = 60 * 1000
DEFAULT_DURATION_MS = 30 * MINUTE_MS


class ModuleFilter(Enum):
    """Which event sources the calendar shows."""

    ALL = "all"
    GABINET = "gabinet"  # clinic appointments
    CRM = "crm"  # native activities


def to_local(instant: int, tz: ZoneInfo) -> datetime:
    """Convert an epoch-millisecond instant to an aware local datetime."""
    seconds, millis = divmod(instant, 1000)
    return datetime.fromtimestamp(seconds, tz=tz).replace(microsecond=millis * 1000)


def to_instant(dt: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(round(dt.timestamp() * 1000))


def local_date(instant: int, tz: ZoneInfo) -> date:
    """Calendar day an instant falls on in the given zone."""
    return to_local(instant, tz).date()


@dataclass(frozen=True)
class ModuleRef:
    """Points at the module that owns an event's authoritative record."""

    module_id: str
    entity_type: str
    entity_id: str

    @classmethod
    def from_dict(cls, data: dict) -> "ModuleRef":
        return cls(
            module_id=data["moduleId"],
            entity_type=data.get("entityType", ""),
            entity_id=str(data.get("entityId", "")),
        )


@dataclass
class CalendarEvent:
    """A scheduled activity as seen by the calendar."""

    id: str
    title: str
    start: int
    end: int | None = None
    is_completed: bool = False
    module_ref: ModuleRef | None = None
    metadata: dict = field(default_factory=dict)
    activity_type: str = ""
    version: int | None = None

    @property
    def is_native(self) -> bool:
        """Owned directly by the activity store."""
        return self.module_ref is None

    def effective_end(self) -> int:
        """End instant, falling back to the default 30 minute duration."""
        if self.end is None:
            return self.start + DEFAULT_DURATION_MS
        return self.end

    def duration_ms(self) -> int:
        return self.effective_end() - self.start

    def is_well_formed(self) -> bool:
        return self.end is None or self.end >= self.start

    def belongs_to(self, module_id: str) -> bool:
        return self.module_ref is not None and self.module_ref.module_id == module_id

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarEvent":
        """Build from the backend's wire form."""
        ref = data.get("moduleRef")
        end = data.get("endDate")
        version = data.get("updatedAt")
        return cls(
            id=str(data.get("_id") or data["id"]),
            title=data.get("title", "Untitled"),
            start=int(data["dueDate"]),
            end=int(end) if end is not None else None,
            is_completed=bool(data.get("isCompleted", False)),
            module_ref=ModuleRef.from_dict(ref) if ref else None,
            metadata=dict(data.get("metadata") or {}),
            activity_type=data.get("activityType", ""),
            version=int(version) if version is not None else None,
        )


@dataclass(frozen=True)
class LayoutedEvent:
    """An event with its column placement inside an overlap cluster."""

    event: CalendarEvent
    column: int
    total_columns: int


@dataclass(frozen=True)
class RescheduleIntent:
    """New placement for an event, ready to be written."""

    event_id: str
    new_start: int
    new_end: int | None = None

    def duration_ms(self) -> int | None:
        if self.new_end is None:
            return None
        return self.new_end - self.new_start


def filter_by_module(events: list[CalendarEvent], module_filter: ModuleFilter) -> list[CalendarEvent]:
    """Apply the calendar's module filter. CRM means native activities only."""
    if module_filter is ModuleFilter.ALL:
        return list(events)
    if module_filter is ModuleFilter.CRM:
        return [e for e in events if e.is_native]
    return [e for e in events if e.belongs_to(module_filter.value)]

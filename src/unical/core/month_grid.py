"""Month page matrix - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from .events import CalendarEvent
from .layout import group_by_day
from .window import month_bounds, week_anchor


@dataclass
class MonthCell:
    """One date on the month page."""

    date: date
    in_month: bool
    events: list[CalendarEvent] = field(default_factory=list)

    def visible(self, limit: int = 3) -> list[CalendarEvent]:
        return self.events[:limit]

    def overflow(self, limit: int = 3) -> int:
        """How many events hide behind the "+N more" marker."""
        return max(len(self.events) - limit, 0)


@dataclass
class MonthGrid:
    """Rows of seven cells, Monday first."""

    year: int
    month: int
    weeks: list[list[MonthCell]]

    def cells(self) -> list[MonthCell]:
        return [cell for week in self.weeks for cell in week]


def month_dates(year: int, month: int) -> list[list[date]]:
    """
    Weeks covering a month, starting on the Monday on or before the 1st.

    Emits rows until the month's last day is covered, so the page has 4 to 6
    rows depending on where the month starts.
    """
    first, last = month_bounds(year, month)
    day = week_anchor(first)

    weeks: list[list[date]] = []
    while day <= last:
        weeks.append([day + timedelta(days=i) for i in range(7)])
        day += timedelta(days=7)
    return weeks


def bucket_by_date(events: list[CalendarEvent], tz: ZoneInfo) -> dict[str, list[CalendarEvent]]:
    """Events keyed by the ISO string of their local start day, in start order."""
    by_day = group_by_day(sorted(events, key=lambda e: e.start), tz)
    return {d.isoformat(): evs for d, evs in by_day.items()}


def build_month_grid(
    year: int,
    month: int,
    events: list[CalendarEvent],
    tz: ZoneInfo,
) -> MonthGrid:
    """Month page with each date's events attached."""
    buckets = bucket_by_date(events, tz)
    weeks = [
        [
            MonthCell(date=d, in_month=d.month == month, events=buckets.get(d.isoformat(), []))
            for d in week
        ]
        for week in month_dates(year, month)
    ]
    return MonthGrid(year=year, month=month, weeks=weeks)

"""Query windows and navigation for day/week/month views - no I/O dependencies."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from .events import to_instant


class ViewMode(Enum):
    """Calendar view mode."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class ViewWindow:
    """Instant range used to query events, plus the active week's Monday."""

    start: int
    end: int
    anchor: date
    mode: ViewMode
    reference: date

    def contains(self, instant: int) -> bool:
        return self.start <= instant <= self.end


def start_of_day(d: date, tz: ZoneInfo) -> datetime:
    return datetime(d.year, d.month, d.day, tzinfo=tz)


def end_of_day(d: date, tz: ZoneInfo) -> datetime:
    """Last millisecond of a local day (23:59:59.999)."""
    return datetime(d.year, d.month, d.day, 23, 59, 59, 999000, tzinfo=tz)


def week_anchor(d: date) -> date:
    """Monday of the ISO week containing d. Sunday belongs to the week before."""
    weekday = (d.weekday() + 1) % 7  # 0=Sunday..6=Saturday
    return d - timedelta(days=(weekday + 6) % 7)


def week_days(anchor: date) -> list[date]:
    """The seven days of the week starting at anchor."""
    return [anchor + timedelta(days=i) for i in range(7)]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def compute_window(reference: date, mode: ViewMode, tz: ZoneInfo) -> ViewWindow:
    """
    Window of instants to fetch for a view.

    Args:
        reference: The date the user is looking at
        mode: Active view mode
        tz: Zone used to resolve local midnights

    Returns:
        ViewWindow whose end is the last millisecond of the final day
    """
    anchor = week_anchor(reference)

    if mode is ViewMode.DAY:
        first, last = reference, reference
    elif mode is ViewMode.WEEK:
        first, last = anchor, anchor + timedelta(days=6)
    elif mode is ViewMode.MONTH:
        first, last = month_bounds(reference.year, reference.month)
    else:
        raise ValueError(f"Unknown view mode: {mode}")

    return ViewWindow(
        start=to_instant(start_of_day(first, tz)),
        end=to_instant(end_of_day(last, tz)),
        anchor=anchor,
        mode=mode,
        reference=reference,
    )


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def navigate(reference: date, mode: ViewMode, direction: int) -> date:
    """Move the reference date one step (or direction steps) in the active mode."""
    if mode is ViewMode.DAY:
        return reference + timedelta(days=direction)
    if mode is ViewMode.WEEK:
        return reference + timedelta(days=direction * 7)
    if mode is ViewMode.MONTH:
        return add_months(reference, direction)
    raise ValueError(f"Unknown view mode: {mode}")


def go_to_today(tz: ZoneInfo, now: datetime | None = None) -> date:
    """Today's date in the calendar's zone."""
    now = now or datetime.now(tz)
    return now.astimezone(tz).date()


def window_title(window: ViewWindow) -> str:
    """Toolbar heading for a window."""
    if window.mode is ViewMode.DAY:
        return window.reference.strftime("%A, %B %d, %Y")
    if window.mode is ViewMode.WEEK:
        end = window.anchor + timedelta(days=6)
        return f"{window.anchor.strftime('%b %d')} - {end.strftime('%b %d, %Y')}"
    return window.reference.strftime("%B %Y")

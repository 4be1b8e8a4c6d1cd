"""Overlap layout for events in a single day column - no I/O dependencies."""

from collections import defaultdict
from datetime import date
from zoneinfo import ZoneInfo

from .events import CalendarEvent, LayoutedEvent, local_date


def cluster_events(events: list[CalendarEvent]) -> list[list[CalendarEvent]]:
    """
    Partition events into chains of overlap.

    An event joins the current cluster when it starts before the latest end
    seen so far in that cluster, so two events that never touch can still share
    a cluster through an event between them.
    """
    clusters: list[list[CalendarEvent]] = []
    current: list[CalendarEvent] = []
    cluster_end = 0

    # sorted() is stable: equal starts keep their input order
    for event in sorted(events, key=lambda e: e.start):
        event_end = event.effective_end()
        if not current or event.start < cluster_end:
            current.append(event)
            cluster_end = max(cluster_end, event_end)
        else:
            clusters.append(current)
            current = [event]
            cluster_end = event_end

    if current:
        clusters.append(current)
    return clusters


def assign_columns(cluster: list[CalendarEvent]) -> list[LayoutedEvent]:
    """
    Greedy column assignment for one cluster.

    Each event takes the first column that is free by its start, otherwise a
    new column is opened. Events must already be in start order.
    """
    column_ends: list[int] = []
    assignments: list[tuple[CalendarEvent, int]] = []

    for event in cluster:
        event_end = event.effective_end()
        column = next(
            (i for i, end in enumerate(column_ends) if event.start >= end),
            None,
        )
        if column is None:
            column = len(column_ends)
            column_ends.append(event_end)
        else:
            column_ends[column] = event_end
        assignments.append((event, column))

    total = len(column_ends)
    return [LayoutedEvent(event=e, column=c, total_columns=total) for e, c in assignments]


def layout_events(events: list[CalendarEvent]) -> list[LayoutedEvent]:
    """Lay out one day's events into non-overlapping columns."""
    result: list[LayoutedEvent] = []
    for cluster in cluster_events(events):
        result.extend(assign_columns(cluster))
    return result


def max_concurrency(events: list[CalendarEvent]) -> int:
    """
    Largest number of events active at the same instant.

    Zero-length events still occupy a column, so any non-empty input gives at least 1.
    """
    points: list[tuple[int, int]] = []
    for event in events:
        points.append((event.start, 1))
        points.append((event.effective_end(), -1))

    # Ends sort before starts at the same instant: touching events don't overlap
    active = peak = 0
    for _, delta in sorted(points):
        active += delta
        peak = max(peak, active)
    return max(peak, 1) if events else 0


def group_by_day(events: list[CalendarEvent], tz: ZoneInfo) -> dict[date, list[CalendarEvent]]:
    """Bucket events by the local day they start on."""
    days: dict[date, list[CalendarEvent]] = defaultdict(list)
    for event in events:
        days[local_date(event.start, tz)].append(event)
    return dict(days)


def layout_days(
    events: list[CalendarEvent],
    days: list[date],
    tz: ZoneInfo,
) -> dict[date, list[LayoutedEvent]]:
    """Layout for each requested day; days without events map to an empty list."""
    by_day = group_by_day(events, tz)
    return {d: layout_events(by_day.get(d, [])) for d in days}

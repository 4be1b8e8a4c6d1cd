"""Tests for overlap clustering and column layout."""

import random
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from unical.core.events import CalendarEvent, to_instant
from unical.core.layout import (
    assign_columns,
    cluster_events,
    group_by_day,
    layout_days,
    layout_events,
    max_concurrency,
)

TZ = ZoneInfo("Europe/Warsaw")
DAY = date(2025, 1, 15)


def at(hour: int, minute: int = 0, day: date = DAY) -> int:
    return to_instant(datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ))


@pytest.fixture
def make_event():
    """Factory for events given HH:MM strings."""
    def _make(event_id: str, start: str, end: str | None = None) -> CalendarEvent:
        sh, sm = map(int, start.split(":"))
        end_instant = None
        if end:
            eh, em = map(int, end.split(":"))
            end_instant = at(eh, em)
        return CalendarEvent(id=event_id, title=event_id, start=at(sh, sm), end=end_instant)
    return _make


def placement(layouts):
    return {laid.event.id: (laid.column, laid.total_columns) for laid in layouts}


class TestClusterEvents:
    def test_empty(self):
        assert cluster_events([]) == []

    def test_overlap_then_gap(self, make_event):
        a = make_event("a", "09:00", "09:30")
        b = make_event("b", "09:15", "09:45")
        c = make_event("c", "10:00", "10:30")
        assert cluster_events([a, b, c]) == [[a, b], [c]]

    def test_chain_joins_non_overlapping_ends(self, make_event):
        a = make_event("a", "09:00", "10:00")
        b = make_event("b", "09:30", "11:00")
        c = make_event("c", "10:30", "11:30")
        # a and c never overlap but b links them
        assert cluster_events([a, b, c]) == [[a, b, c]]

    def test_touching_events_split(self, make_event):
        a = make_event("a", "09:00", "10:00")
        b = make_event("b", "10:00", "11:00")
        assert cluster_events([a, b]) == [[a], [b]]

    def test_sorts_input(self, make_event):
        a = make_event("a", "09:00", "09:30")
        b = make_event("b", "14:00", "15:00")
        assert cluster_events([b, a]) == [[a], [b]]

    def test_missing_end_uses_default_duration(self, make_event):
        a = make_event("a", "09:00")
        b = make_event("b", "09:20", "09:40")
        c = make_event("c", "09:45", "10:00")
        assert cluster_events([a, b, c]) == [[a, b], [c]]


class TestLayoutEvents:
    def test_empty(self):
        assert layout_events([]) == []

    def test_single_event(self, make_event):
        layouts = layout_events([make_event("a", "09:00", "10:00")])
        assert placement(layouts) == {"a": (0, 1)}

    def test_two_overlapping_and_one_alone(self, make_event):
        layouts = layout_events(
            [
                make_event("a", "09:00", "09:30"),
                make_event("b", "09:15", "09:45"),
                make_event("c", "10:00", "10:30"),
            ]
        )
        assert placement(layouts) == {"a": (0, 2), "b": (1, 2), "c": (0, 1)}

    def test_reuses_freed_column(self, make_event):
        layouts = layout_events(
            [
                make_event("a", "09:00", "10:00"),
                make_event("b", "09:30", "11:00"),
                make_event("c", "10:30", "11:30"),
            ]
        )
        assert placement(layouts) == {"a": (0, 2), "b": (1, 2), "c": (0, 2)}

    def test_equal_starts_keep_input_order(self, make_event):
        first = make_event("first", "09:00", "10:00")
        second = make_event("second", "09:00", "09:30")
        assert placement(layout_events([first, second])) == {"first": (0, 2), "second": (1, 2)}
        assert placement(layout_events([second, first])) == {"second": (0, 2), "first": (1, 2)}

    def test_three_way_overlap(self, make_event):
        layouts = layout_events(
            [
                make_event("a", "09:00", "12:00"),
                make_event("b", "09:30", "10:00"),
                make_event("c", "09:45", "10:30"),
                make_event("d", "10:00", "10:15"),
            ]
        )
        # d fits back into b's column once b has ended
        assert placement(layouts) == {"a": (0, 3), "b": (1, 3), "c": (2, 3), "d": (1, 3)}

    def test_backwards_event_not_rejected(self):
        # Callers own validation; the raw extent is used as given
        odd = CalendarEvent(id="odd", title="odd", start=at(10), end=at(9))
        normal = CalendarEvent(id="ok", title="ok", start=at(10, 15), end=at(11))
        assert placement(layout_events([odd, normal])) == {"odd": (0, 1), "ok": (0, 1)}

    def test_assign_columns_directly(self, make_event):
        cluster = [make_event("a", "09:00", "10:00"), make_event("b", "09:00", "10:00")]
        assert placement(assign_columns(cluster)) == {"a": (0, 2), "b": (1, 2)}


def random_day(seed: int, count: int = 25) -> list[CalendarEvent]:
    rng = random.Random(seed)
    events = []
    for i in range(count):
        start_minutes = rng.randrange(7 * 60, 19 * 60, 5)
        duration = rng.randrange(15, 125, 5)
        start = at(0) + start_minutes * 60_000
        end = None if rng.random() < 0.2 else start + duration * 60_000
        events.append(CalendarEvent(id=f"e{i}", title=f"e{i}", start=start, end=end))
    return events


def overlaps(a: CalendarEvent, b: CalendarEvent) -> bool:
    return a.start < b.effective_end() and b.start < a.effective_end()


class TestLayoutProperties:
    @pytest.mark.parametrize("seed", range(20))
    def test_clusters_partition_and_separate(self, seed):
        events = random_day(seed)
        clusters = cluster_events(events)

        ids = [e.id for cluster in clusters for e in cluster]
        assert sorted(ids) == sorted(e.id for e in events)

        # Nothing in a later cluster overlaps anything in an earlier one
        for i, earlier in enumerate(clusters):
            for later in clusters[i + 1 :]:
                assert not any(overlaps(a, b) for a in earlier for b in later)

    @pytest.mark.parametrize("seed", range(20))
    def test_clusters_are_connected(self, seed):
        for cluster in cluster_events(random_day(seed)):
            reached = {cluster[0].id}
            frontier = [cluster[0]]
            while frontier:
                current = frontier.pop()
                for other in cluster:
                    if other.id not in reached and overlaps(current, other):
                        reached.add(other.id)
                        frontier.append(other)
            assert reached == {e.id for e in cluster}

    @pytest.mark.parametrize("seed", range(20))
    def test_columns_never_overlap(self, seed):
        for cluster in cluster_events(random_day(seed)):
            layouts = assign_columns(cluster)
            for a in layouts:
                for b in layouts:
                    if a.event.id != b.event.id and a.column == b.column:
                        assert not overlaps(a.event, b.event)

    @pytest.mark.parametrize("seed", range(20))
    def test_column_count_is_minimal(self, seed):
        for cluster in cluster_events(random_day(seed)):
            layouts = assign_columns(cluster)
            assert {laid.total_columns for laid in layouts} == {max_concurrency(cluster)}
            assert all(0 <= laid.column < laid.total_columns for laid in layouts)


class TestMaxConcurrency:
    def test_empty(self):
        assert max_concurrency([]) == 0

    def test_touching_events_do_not_stack(self, make_event):
        events = [make_event("a", "09:00", "10:00"), make_event("b", "10:00", "11:00")]
        assert max_concurrency(events) == 1

    def test_zero_length_event_counts_as_one_column(self, make_event):
        events = [make_event("a", "09:00", "09:00")]
        assert max_concurrency(events) == 1
        assert assign_columns(events)[0].total_columns == 1

    def test_nested(self, make_event):
        events = [
            make_event("a", "09:00", "12:00"),
            make_event("b", "09:30", "11:00"),
            make_event("c", "10:00", "10:30"),
        ]
        assert max_concurrency(events) == 3


class TestGroupByDay:
    def test_groups_by_local_day(self):
        late = CalendarEvent(id="late", title="late", start=at(23, 30))
        # 00:30 local is 23:30 UTC the day before
        after_midnight = CalendarEvent(
            id="early", title="early", start=at(0, 30, day=date(2025, 1, 16))
        )
        groups = group_by_day([late, after_midnight], TZ)
        assert groups == {date(2025, 1, 15): [late], date(2025, 1, 16): [after_midnight]}

    def test_layout_days_fills_empty_days(self, make_event):
        event = make_event("a", "09:00", "10:00")
        result = layout_days([event], [DAY, date(2025, 1, 16)], TZ)
        assert placement(result[DAY]) == {"a": (0, 1)}
        assert result[date(2025, 1, 16)] == []

"""View controller - owns calendar state and wires the core to its collaborators."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from .core.events import CalendarEvent, LayoutedEvent, ModuleFilter
from .core.layout import layout_days
from .core.month_grid import MonthGrid, build_month_grid
from .core.reschedule import DropGesture
from .core.window import ViewMode, ViewWindow, compute_window, go_to_today, navigate, week_days
from .errors import BackendError
from .ports import EventSource
from .reschedule import RescheduleCoordinator, RescheduleResult, RescheduleStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one fetch so a late response can be recognised as stale."""

    generation: int
    window: ViewWindow
    module_filter: ModuleFilter


class ViewController:
    """
    Calendar state: view mode, reference date, module filter and selection.

    Every navigation recomputes the window and refetches. Events are replaced
    wholesale on each fetch, never patched in place.
    """

    def __init__(
        self,
        source: EventSource,
        coordinator: RescheduleCoordinator,
        tz: ZoneInfo,
        view_mode: ViewMode = ViewMode.WEEK,
        reference_date: date | None = None,
        module_filter: ModuleFilter = ModuleFilter.ALL,
    ):
        self.source = source
        self.coordinator = coordinator
        self.tz = tz
        self.view_mode = view_mode
        self.reference_date = reference_date or go_to_today(tz)
        self.module_filter = module_filter
        self.selected_event_id: str | None = None
        self.events: list[CalendarEvent] = []
        self._generation = 0
        self._drop_pending = False

    @property
    def window(self) -> ViewWindow:
        return compute_window(self.reference_date, self.view_mode, self.tz)

    @property
    def is_busy(self) -> bool:
        """A drop's writes are still in flight."""
        return self._drop_pending

    # ============== Fetching ==============

    def begin_fetch(self) -> FetchTicket:
        """Start a fetch for the current window. Older tickets become stale."""
        self._generation += 1
        return FetchTicket(self._generation, self.window, self.module_filter)

    def complete_fetch(self, ticket: FetchTicket, events: list[CalendarEvent]) -> bool:
        """Install fetched events unless the view moved on. Returns True if accepted."""
        if ticket.generation != self._generation:
            logger.debug(f"Discarding stale fetch {ticket.generation} (current {self._generation})")
            return False
        self.events = self._validate(events, ticket.window)
        if self.selected_event_id and self.selected_event is None:
            self.selected_event_id = None
        return True

    def refresh(self) -> list[CalendarEvent]:
        """Fetch the current window synchronously."""
        ticket = self.begin_fetch()
        events = self.source.fetch_events(ticket.window, ticket.module_filter)
        self.complete_fetch(ticket, events)
        return self.events

    def _validate(self, events: list[CalendarEvent], window: ViewWindow) -> list[CalendarEvent]:
        """Drop malformed and out-of-window events at the fetch boundary."""
        valid = []
        for event in events:
            if not event.is_well_formed():
                logger.warning(f"Dropping event {event.id}: ends before it starts")
            elif not window.contains(event.start):
                logger.warning(f"Dropping event {event.id}: starts outside the requested window")
            else:
                valid.append(event)
        return valid

    # ============== Navigation ==============

    def navigate(self, direction: int) -> None:
        """Step back (-1) or forward (+1) by one day, week or month."""
        self.reference_date = navigate(self.reference_date, self.view_mode, direction)
        self.refresh()

    def go_to_today(self, now: datetime | None = None) -> None:
        self.reference_date = go_to_today(self.tz, now)
        self.refresh()

    def set_view_mode(self, mode: ViewMode) -> None:
        self.view_mode = mode
        self.refresh()

    def set_module_filter(self, module_filter: ModuleFilter) -> None:
        self.module_filter = module_filter
        self.refresh()

    def open_day(self, day: date) -> None:
        """Jump from a month cell to that day's time grid."""
        self.reference_date = day
        self.view_mode = ViewMode.DAY
        self.refresh()

    # ============== Selection ==============

    def find_event(self, event_id: str) -> CalendarEvent | None:
        return next((e for e in self.events if e.id == event_id), None)

    @property
    def selected_event(self) -> CalendarEvent | None:
        if self.selected_event_id is None:
            return None
        return self.find_event(self.selected_event_id)

    def select_event(self, event_id: str) -> CalendarEvent | None:
        event = self.find_event(event_id)
        self.selected_event_id = event.id if event else None
        return event

    def clear_selection(self) -> None:
        self.selected_event_id = None

    # ============== Presentation ==============

    def visible_days(self) -> list[date]:
        """Day columns of the time grid (day and week views)."""
        if self.view_mode is ViewMode.DAY:
            return [self.reference_date]
        return week_days(self.window.anchor)

    def day_layouts(self) -> dict[date, list[LayoutedEvent]]:
        return layout_days(self.events, self.visible_days(), self.tz)

    def month_grid(self) -> MonthGrid:
        return build_month_grid(
            self.reference_date.year, self.reference_date.month, self.events, self.tz
        )

    # ============== Drag and drop ==============

    def drop(self, gesture: DropGesture) -> RescheduleResult:
        """Reschedule a dropped event; refetch the window once the activity has moved."""
        if self._drop_pending:
            return RescheduleResult(RescheduleStatus.BUSY, message="Another move is still saving")

        event = self.find_event(gesture.event_id)
        if event is None:
            return RescheduleResult(
                RescheduleStatus.NOT_FOUND, message=f"Event {gesture.event_id} is not in view"
            )

        self._drop_pending = True
        try:
            result = self.coordinator.reschedule(event, gesture)
        finally:
            self._drop_pending = False

        # The activity moved in both cases, so the grid must show it
        if result.ok or result.inconsistent:
            try:
                self.refresh()
            except BackendError as e:
                logger.warning(f"Refetch after moving {event.id} failed: {e}")
        return result

"""Event source interface."""

from typing import Protocol

from unical.core.events import CalendarEvent, ModuleFilter
from unical.core.window import ViewWindow


class EventSource(Protocol):
    """Interface for fetching calendar events from any backend."""

    def fetch_events(self, window: ViewWindow, module_filter: ModuleFilter) -> list[CalendarEvent]:
        """Fetch events starting within [window.start, window.end]."""
        ...

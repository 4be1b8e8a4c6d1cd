"""In-process record store adapter."""

import itertools
from dataclasses import dataclass, replace
from datetime import datetime
from zoneinfo import ZoneInfo

from unical.core.events import CalendarEvent, ModuleFilter, ModuleRef, filter_by_module, to_instant
from unical.core.reschedule import SecondaryFields
from unical.core.window import ViewWindow
from unical.errors import ConflictError, RecordNotFoundError


@dataclass
class Appointment:
    """A clinic appointment in its native date + HH:MM form."""

    id: str
    date: str
    start_time: str
    end_time: str
    activity_id: str


class InMemoryCalendarStore:
    """
    Dict-backed activity and appointment store.

    Implements EventSource, PrimaryRecordWriter and SecondaryRecordWriter.
    Every activity write bumps its version, so stale writes raise ConflictError.
    Appointments mirror into module-owned activities on creation only; keeping
    the two in step afterwards is the caller's job.
    """

    def __init__(self, tz: ZoneInfo, module_id: str = "gabinet"):
        self.tz = tz
        self.module_id = module_id
        self.activities: dict[str, CalendarEvent] = {}
        self.appointments: dict[str, Appointment] = {}
        self._ids = itertools.count(1)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def add_activity(self, title: str, start: int, end: int | None = None, **kwargs) -> CalendarEvent:
        """Store a native activity."""
        event = CalendarEvent(
            id=self._next_id("act"), title=title, start=start, end=end, version=1, **kwargs
        )
        self.activities[event.id] = event
        return event

    def add_appointment(self, title: str, date: str, start_time: str, end_time: str) -> Appointment:
        """Store an appointment together with its mirrored activity."""
        appointment_id = self._next_id("appt")
        activity_id = self._next_id("act")
        self.activities[activity_id] = CalendarEvent(
            id=activity_id,
            title=title,
            start=self._instant(date, start_time),
            end=self._instant(date, end_time),
            module_ref=ModuleRef(self.module_id, "appointment", appointment_id),
            metadata={"appointmentId": appointment_id},
            activity_type="appointment",
            version=1,
        )
        appointment = Appointment(appointment_id, date, start_time, end_time, activity_id)
        self.appointments[appointment_id] = appointment
        return appointment

    def _instant(self, day: str, clock: str) -> int:
        return to_instant(datetime.fromisoformat(f"{day}T{clock}").replace(tzinfo=self.tz))

    def fetch_events(self, window: ViewWindow, module_filter: ModuleFilter) -> list[CalendarEvent]:
        """Events starting within the window, in start order."""
        events = [e for e in self.activities.values() if window.contains(e.start)]
        return sorted(filter_by_module(events, module_filter), key=lambda e: e.start)

    def update_primary(
        self,
        event_id: str,
        start: int,
        end: int | None,
        expected_version: int | None = None,
    ) -> None:
        current = self.activities.get(event_id)
        if current is None:
            raise RecordNotFoundError(f"Scheduled activity not found: {event_id}")
        if expected_version is not None and current.version != expected_version:
            raise ConflictError(
                f"Activity {event_id} changed (version {current.version}, expected {expected_version})"
            )
        self.activities[event_id] = replace(
            current, start=start, end=end, version=(current.version or 0) + 1
        )

    def update_secondary(self, secondary_id: str, fields: SecondaryFields) -> None:
        appointment = self.appointments.get(secondary_id)
        if appointment is None:
            raise RecordNotFoundError(f"Appointment not found: {secondary_id}")
        appointment.date = fields.date
        appointment.start_time = fields.start_time
        if fields.end_time:
            appointment.end_time = fields.end_time


class StaticPermission:
    """PermissionChecker with a fixed answer."""

    def __init__(self, allowed: bool = True):
        self.allowed = allowed

    def can_edit(self) -> bool:
        return self.allowed

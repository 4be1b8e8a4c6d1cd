"""Drag-to-reschedule: turns a drop into ordered activity + appointment writes."""

import logging
from dataclasses import dataclass
from enum import Enum
from zoneinfo import ZoneInfo

from .core.events import CalendarEvent, RescheduleIntent
from .core.reschedule import DropGesture, plan_reschedule, secondary_fields
from .core.timegrid import TimeGridMapper
from .errors import BackendError, ConflictError, PermissionDeniedError, RecordNotFoundError
from .ports import PermissionChecker, PrimaryRecordWriter, SecondaryRecordWriter

logger = logging.getLogger(__name__)


class RescheduleStatus(Enum):
    """Outcome of a reschedule."""

    OK = "ok"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    PRIMARY_FAILED = "primary_failed"
    SECONDARY_FAILED = "secondary_failed"  # activity moved, appointment did not
    CONFLICT = "conflict"
    BUSY = "busy"


@dataclass(frozen=True)
class RescheduleResult:
    """What happened to a drop. Write failures are reported here, never raised."""

    status: RescheduleStatus
    intent: RescheduleIntent | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is RescheduleStatus.OK

    @property
    def inconsistent(self) -> bool:
        """The activity and its module record now disagree."""
        return self.status is RescheduleStatus.SECONDARY_FAILED


class RescheduleCoordinator:
    """
    Moves an event and keeps its module-owned record in step.

    The activity is written first. For module-owned events the module record is
    written second, as an independent call. A failed second write is reported
    as SECONDARY_FAILED and the first write is left in place.
    """

    def __init__(
        self,
        primary: PrimaryRecordWriter,
        secondary: SecondaryRecordWriter,
        permissions: PermissionChecker,
        mapper: TimeGridMapper,
        tz: ZoneInfo,
        secondary_module: str = "gabinet",
        secondary_id_key: str = "appointmentId",
    ):
        self.primary = primary
        self.secondary = secondary
        self.permissions = permissions
        self.mapper = mapper
        self.tz = tz
        self.secondary_module = secondary_module
        self.secondary_id_key = secondary_id_key

    def secondary_id(self, event: CalendarEvent) -> str | None:
        """Module record id for events that need a second write."""
        if not event.belongs_to(self.secondary_module):
            return None
        value = event.metadata.get(self.secondary_id_key)
        return str(value) if value else None

    def reschedule(self, event: CalendarEvent, drop: DropGesture) -> RescheduleResult:
        """Plan the new placement from a drop and apply it."""
        intent = plan_reschedule(event, drop, self.mapper, self.tz)
        return self.apply(event, intent)

    def apply(self, event: CalendarEvent, intent: RescheduleIntent) -> RescheduleResult:
        """Write an already planned placement."""
        try:
            allowed = self.permissions.can_edit()
        except BackendError as e:
            logger.warning(f"Permission check failed for {event.id}: {e}")
            return RescheduleResult(
                _status_for(e, RescheduleStatus.PERMISSION_DENIED), intent, str(e)
            )
        if not allowed:
            logger.info(f"Reschedule of {event.id} refused: no edit permission")
            return RescheduleResult(RescheduleStatus.PERMISSION_DENIED, intent, "Permission denied")

        try:
            self.primary.update_primary(
                intent.event_id, intent.new_start, intent.new_end, expected_version=event.version
            )
        except BackendError as e:
            logger.warning(f"Activity update failed for {event.id}: {e}")
            return RescheduleResult(_status_for(e, RescheduleStatus.PRIMARY_FAILED), intent, str(e))
        logger.debug(f"Activity {event.id} moved to {intent.new_start}-{intent.new_end}")

        secondary_id = self.secondary_id(event)
        if secondary_id is None:
            return RescheduleResult(RescheduleStatus.OK, intent)

        fields = secondary_fields(intent, self.tz)
        try:
            self.secondary.update_secondary(secondary_id, fields)
        except BackendError as e:
            logger.error(
                f"Appointment {secondary_id} not updated after activity {event.id} moved: {e}"
            )
            return RescheduleResult(RescheduleStatus.SECONDARY_FAILED, intent, str(e))
        logger.debug(f"Appointment {secondary_id} moved to {fields.date} {fields.start_time}")

        return RescheduleResult(RescheduleStatus.OK, intent)


def _status_for(error: BackendError, default: RescheduleStatus) -> RescheduleStatus:
    if isinstance(error, PermissionDeniedError):
        return RescheduleStatus.PERMISSION_DENIED
    if isinstance(error, RecordNotFoundError):
        return RescheduleStatus.NOT_FOUND
    if isinstance(error, ConflictError):
        return RescheduleStatus.CONFLICT
    return default

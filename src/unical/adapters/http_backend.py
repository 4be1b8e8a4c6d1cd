"""HTTP adapter for the activity and appointment store."""

import logging

import requests

from unical.config import Config, load_config
from unical.core.events import CalendarEvent, ModuleFilter
from unical.core.reschedule import SecondaryFields
from unical.core.window import ViewWindow
from unical.errors import (
    BackendError,
    ConfigError,
    ConflictError,
    PermissionDeniedError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)

_STATUS_ERRORS = {
    403: PermissionDeniedError,
    404: RecordNotFoundError,
    409: ConflictError,
}


class HttpCalendarBackend:
    """
    REST client for the record store.

    Implements EventSource, PrimaryRecordWriter, SecondaryRecordWriter and
    PermissionChecker. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        if not self.config.api_base:
            raise ConfigError("Missing API_BASE. Add it to config/unical.conf")
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {self.config.api_token}"})

    def _url(self, endpoint: str) -> str:
        return f"{self.config.api_base}{endpoint}"

    def _request(self, method: str, endpoint: str, **kwargs) -> dict | list | None:
        """Make an authenticated request, mapping failures to BackendError subclasses."""
        try:
            resp = self._session.request(
                method,
                self._url(endpoint),
                timeout=self.config.request_timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise BackendError(f"{method} {endpoint} failed: {e}") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            error_cls = _STATUS_ERRORS.get(resp.status_code, BackendError)
            raise error_cls(message)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError(f"{method} {endpoint} returned a non-JSON body") from e

    def fetch_events(self, window: ViewWindow, module_filter: ModuleFilter) -> list[CalendarEvent]:
        """Fetch events starting within the window."""
        params = {
            "organizationId": self.config.organization_id,
            "startDate": window.start,
            "endDate": window.end,
        }
        if module_filter is not ModuleFilter.ALL:
            params["moduleFilter"] = module_filter.value

        data = self._request("GET", "/calendar/events", params=params) or []
        events = []
        for item in data:
            try:
                events.append(CalendarEvent.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable event {item.get('_id', '?')}: {e}")
        return events

    def update_primary(
        self,
        event_id: str,
        start: int,
        end: int | None,
        expected_version: int | None = None,
    ) -> None:
        """PATCH the scheduled activity's due/end dates."""
        body = {"organizationId": self.config.organization_id, "dueDate": start}
        if end is not None:
            body["endDate"] = end
        if expected_version is not None:
            body["expectedUpdatedAt"] = expected_version
        self._request("PATCH", f"/activities/{event_id}", json=body)

    def update_secondary(self, secondary_id: str, fields: SecondaryFields) -> None:
        """PATCH the appointment's date and time strings."""
        body = {"organizationId": self.config.organization_id, **fields.to_dict()}
        self._request("PATCH", f"/appointments/{secondary_id}", json=body)

    def can_edit(self) -> bool:
        """Ask the store whether the current user may edit activities."""
        data = self._request(
            "GET",
            "/permissions/activities/edit",
            params={"organizationId": self.config.organization_id},
        )
        return bool(data and data.get("allowed"))


def _error_message(resp: requests.Response) -> str:
    """Best-effort error text from a failed response."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)

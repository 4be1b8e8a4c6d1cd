"""Record writer interfaces."""

from typing import Protocol

from unical.core.reschedule import SecondaryFields


class PrimaryRecordWriter(Protocol):
    """Writes the generic activity record behind a calendar event."""

    def update_primary(
        self,
        event_id: str,
        start: int,
        end: int | None,
        expected_version: int | None = None,
    ) -> None:
        """Move an activity. Raises BackendError (or a subclass) on failure."""
        ...


class SecondaryRecordWriter(Protocol):
    """Writes the module-owned record (e.g. a clinic appointment)."""

    def update_secondary(self, secondary_id: str, fields: SecondaryFields) -> None:
        """Move a module record. Raises BackendError (or a subclass) on failure."""
        ...

"""Permission check interface."""

from typing import Protocol


class PermissionChecker(Protocol):
    """Answers whether the current user may edit calendar events."""

    def can_edit(self) -> bool:
        ...

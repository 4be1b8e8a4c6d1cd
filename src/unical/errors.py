"""Errors raised by adapters and configuration."""


class UnicalError(Exception):
    """Base class for calendar errors."""

    pass


class ConfigError(UnicalError):
    """Raised when required configuration is missing."""

    pass


class BackendError(UnicalError):
    """Raised when the record store rejects or fails a request."""

    pass


class PermissionDeniedError(BackendError):
    """Raised when the caller may not edit the record."""

    pass


class RecordNotFoundError(BackendError):
    """Raised when the record to update no longer exists."""

    pass


class ConflictError(BackendError):
    """Raised when a write carries a stale version token."""

    pass

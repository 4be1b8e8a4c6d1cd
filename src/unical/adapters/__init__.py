"""Adapters - I/O implementations of ports."""

from .http_backend import HttpCalendarBackend
from .memory_store import Appointment, InMemoryCalendarStore, StaticPermission

__all__ = [
    "HttpCalendarBackend",
    "Appointment",
    "InMemoryCalendarStore",
    "StaticPermission",
]

"""Ports - interfaces/protocols for external dependencies."""

from .event_source import EventSource
from .record_writer import PrimaryRecordWriter, SecondaryRecordWriter
from .permissions import PermissionChecker

__all__ = [
    "EventSource",
    "PrimaryRecordWriter",
    "SecondaryRecordWriter",
    "PermissionChecker",
]

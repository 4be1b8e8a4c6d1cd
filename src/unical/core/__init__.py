"""Functional core - pure calendar logic with no I/O."""

from .events import CalendarEvent, LayoutedEvent, ModuleFilter, ModuleRef, RescheduleIntent, filter_by_module
from .timegrid import ClockTime, EventBox, GridConfig, TimeGridMapper
from .layout import assign_columns, cluster_events, layout_days, layout_events, max_concurrency
from .window import ViewMode, ViewWindow, compute_window, navigate, week_anchor
from .month_grid import MonthCell, MonthGrid, build_month_grid
from .reschedule import DropGesture, SecondaryFields, plan_reschedule, secondary_fields

__all__ = [
    # Events
    "CalendarEvent",
    "LayoutedEvent",
    "ModuleFilter",
    "ModuleRef",
    "RescheduleIntent",
    "filter_by_module",
    # Time grid
    "ClockTime",
    "EventBox",
    "GridConfig",
    "TimeGridMapper",
    # Layout
    "assign_columns",
    "cluster_events",
    "layout_days",
    "layout_events",
    "max_concurrency",
    # Windows
    "ViewMode",
    "ViewWindow",
    "compute_window",
    "navigate",
    "week_anchor",
    # Month grid
    "MonthCell",
    "MonthGrid",
    "build_month_grid",
    # Reschedule
    "DropGesture",
    "SecondaryFields",
    "plan_reschedule",
    "secondary_fields",
]

"""
Domain-specific exception hierarchy for the schedule grid engine.
"""


class ScheduleGridError(Exception):
    """Base class for all application-level errors."""


class DataError(ScheduleGridError, ValueError):
    """Raised when a record carries a structurally invalid interval or duration."""


class RangeError(ScheduleGridError, ValueError):
    """Raised when a week range ends on or before its start."""


class StoreError(ScheduleGridError):
    """Raised when schedule data cannot be fetched or parsed."""

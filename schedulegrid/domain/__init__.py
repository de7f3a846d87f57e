"""
Domain layer - Pure schedule grid logic without external dependencies.
"""

from .availability import AvailabilityResolver
from .exceptions import DataError, RangeError, ScheduleGridError, StoreError
from .grid_builder import GridBuilder
from .models import (
    AvailabilityWindow,
    ClassifiedSlot,
    DayAvailability,
    EventContinuation,
    EventStart,
    ExternalEvent,
    InternalSession,
    Occupant,
    SessionContinuation,
    SessionStart,
    TimeRange,
    WeekGrid,
)
from .slot_classifier import SlotClassifier
from .span_geometry import SpanGeometry, SpanGeometryCalculator

__all__ = [
    "AvailabilityResolver",
    "AvailabilityWindow",
    "ClassifiedSlot",
    "DataError",
    "DayAvailability",
    "EventContinuation",
    "EventStart",
    "ExternalEvent",
    "GridBuilder",
    "InternalSession",
    "Occupant",
    "RangeError",
    "ScheduleGridError",
    "SessionContinuation",
    "SessionStart",
    "SlotClassifier",
    "SpanGeometry",
    "SpanGeometryCalculator",
    "StoreError",
    "TimeRange",
    "WeekGrid",
]

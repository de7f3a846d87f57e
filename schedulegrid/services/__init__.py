"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .schedule_grid import (
    AvailabilityStoreProtocol,
    ExternalEventSourceProtocol,
    ScheduleGridService,
    ScheduleSnapshot,
    SessionStoreProtocol,
    week_bounds,
)

__all__ = [
    "AvailabilityStoreProtocol",
    "ExternalEventSourceProtocol",
    "ScheduleGridService",
    "ScheduleSnapshot",
    "SessionStoreProtocol",
    "week_bounds",
]

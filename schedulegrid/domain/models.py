"""
Domain models for the weekly schedule grid.

All instants are ``pendulum.DateTime`` values. Ranges are half-open
``[start, end)``: a range ending exactly when another starts does not
overlap it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import ClassVar, Dict, Iterator, Optional, Tuple

import pendulum
from pendulum import Date, DateTime

from .exceptions import DataError


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise DataError(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def for_day(cls, day: Date, timezone: str) -> "TimeRange":
        """Return the local day as ``[midnight, next midnight)``."""
        start = pendulum.datetime(day.year, day.month, day.day, tz=timezone)
        return cls(start=start, end=start.add(days=1))

    @classmethod
    def for_hour(cls, day: Date, hour: int, timezone: str) -> "TimeRange | None":
        """
        Return the slot window from local ``hour`` to the next local hour on
        ``day``, or None when the hour is skipped by a DST transition.

        On the day clocks go back the repeated hour is folded into one
        longer slot, so every instant of the day falls into exactly one slot.
        """
        start = cls.hour_start(day, hour, timezone)
        if start.hour != hour:
            return None

        if hour == 23:
            end = cls.for_day(day, timezone).end
        else:
            end = cls.hour_start(day, hour + 1, timezone)
        return cls(start=start, end=end)

    @staticmethod
    def hour_start(day: Date, hour: int, timezone: str) -> DateTime:
        """Local wall-clock instant of ``hour`` on ``day``, normalized by pendulum."""
        return pendulum.datetime(day.year, day.month, day.day, hour, tz=timezone)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and other.start < self.end

    def contains(self, instant: DateTime) -> bool:
        """Check if an instant falls inside this range."""
        return self.start <= instant < self.end

    def clamp(self, bounds: "TimeRange") -> "TimeRange | None":
        """
        Clip this range to fit within bounds.
        Returns None if there is no overlap.
        """
        if not self.overlaps(bounds):
            return None

        return TimeRange(
            start=max(self.start, bounds.start),
            end=min(self.end, bounds.end),
        )

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    One row of the provider's recurring weekly availability template.
    """
    day_of_week: int  # 0=Monday, 6=Sunday
    start_time: time
    end_time: time
    active: bool = True

    def __post_init__(self):
        if self.day_of_week not in range(7):
            raise DataError(f"day_of_week must be between 0 and 6, got {self.day_of_week}")

    def hour_bounds(self) -> Tuple[int, int]:
        """
        Return ``(start_hour, end_hour)`` truncated to whole hours.

        An end time of 00:00 closes the window at midnight.
        """
        end_hour = self.end_time.hour
        if self.end_time == time(0, 0):
            end_hour = 24
        return self.start_time.hour, end_hour


@dataclass(frozen=True)
class InternalSession:
    """A confirmed booking with a client."""
    id: str
    scheduled_at: DateTime
    duration_minutes: int
    client_name: str = ""
    is_online: bool = False
    status: str = "scheduled"
    session_type: str = ""
    location: Optional[str] = None

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise DataError(
                f"Session {self.id} must have a positive duration, got {self.duration_minutes}"
            )

    @property
    def ends_at(self) -> DateTime:
        return self.scheduled_at.add(minutes=self.duration_minutes)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.scheduled_at, end=self.ends_at)


@dataclass(frozen=True)
class ExternalEvent:
    """A busy block imported from an external calendar."""
    id: str
    start_time: DateTime
    end_time: DateTime
    is_all_day: bool = False
    title: str = ""
    source: str = ""  # display only

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise DataError(
                f"Event {self.id}: start time {self.start_time} must be before end time {self.end_time}"
            )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def display_title(self) -> str:
        return self.title or "Busy"


@dataclass(frozen=True)
class DayAvailability:
    """Resolved open hours for one concrete date."""
    open: bool
    start_hour: int = 0
    end_hour: int = 0

    @classmethod
    def closed(cls) -> "DayAvailability":
        return cls(open=False)

    def contains_hour(self, hour: int) -> bool:
        return self.open and self.start_hour <= hour < self.end_hour


@dataclass(frozen=True)
class Occupant:
    """Base for the tagged variants that can fill a slot."""
    kind: ClassVar[str] = "occupant"
    is_start: ClassVar[bool] = False

    @property
    def item_id(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class SessionOccupant(Occupant):
    session: InternalSession

    @property
    def item_id(self) -> str:
        return self.session.id


@dataclass(frozen=True)
class SessionStart(SessionOccupant):
    kind: ClassVar[str] = "session_start"
    is_start: ClassVar[bool] = True


@dataclass(frozen=True)
class SessionContinuation(SessionOccupant):
    kind: ClassVar[str] = "session_continuation"


@dataclass(frozen=True)
class EventOccupant(Occupant):
    event: ExternalEvent

    @property
    def item_id(self) -> str:
        return self.event.id


@dataclass(frozen=True)
class EventStart(EventOccupant):
    kind: ClassVar[str] = "event_start"
    is_start: ClassVar[bool] = True


@dataclass(frozen=True)
class EventContinuation(EventOccupant):
    kind: ClassVar[str] = "event_continuation"


@dataclass(frozen=True)
class ClassifiedSlot:
    """
    One (date, hour) cell of the week grid and what fills it.

    Continuation slots are reserved space under a block that started
    earlier; only slots without an occupant react to "create session".
    A local hour skipped by a DST transition is kept as a placeholder with
    ``exists=False`` so every day still has 24 slots.
    """
    date: Date
    hour: int
    start: DateTime
    within_availability: bool
    occupant: Optional[Occupant] = None
    exists: bool = True

    @property
    def is_clickable(self) -> bool:
        return self.exists and self.occupant is None

    @property
    def is_bookable(self) -> bool:
        return self.is_clickable and self.within_availability

    @property
    def is_continuation(self) -> bool:
        return self.occupant is not None and not self.occupant.is_start


@dataclass(frozen=True)
class WeekGrid:
    """
    The classified hourly grid for a date range plus the all-day banners.

    ``slots[i]`` holds the 24 hourly slots of ``dates[i]``. ``all_day`` only
    has keys for dates that carry at least one all-day event.
    """
    dates: Tuple[Date, ...] = ()
    slots: Tuple[Tuple[ClassifiedSlot, ...], ...] = ()
    all_day: Dict[Date, Tuple[ExternalEvent, ...]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.dates

    def day(self, date: Date) -> Tuple[ClassifiedSlot, ...]:
        """Return the slots of one date, or raise KeyError if not in the grid."""
        try:
            index = self.dates.index(date)
        except ValueError:
            raise KeyError(date) from None
        return self.slots[index]

    def slot(self, date: Date, hour: int) -> ClassifiedSlot:
        return self.day(date)[hour]

    def all_day_for(self, date: Date) -> Tuple[ExternalEvent, ...]:
        return self.all_day.get(date, ())

    def start_slots(self) -> Iterator[ClassifiedSlot]:
        """Yield every slot where a session or event block begins."""
        for day_slots in self.slots:
            for slot in day_slots:
                if slot.occupant is not None and slot.occupant.is_start:
                    yield slot

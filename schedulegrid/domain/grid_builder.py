"""
Builds the classified week grid from sessions, availability and events.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import date, datetime
from typing import Dict, List, Sequence, Tuple

import pendulum
from pendulum import Date

from .availability import AvailabilityResolver
from .exceptions import RangeError
from .models import (
    AvailabilityWindow,
    ClassifiedSlot,
    EventStart,
    ExternalEvent,
    InternalSession,
    TimeRange,
    WeekGrid,
)
from .slot_classifier import SlotClassifier

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def validate_range(week_start: Date, week_end: Date) -> None:
    """Raise RangeError if the range holds no dates."""
    if week_end <= week_start:
        raise RangeError(f"Range end {week_end} must be after range start {week_start}")


class GridBuilder:
    """
    Classifies every hour slot of a date range.

    Algorithm:
    1. Enumerate the dates in ``[week_start, week_end)``
    2. Resolve the availability window of each date
    3. Walk hours 0-23 of each date through the SlotClassifier, feeding the
       events already started that day back in
    4. Bucket all-day events onto every date they cover

    Calling ``build`` twice with equal inputs yields equal grids; inputs are
    never mutated.
    """

    def __init__(self, timezone: str = "Europe/Berlin"):
        self.timezone = timezone
        self.classifier = SlotClassifier(timezone=timezone)

    def build(
        self,
        week_start: date,
        week_end: date,
        sessions: Sequence[InternalSession],
        availability: Sequence[AvailabilityWindow],
        events: Sequence[ExternalEvent],
    ) -> WeekGrid:
        """
        Build the grid for ``[week_start, week_end)``.

        Args:
            week_start: First date shown (inclusive)
            week_end: Date after the last one shown (exclusive)
            sessions: Internal sessions, already validated
            availability: Weekly availability template
            events: External events, timed and all-day

        Returns:
            WeekGrid; empty when the range holds no dates
        """
        start = self._as_date(week_start)
        end = self._as_date(week_end)

        try:
            validate_range(start, end)
        except RangeError as exc:
            logger.debug("Returning empty grid: %s", exc)
            return WeekGrid()

        dates = self._dates_in_range(start, end)
        resolver = AvailabilityResolver(availability)
        timed_events = [event for event in events if not event.is_all_day]
        all_day_events = [event for event in events if event.is_all_day]

        slots = tuple(
            self._classify_day(day, resolver, sessions, timed_events)
            for day in dates
        )

        return WeekGrid(
            dates=tuple(dates),
            slots=slots,
            all_day=self._bucket_all_day(dates, all_day_events),
        )

    def _as_date(self, value: date) -> Date:
        if isinstance(value, datetime):
            return pendulum.instance(value).in_timezone(self.timezone).date()
        return pendulum.date(value.year, value.month, value.day)

    def _dates_in_range(self, start: Date, end: Date) -> List[Date]:
        dates: List[Date] = []
        current = start

        while current < end:
            dates.append(current)
            current = current.add(days=1)

        return dates

    def _classify_day(
        self,
        day: Date,
        resolver: AvailabilityResolver,
        sessions: Sequence[InternalSession],
        timed_events: Sequence[ExternalEvent],
    ) -> Tuple[ClassifiedSlot, ...]:
        day_availability = resolver.resolve(day)
        day_slots: List[ClassifiedSlot] = []
        started: List[ExternalEvent] = []

        for hour in range(HOURS_PER_DAY):
            slot = self.classifier.classify(
                day,
                hour,
                sessions=sessions,
                events=timed_events,
                availability=day_availability,
                started=tuple(started),
            )
            day_slots.append(slot)
            if isinstance(slot.occupant, EventStart):
                started.append(slot.occupant.event)

        return tuple(day_slots)

    def _bucket_all_day(
        self,
        dates: Sequence[Date],
        all_day_events: Sequence[ExternalEvent],
    ) -> Dict[Date, Tuple[ExternalEvent, ...]]:
        """
        Attach each all-day event to every date it covers.

        The event end is exclusive: an event ending at midnight does not
        show on the following day.
        """
        buckets: Dict[Date, Tuple[ExternalEvent, ...]] = {}

        for day in dates:
            day_range = TimeRange.for_day(day, self.timezone)
            covering = tuple(
                event for event in all_day_events
                if event.time_range.overlaps(day_range)
            )
            if covering:
                buckets[day] = covering

        return buckets

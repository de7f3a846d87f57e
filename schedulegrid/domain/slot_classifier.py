"""
Classification of a single (date, hour) slot.

Priority order, highest first:

1. session starting in this hour          -> SessionStart
2. session from an earlier hour still on  -> SessionContinuation
   (including one that began before midnight)
3. event beginning inside this slot       -> EventStart
4. event already started earlier today    -> EventContinuation
5. any other event overlapping the slot   -> EventStart (first touched slot
   of the day, or resuming after a session hid it until now)
6. nothing                                -> empty

Internal sessions always win over imported events. Within one rule the first
record in input order wins.
"""

from datetime import date
from typing import Collection, Optional, Sequence

from .models import (
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
)


class SlotClassifier:
    """
    Decides what occupies one hour slot of the grid.

    The classifier is stateless. The caller walks a day from hour 0 upwards
    and hands back the events that already got a start block earlier that
    day, so that a running event is continued instead of drawn twice.
    """

    def __init__(self, timezone: str):
        self.timezone = timezone

    def classify(
        self,
        day: date,
        hour: int,
        *,
        sessions: Sequence[InternalSession],
        events: Sequence[ExternalEvent],
        availability: DayAvailability,
        started: Collection[ExternalEvent] = (),
    ) -> ClassifiedSlot:
        """
        Classify the slot ``hour`` of ``day``.

        Args:
            day: Local calendar date of the slot
            hour: Hour index, 0-23
            sessions: All internal sessions of the range
            events: Timed external events; all-day events are ignored
            availability: Resolved availability of ``day``
            started: Events classified EventStart in earlier slots of ``day``

        Returns:
            ClassifiedSlot for the pair
        """
        slot_range = TimeRange.for_hour(day, hour, self.timezone)

        if slot_range is None:
            return ClassifiedSlot(
                date=day,
                hour=hour,
                start=TimeRange.hour_start(day, hour, self.timezone),
                within_availability=False,
                exists=False,
            )

        occupant = self._session_occupant(day, hour, slot_range, sessions)
        if occupant is None:
            occupant = self._event_occupant(slot_range, events, started)

        return ClassifiedSlot(
            date=day,
            hour=hour,
            start=slot_range.start,
            within_availability=availability.contains_hour(hour),
            occupant=occupant,
        )

    def _session_occupant(
        self,
        day: date,
        hour: int,
        slot_range: TimeRange,
        sessions: Sequence[InternalSession],
    ) -> Optional[Occupant]:
        for session in sessions:
            local_start = session.scheduled_at.in_timezone(self.timezone)
            if local_start.date() == day and local_start.hour == hour:
                return SessionStart(session)

        for session in sessions:
            if session.scheduled_at < slot_range.start < session.ends_at:
                return SessionContinuation(session)

        return None

    def _event_occupant(
        self,
        slot_range: TimeRange,
        events: Sequence[ExternalEvent],
        started: Collection[ExternalEvent],
    ) -> Optional[Occupant]:
        overlapping = [
            event for event in events
            if not event.is_all_day and event.time_range.overlaps(slot_range)
        ]

        if not overlapping:
            return None

        for event in overlapping:
            if slot_range.contains(event.start_time):
                return EventStart(event)

        for event in overlapping:
            if event in started:
                return EventContinuation(event)

        return EventStart(overlapping[0])

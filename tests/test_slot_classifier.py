"""
Tests for single-slot classification.
"""

import pendulum

from schedulegrid.domain.models import (
    DayAvailability,
    EventContinuation,
    EventStart,
    ExternalEvent,
    InternalSession,
    SessionContinuation,
    SessionStart,
)
from schedulegrid.domain.slot_classifier import SlotClassifier

TZ = "Europe/Berlin"
MONDAY = pendulum.date(2024, 11, 25)
OPEN = DayAvailability(open=True, start_hour=9, end_hour=18)
CLOSED = DayAvailability.closed()


def _dt(value: str):
    return pendulum.parse(value, tz=TZ)


def _session(session_id, start, minutes):
    return InternalSession(id=session_id, scheduled_at=_dt(start), duration_minutes=minutes)


def _event(event_id, start, end, all_day=False):
    return ExternalEvent(id=event_id, start_time=_dt(start), end_time=_dt(end), is_all_day=all_day)


class TestSessionRules:
    """Session start and continuation."""

    def setup_method(self):
        self.classifier = SlotClassifier(timezone=TZ)

    def _classify(self, hour, sessions=(), events=(), availability=OPEN):
        return self.classifier.classify(
            MONDAY,
            hour,
            sessions=list(sessions),
            events=list(events),
            availability=availability,
        )

    def test_session_starts_in_its_hour(self):
        """A session starting at 10:30 belongs to the 10:00 slot."""
        session = _session("s1", "2024-11-25 10:30", 60)

        slot = self._classify(10, sessions=[session])

        assert slot.occupant == SessionStart(session)
        assert slot.start == _dt("2024-11-25 10:00")

    def test_session_continues_while_running(self):
        session = _session("s1", "2024-11-25 10:30", 60)

        assert self._classify(11, sessions=[session]).occupant == SessionContinuation(session)
        assert self._classify(12, sessions=[session]).occupant is None

    def test_session_ending_at_slot_start_does_not_continue(self):
        session = _session("s1", "2024-11-25 09:00", 60)

        assert self._classify(10, sessions=[session]).occupant is None

    def test_session_on_other_day_is_ignored(self):
        session = _session("s1", "2024-11-26 10:00", 60)

        assert self._classify(10, sessions=[session]).occupant is None

    def test_session_from_previous_evening_continues_after_midnight(self):
        session = _session("s1", "2024-11-24 23:30", 60)
        event = _event("e1", "2024-11-25 00:00", "2024-11-25 00:30")

        slot = self._classify(0, sessions=[session], events=[event])

        assert slot.occupant == SessionContinuation(session)
        assert self._classify(1, sessions=[session]).occupant is None

    def test_start_beats_continuation(self):
        """A session starting in this hour wins over one still running."""
        long_session = _session("s1", "2024-11-25 09:00", 180)
        short_session = _session("s2", "2024-11-25 10:00", 30)

        slot = self._classify(10, sessions=[long_session, short_session])

        assert slot.occupant == SessionStart(short_session)

    def test_first_starting_session_in_input_order_wins(self):
        first = _session("s1", "2024-11-25 10:00", 30)
        second = _session("s2", "2024-11-25 10:30", 30)

        assert self._classify(10, sessions=[first, second]).occupant == SessionStart(first)

    def test_session_is_reported_in_display_timezone(self):
        """A UTC instant is placed by its local hour."""
        session = InternalSession(
            id="s1",
            scheduled_at=pendulum.parse("2024-11-25T09:00:00Z"),
            duration_minutes=60,
        )

        assert self._classify(10, sessions=[session]).occupant == SessionStart(session)

    def test_session_wins_over_event_starting_in_same_slot(self):
        session = _session("s1", "2024-11-25 09:00", 60)
        event = _event("e1", "2024-11-25 09:00", "2024-11-25 11:00")

        slot = self._classify(9, sessions=[session], events=[event])

        assert slot.occupant == SessionStart(session)

    def test_session_continuation_suppresses_event(self):
        session = _session("s1", "2024-11-25 09:00", 120)
        event = _event("e1", "2024-11-25 10:00", "2024-11-25 11:00")

        slot = self._classify(10, sessions=[session], events=[event])

        assert slot.occupant == SessionContinuation(session)


class TestEventRules:
    """Event start, continuation and resumption."""

    def setup_method(self):
        self.classifier = SlotClassifier(timezone=TZ)

    def _classify(self, hour, events, started=(), day=MONDAY):
        return self.classifier.classify(
            day,
            hour,
            sessions=[],
            events=events,
            availability=OPEN,
            started=started,
        )

    def test_event_starts_in_its_slot(self):
        event = _event("e1", "2024-11-25 14:15", "2024-11-25 15:00")

        assert self._classify(14, [event]).occupant == EventStart(event)

    def test_event_continues_once_started_today(self):
        event = _event("e1", "2024-11-25 14:00", "2024-11-25 16:30")

        slot = self._classify(15, [event], started=[event])

        assert slot.occupant == EventContinuation(event)

    def test_event_resumes_when_not_yet_shown_today(self):
        """A session hid the event's first hour, so it starts in the next one."""
        event = _event("e1", "2024-11-25 09:00", "2024-11-25 11:00")

        slot = self._classify(10, [event])

        assert slot.occupant == EventStart(event)

    def test_multi_day_event_restarts_at_top_of_day(self):
        """Nothing has started yet at hour 0, so an ongoing event starts afresh."""
        event = _event("e1", "2024-11-24 22:00", "2024-11-25 02:00")

        first = self._classify(0, [event])
        second = self._classify(1, [event], started=[event])

        assert first.occupant == EventStart(event)
        assert second.occupant == EventContinuation(event)

    def test_new_event_start_beats_running_event(self):
        running = _event("e1", "2024-11-25 13:00", "2024-11-25 16:00")
        starting = _event("e2", "2024-11-25 14:00", "2024-11-25 15:00")

        slot = self._classify(14, [running, starting], started=[running])

        assert slot.occupant == EventStart(starting)

    def test_running_event_continues_after_interruption(self):
        """An event shown earlier today is not started a second time."""
        running = _event("e1", "2024-11-25 13:00", "2024-11-25 16:00")
        short = _event("e2", "2024-11-25 14:00", "2024-11-25 15:00")

        slot = self._classify(15, [running, short], started=[running, short])

        assert slot.occupant == EventContinuation(running)

    def test_event_ending_at_slot_start_is_gone(self):
        event = _event("e1", "2024-11-25 14:00", "2024-11-25 15:00")

        assert self._classify(15, [event], started=[event]).occupant is None

    def test_all_day_events_never_occupy_slots(self):
        event = _event("e1", "2024-11-25 00:00", "2024-11-26 00:00", all_day=True)

        assert self._classify(0, [event]).occupant is None
        assert self._classify(12, [event]).occupant is None


class TestDaylightSavingTime:
    """Slots on the days the clocks change."""

    def setup_method(self):
        self.classifier = SlotClassifier(timezone=TZ)
        self.spring_day = pendulum.date(2025, 3, 30)

    def _classify(self, day, hour, sessions=(), events=()):
        return self.classifier.classify(
            day,
            hour,
            sessions=list(sessions),
            events=list(events),
            availability=DayAvailability(open=True, start_hour=0, end_hour=24),
        )

    def test_skipped_hour_is_an_empty_placeholder(self):
        event = _event("e1", "2025-03-30 03:00", "2025-03-30 04:00")

        skipped = self._classify(self.spring_day, 2, events=[event])
        after = self._classify(self.spring_day, 3, events=[event])

        assert not skipped.exists
        assert skipped.occupant is None
        assert not skipped.is_bookable
        assert after.exists
        assert after.occupant == EventStart(event)

    def test_session_continues_over_skipped_hour(self):
        session = _session("s1", "2025-03-30 01:30", 90)

        assert self._classify(self.spring_day, 1, sessions=[session]).occupant == SessionStart(session)
        assert self._classify(self.spring_day, 2, sessions=[session]).occupant is None
        assert self._classify(self.spring_day, 3, sessions=[session]).occupant == SessionContinuation(session)

    def test_repeated_hour_belongs_to_one_slot(self):
        """On the autumn change every instant still lands in exactly one slot."""
        autumn_day = pendulum.date(2024, 10, 27)
        event = ExternalEvent(
            id="e1",
            start_time=pendulum.parse("2024-10-27T00:15:00Z"),
            end_time=pendulum.parse("2024-10-27T00:45:00Z"),
        )

        starts = [
            hour for hour in range(24)
            if self._classify(autumn_day, hour, events=[event]).occupant == EventStart(event)
        ]

        assert len(starts) == 1


class TestAvailabilityFlag:
    """The availability flag is independent of occupancy."""

    def test_within_availability(self):
        classifier = SlotClassifier(timezone=TZ)

        inside = classifier.classify(MONDAY, 9, sessions=[], events=[], availability=OPEN)
        outside = classifier.classify(MONDAY, 18, sessions=[], events=[], availability=OPEN)
        closed = classifier.classify(MONDAY, 10, sessions=[], events=[], availability=CLOSED)

        assert inside.is_bookable
        assert not outside.within_availability
        assert not closed.within_availability
        assert closed.is_clickable

"""
Application services for building the coach's week grid.

The service pulls one snapshot of sessions, availability and external events
from the store adapters and delegates the classification to the domain-level
``GridBuilder``. The three fetches run concurrently and are awaited together
so the engine always sees collections fetched in the same pass.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Protocol, Sequence, Tuple

import pendulum
from pendulum import Date, DateTime

from ..domain.grid_builder import GridBuilder
from ..domain.models import AvailabilityWindow, ExternalEvent, InternalSession, WeekGrid

DAYS_PER_WEEK = 7


class SessionStoreProtocol(Protocol):
    """Source of confirmed bookings."""

    async def fetch_sessions(self, start: DateTime, end: DateTime) -> List[InternalSession]:
        """Return sessions scheduled between ``start`` and ``end``."""


class AvailabilityStoreProtocol(Protocol):
    """Source of the weekly availability template."""

    async def fetch_availability(self) -> List[AvailabilityWindow]:
        """Return all availability windows of the provider."""


class ExternalEventSourceProtocol(Protocol):
    """Source of busy blocks imported from external calendars."""

    async def fetch_events(self, start: DateTime, end: DateTime) -> List[ExternalEvent]:
        """Return external events overlapping ``start``-``end``."""


@dataclass(frozen=True)
class ScheduleSnapshot:
    """The three input collections as fetched in a single pass."""
    sessions: Tuple[InternalSession, ...] = ()
    availability: Tuple[AvailabilityWindow, ...] = ()
    events: Tuple[ExternalEvent, ...] = ()


def week_bounds(day: date, week_starts_on: int = 0) -> Tuple[Date, Date]:
    """
    Return ``(week_start, week_end)`` for the week containing ``day``.

    ``week_starts_on`` uses 0=Monday ... 6=Sunday; the end is exclusive.
    """
    current = pendulum.date(day.year, day.month, day.day)
    offset = (current.weekday() - week_starts_on) % DAYS_PER_WEEK
    start = current.subtract(days=offset)
    return start, start.add(days=DAYS_PER_WEEK)


class ScheduleGridService:
    """
    Orchestrates snapshot retrieval and grid classification.

    Dependency inversion toward protocols makes it easy to plug in the REST
    store or a JSON snapshot in tests and mock mode.
    """

    def __init__(
        self,
        session_store: SessionStoreProtocol,
        availability_store: AvailabilityStoreProtocol,
        event_source: ExternalEventSourceProtocol,
        grid_builder: GridBuilder,
        hidden_statuses: Iterable[str] = ("cancelled",),
        week_starts_on: int = 0,
    ) -> None:
        self._session_store = session_store
        self._availability_store = availability_store
        self._event_source = event_source
        self._grid_builder = grid_builder
        self._hidden_statuses = frozenset(status.strip().lower() for status in hidden_statuses)
        self._week_starts_on = week_starts_on

    @classmethod
    def from_store(cls, store, grid_builder: GridBuilder, **kwargs) -> "ScheduleGridService":
        """Build a service around one adapter implementing all three protocols."""
        return cls(
            session_store=store,
            availability_store=store,
            event_source=store,
            grid_builder=grid_builder,
            **kwargs,
        )

    @property
    def timezone(self) -> str:
        return self._grid_builder.timezone

    async def build_week(self, day: date) -> WeekGrid:
        """Build the grid of the week containing ``day``."""
        week_start, week_end = week_bounds(day, self._week_starts_on)
        return await self.build_range(week_start=week_start, week_end=week_end)

    async def build_range(self, *, week_start: date, week_end: date) -> WeekGrid:
        """
        Fetch a snapshot for the range and classify it.
        """
        if week_end <= week_start:
            return WeekGrid()

        snapshot = await self.fetch_snapshot(week_start=week_start, week_end=week_end)

        return self.build_grid(
            week_start=week_start,
            week_end=week_end,
            snapshot=snapshot,
        )

    async def fetch_snapshot(self, *, week_start: date, week_end: date) -> ScheduleSnapshot:
        """Fetch all three collections for the range concurrently."""
        start = pendulum.datetime(week_start.year, week_start.month, week_start.day, tz=self.timezone)
        end = pendulum.datetime(week_end.year, week_end.month, week_end.day, tz=self.timezone)

        sessions, availability, events = await asyncio.gather(
            self._session_store.fetch_sessions(start, end),
            self._availability_store.fetch_availability(),
            self._event_source.fetch_events(start, end),
        )

        return ScheduleSnapshot(
            sessions=tuple(sessions),
            availability=tuple(availability),
            events=tuple(events),
        )

    def build_grid(
        self,
        *,
        week_start: date,
        week_end: date,
        snapshot: ScheduleSnapshot,
    ) -> WeekGrid:
        """Classify an already fetched snapshot."""
        return self._grid_builder.build(
            week_start=week_start,
            week_end=week_end,
            sessions=self._visible_sessions(snapshot.sessions),
            availability=snapshot.availability,
            events=snapshot.events,
        )

    def _visible_sessions(self, sessions: Sequence[InternalSession]) -> List[InternalSession]:
        """
        Drop sessions whose status keeps them off the grid.

        Stores keep cancelled bookings as rows; they must not occupy slots.
        """
        return [
            session for session in sessions
            if session.status.strip().lower() not in self._hidden_statuses
        ]

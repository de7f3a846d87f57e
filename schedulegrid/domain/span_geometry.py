"""
Vertical geometry for blocks that span several hour rows.
"""

import math
from dataclasses import dataclass

from .models import ClassifiedSlot, EventStart, Occupant, SessionStart, TimeRange


@dataclass(frozen=True)
class SpanGeometry:
    """
    Offset from the top of the starting row and total extent of a block,
    both in display units.
    """
    offset: float
    extent: float

    def rows(self, units_per_hour: float) -> int:
        """Number of hour rows the block touches, counting the first."""
        return max(1, math.ceil((self.offset + self.extent) / units_per_hour))


class SpanGeometryCalculator:
    """
    Turns a start occupant into its rendered block geometry.

    One hour row is ``units_per_hour`` units tall. Sessions are drawn to
    their exact duration. Events are only placed at hour granularity by the
    classifier, so their blocks are rounded up to whole rows and never cut
    off the true end time.
    """

    def __init__(self, units_per_hour: float = 60):
        self.units_per_hour = units_per_hour

    @property
    def units_per_minute(self) -> float:
        return self.units_per_hour / 60

    def span_for(self, slot: ClassifiedSlot) -> SpanGeometry | None:
        """Geometry of the block starting in ``slot``; None for any other slot."""
        occupant = slot.occupant
        if occupant is None or not occupant.is_start:
            return None
        return self.compute(occupant, slot)

    def compute(self, occupant: Occupant, slot: ClassifiedSlot) -> SpanGeometry:
        if isinstance(occupant, SessionStart):
            return self._session_geometry(occupant, slot)
        if isinstance(occupant, EventStart):
            return self._event_geometry(occupant, slot)
        raise TypeError(f"No geometry for {occupant.kind} occupants")

    def _session_geometry(self, occupant: SessionStart, slot: ClassifiedSlot) -> SpanGeometry:
        session = occupant.session
        local_start = session.scheduled_at.in_timezone(slot.start.timezone)
        return SpanGeometry(
            offset=local_start.minute * self.units_per_minute,
            extent=session.duration_minutes * self.units_per_minute,
        )

    def _event_geometry(self, occupant: EventStart, slot: ClassifiedSlot) -> SpanGeometry:
        # A block resumed in a later slot or on a later day is drawn from the
        # top of that slot down to the event end, clipped at midnight.
        day_range = TimeRange.for_day(slot.date, slot.start.timezone)
        visible_start = max(occupant.event.start_time, slot.start)
        visible_end = min(occupant.event.end_time, day_range.end)
        visible = TimeRange(start=visible_start, end=visible_end)

        hours = math.ceil(visible.duration_minutes() / 60)
        local_start = visible_start.in_timezone(slot.start.timezone)
        return SpanGeometry(
            offset=local_start.minute * self.units_per_minute,
            extent=max(hours, 1) * self.units_per_hour,
        )

"""
Resolution of the recurring weekly availability template onto dates.
"""

import logging
from datetime import date
from typing import Sequence

from .models import AvailabilityWindow, DayAvailability

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    """
    Maps a calendar date onto the availability window configured for its
    weekday.

    The template is not dated: the same windows apply to every week shown.
    Upstream stores may hold more than one active row for a weekday; the
    first one in input order wins.
    """

    def __init__(self, windows: Sequence[AvailabilityWindow]):
        self._windows = tuple(windows)

    def resolve(self, day: date) -> DayAvailability:
        """Return the open hours for ``day``, or a closed result."""
        day_of_week = day.weekday()
        matches = [
            window for window in self._windows
            if window.active and window.day_of_week == day_of_week
        ]

        if not matches:
            return DayAvailability.closed()

        if len(matches) > 1:
            logger.debug(
                "%d active availability windows for weekday %d, using the first",
                len(matches),
                day_of_week,
            )

        start_hour, end_hour = matches[0].hour_bounds()
        if start_hour >= end_hour:
            return DayAvailability.closed()

        return DayAvailability(open=True, start_hour=start_hour, end_hour=end_hour)

    def is_open(self, day: date, hour: int) -> bool:
        """Check whether ``hour`` on ``day`` lies inside an open window."""
        return self.resolve(day).contains_hour(hour)

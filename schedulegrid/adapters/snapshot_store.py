"""
Schedule store backed by a JSON snapshot file, for mock mode and fixtures.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from pendulum import Date, DateTime

from ..domain.exceptions import StoreError
from ..domain.models import AvailabilityWindow, ExternalEvent, InternalSession
from ..normalize import (
    NormalizationReport,
    normalize_events,
    normalize_sessions,
    normalize_windows,
)

MOCK_DATA_FILE = Path(__file__).parent / "mock_schedule_data.json"


class SnapshotScheduleStore:
    """
    Serves the three schedule collections from a JSON document.

    The document holds ``sessions``, ``availability`` and ``events`` lists
    using the same row shapes as the REST backend. Rows are normalized once
    at load time; malformed rows are dropped and listed in ``report``.
    """

    def __init__(self, data: Dict[str, Any], timezone: str = "Europe/Berlin"):
        if not isinstance(data, dict):
            raise StoreError("Snapshot must contain a mapping at the root level.")

        self.timezone = timezone
        self.report = NormalizationReport()
        self.sessions = normalize_sessions(data.get("sessions", []), timezone, self.report)
        self.availability = normalize_windows(data.get("availability", []), self.report)
        self.events = normalize_events(data.get("events", []), timezone, self.report)

    @classmethod
    def from_file(cls, path: Path, timezone: str = "Europe/Berlin") -> "SnapshotScheduleStore":
        """
        Load a snapshot from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            StoreError: If the file is not valid JSON
        """
        if not path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON in {path}: {exc}") from exc

        return cls(data, timezone=timezone)

    @classmethod
    def mock(cls, timezone: str = "Europe/Berlin") -> "SnapshotScheduleStore":
        """Load the bundled mock week."""
        return cls.from_file(MOCK_DATA_FILE, timezone=timezone)

    def anchor_date(self) -> Date | None:
        """Earliest local date carrying a session or event, if any."""
        instants = [session.scheduled_at for session in self.sessions]
        instants.extend(event.start_time for event in self.events)
        if not instants:
            return None
        return min(instants).in_timezone(self.timezone).date()

    async def fetch_sessions(self, start: DateTime, end: DateTime) -> List[InternalSession]:
        return [
            session for session in self.sessions
            if start <= session.scheduled_at < end
        ]

    async def fetch_availability(self) -> List[AvailabilityWindow]:
        return list(self.availability)

    async def fetch_events(self, start: DateTime, end: DateTime) -> List[ExternalEvent]:
        return [
            event for event in self.events
            if event.start_time < end and event.end_time > start
        ]

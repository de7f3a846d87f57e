"""
REST client for reading schedule rows from a PostgREST-style backend.
"""

import asyncio
import logging
from typing import Any, Dict, List, Sequence, Tuple

import requests
from pendulum import DateTime

from ..domain.exceptions import StoreError
from ..domain.models import AvailabilityWindow, ExternalEvent, InternalSession
from ..normalize import (
    NormalizationReport,
    normalize_events,
    normalize_sessions,
    normalize_windows,
)

logger = logging.getLogger(__name__)

Params = Sequence[Tuple[str, str]]


class RestScheduleStore:
    """
    Reads sessions, availability and external events of one coach.

    Tables:
    - coaching_sessions: confirmed bookings, filtered by coach
    - coach_availability: weekly template rows, filtered by coach
    - external_calendar_events: synced busy blocks, filtered by user

    Every fetch runs the blocking HTTP call in a worker thread so the three
    collections can be awaited together.
    """

    SESSION_SELECT = "*,client:client_profiles(first_name,last_name)"

    def __init__(
        self,
        rest_url: str,
        api_key: str,
        coach_id: str,
        user_id: str,
        timezone: str = "Europe/Berlin",
        timeout_seconds: float = 30,
        session: requests.Session | None = None,
    ):
        """
        Initialize the REST store.

        Args:
            rest_url: Root of the REST API, e.g. ``https://x.example.co/rest/v1``
            api_key: API key sent as ``apikey`` and bearer token
            coach_id: Coach profile whose sessions and availability are read
            user_id: User whose synced calendar events are read
            timezone: IANA timezone the rows are normalized into
            timeout_seconds: Per-request timeout
            session: Optional requests session (connection reuse, tests)
        """
        self.rest_url = rest_url.rstrip("/")
        self.coach_id = coach_id
        self.user_id = user_id
        self.timezone = timezone
        self.timeout_seconds = timeout_seconds
        self.http = session or requests.Session()
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self.report = NormalizationReport()

    @classmethod
    def from_config(cls, store_config, timezone: str) -> "RestScheduleStore":
        return cls(
            rest_url=store_config.get_rest_url(),
            api_key=store_config.api_key,
            coach_id=store_config.coach_id,
            user_id=store_config.user_id,
            timezone=timezone,
            timeout_seconds=store_config.timeout_seconds,
        )

    async def fetch_sessions(self, start: DateTime, end: DateTime) -> List[InternalSession]:
        params = [
            ("select", self.SESSION_SELECT),
            ("coach_id", f"eq.{self.coach_id}"),
            ("scheduled_at", f"gte.{start.to_iso8601_string()}"),
            ("scheduled_at", f"lt.{end.to_iso8601_string()}"),
            ("order", "scheduled_at"),
        ]
        rows = await asyncio.to_thread(self._get_rows, "coaching_sessions", params)
        return normalize_sessions(rows, self.timezone, self.report)

    async def fetch_availability(self) -> List[AvailabilityWindow]:
        params = [
            ("coach_id", f"eq.{self.coach_id}"),
            ("order", "day_of_week"),
        ]
        rows = await asyncio.to_thread(self._get_rows, "coach_availability", params)
        return normalize_windows(rows, self.report)

    async def fetch_events(self, start: DateTime, end: DateTime) -> List[ExternalEvent]:
        params = [
            ("user_id", f"eq.{self.user_id}"),
            ("start_time", f"lt.{end.to_iso8601_string()}"),
            ("end_time", f"gt.{start.to_iso8601_string()}"),
            ("order", "start_time"),
        ]
        rows = await asyncio.to_thread(self._get_rows, "external_calendar_events", params)
        return normalize_events(rows, self.timezone, self.report)

    def _get_rows(self, table: str, params: Params) -> List[Dict[str, Any]]:
        """
        Fetch rows of one table.

        Raises:
            StoreError: If the request fails or the body is not a list of rows
        """
        url = f"{self.rest_url}/{table}"

        try:
            response = self.http.get(
                url,
                headers=self.headers,
                params=list(params),
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise StoreError(f"Failed to fetch {table}: {e}") from e
        except ValueError as e:
            raise StoreError(f"Invalid JSON from {table}: {e}") from e

        if not isinstance(data, list):
            raise StoreError(f"Unexpected response from {table}: expected a list of rows")

        logger.debug("Fetched %d rows from %s", len(data), table)
        return data

"""
Conversion of raw store rows into validated domain records.

A malformed row is fatal only to itself: it is dropped, logged and listed in
the NormalizationReport, and the remaining rows still reach the grid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, Callable, Iterable, List, Mapping, TypeVar

import pendulum
from pendulum import DateTime

from .domain.models import AvailabilityWindow, ExternalEvent, InternalSession

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
T = TypeVar("T")

_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "f", "no", "n", "0", ""}


def _row_id(row: Any) -> Any:
    return row.get("id", "?") if isinstance(row, Mapping) else "?"


@dataclass
class NormalizationReport:
    """Diagnostics for rows that were rejected during normalization."""
    dropped: List[str] = field(default_factory=list)

    def add(self, kind: str, row: Row, error: Exception) -> None:
        self.dropped.append(f"{kind} {_row_id(row)}: {error}")

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)


def parse_instant(value: Any, timezone: str) -> DateTime:
    """
    Parse an ISO 8601 string or datetime into a pendulum DateTime in
    ``timezone``. Naive values are read as local to ``timezone``.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz=timezone)
        return pendulum.instance(value).in_timezone(timezone)

    if not isinstance(value, str):
        raise ValueError(f"Could not parse datetime: {value!r}")

    dt = pendulum.parse(value, tz=timezone)

    if isinstance(dt, DateTime):
        return dt.in_timezone(timezone)

    raise ValueError(f"Could not parse datetime: {value}")


def parse_local_time(value: Any) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Could not parse time: {value!r}")
    return time.fromisoformat(value.strip())


def parse_flag(value: Any, default: bool = False) -> bool:
    """Read a boolean column that stores may send as bool, number or string."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"Could not parse flag: {value!r}")


def _client_name(row: Row) -> str:
    client = row.get("client")
    name = ""
    if isinstance(client, Mapping):
        parts = [client.get("first_name"), client.get("last_name")]
        name = " ".join(str(part) for part in parts if part)
    return name or str(row.get("client_name") or "") or "External Client"


def session_from_row(row: Row, timezone: str) -> InternalSession:
    """Build an InternalSession from a ``coaching_sessions`` row."""
    return InternalSession(
        id=str(row["id"]),
        scheduled_at=parse_instant(row["scheduled_at"], timezone),
        duration_minutes=int(row["duration_minutes"]),
        client_name=_client_name(row),
        is_online=parse_flag(row.get("is_online")),
        status=str(row.get("status") or "scheduled"),
        session_type=str(row.get("session_type") or ""),
        location=row.get("location"),
    )


def window_from_row(row: Row) -> AvailabilityWindow:
    """Build an AvailabilityWindow from a ``coach_availability`` row."""
    return AvailabilityWindow(
        day_of_week=int(row["day_of_week"]),
        start_time=parse_local_time(row["start_time"]),
        end_time=parse_local_time(row["end_time"]),
        active=parse_flag(row.get("is_active"), default=True),
    )


def event_from_row(row: Row, timezone: str) -> ExternalEvent:
    """Build an ExternalEvent from an ``external_calendar_events`` row."""
    return ExternalEvent(
        id=str(row["id"]),
        start_time=parse_instant(row["start_time"], timezone),
        end_time=parse_instant(row["end_time"], timezone),
        is_all_day=parse_flag(row.get("is_all_day")),
        title=row.get("title") or "",
        source=row.get("source") or "",
    )


def _normalize(
    kind: str,
    rows: Iterable[Row],
    build: Callable[[Row], T],
    report: NormalizationReport | None,
) -> List[T]:
    records: List[T] = []

    for row in rows:
        try:
            records.append(build(row))
        except (KeyError, TypeError, ValueError) as exc:
            # DataError is a ValueError: structurally invalid records land here
            logger.warning("Dropping %s row %s: %s", kind, _row_id(row), exc)
            if report is not None:
                report.add(kind, row, exc)

    return records


def normalize_sessions(
    rows: Iterable[Row],
    timezone: str,
    report: NormalizationReport | None = None,
) -> List[InternalSession]:
    return _normalize("session", rows, lambda row: session_from_row(row, timezone), report)


def normalize_windows(
    rows: Iterable[Row],
    report: NormalizationReport | None = None,
) -> List[AvailabilityWindow]:
    return _normalize("availability", rows, window_from_row, report)


def normalize_events(
    rows: Iterable[Row],
    timezone: str,
    report: NormalizationReport | None = None,
) -> List[ExternalEvent]:
    return _normalize("event", rows, lambda row: event_from_row(row, timezone), report)

"""Timestamp parsing and relative-time helpers shared across the pipeline."""

import math
from datetime import UTC, datetime

SECONDS_PER_DAY = 86_400


def parse_timestamp(value: object) -> datetime | None:
    """Parse a Hub ISO-8601 timestamp (``2024-07-23T15:48:12.000Z``).

    Naive values are taken as UTC. Returns None for anything unparsable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def days_since(when: datetime | None, now: datetime | None = None) -> float:
    """Fractional days elapsed since *when*, floored at 0. Missing → infinity."""
    if when is None:
        return math.inf
    if now is None:
        now = datetime.now(UTC)
    return max(0.0, (now - when).total_seconds() / SECONDS_PER_DAY)


def format_date(when: datetime | None) -> str:
    """Date part as ``YYYY-MM-DD``, or ``Unknown``."""
    if when is None:
        return "Unknown"
    return when.astimezone(UTC).date().isoformat()


def time_ago(when: datetime | None, now: datetime | None = None) -> str:
    """Compact relative label: ``42m ago``, ``5h ago``, ``12d ago``, ``3mo ago``."""
    if when is None:
        return ""
    if now is None:
        now = datetime.now(UTC)
    mins = max(0, math.floor((now - when).total_seconds() / 60))
    if mins < 60:
        return f"{mins}m ago"
    hrs = mins // 60
    if hrs < 24:
        return f"{hrs}h ago"
    days = hrs // 24
    if days < 30:
        return f"{days}d ago"
    return f"{days // 30}mo ago"

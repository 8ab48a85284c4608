"""Timestamp parsing and display formatting.

Comment timestamps arrive as ISO 8601 strings that may be missing or
malformed. Parsing never raises: missing values map to ``0`` and formatters
fall back to the raw string.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

UNKNOWN_TIME = "unknown time"
RECENT_WINDOW_SECONDS = 60 * 60


def parse_iso(iso: str | None) -> datetime | None:
    if not iso:
        return None
    candidate = iso.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_timestamp(iso: str | None) -> float:
    """Return epoch seconds for ``iso``, or ``0`` when missing or unparseable."""
    parsed = parse_iso(iso)
    if parsed is None:
        return 0.0
    return parsed.timestamp()


def fmt_date(iso: str | None) -> str:
    if not iso:
        return UNKNOWN_TIME
    parsed = parse_iso(iso)
    if parsed is None:
        return iso
    try:
        local = parsed.astimezone()
    except (OverflowError, OSError, ValueError):
        return iso
    return local.strftime("%Y-%m-%d %H:%M")


def fmt_time_of_day(timestamp: float | None) -> str:
    """Format a wall-clock epoch timestamp as ``HH:MM:SS`` local time."""
    if not timestamp:
        return "unknown"
    try:
        return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return "unknown"


def fmt_relative_or_absolute(iso: str | None, now: float | None = None) -> str:
    """Show ``Nmin ago`` for the last hour, otherwise an absolute date."""
    if not iso:
        return UNKNOWN_TIME
    parsed = parse_iso(iso)
    if parsed is None:
        return iso

    current = time.time() if now is None else now
    delta = current - parsed.timestamp()
    if 0 <= delta < RECENT_WINDOW_SECONDS:
        minutes = max(1, int(delta // 60))
        return f"{minutes}min ago"
    return fmt_date(iso)


def fmt_interval(seconds: float) -> str:
    if float(seconds).is_integer():
        return f"{int(seconds)}s"
    return f"{seconds:.1f}s"


__all__ = [
    "UNKNOWN_TIME",
    "parse_iso",
    "to_timestamp",
    "fmt_date",
    "fmt_time_of_day",
    "fmt_relative_or_absolute",
    "fmt_interval",
]

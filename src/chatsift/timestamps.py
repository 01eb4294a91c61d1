"""Timestamp normalization shared by every adapter."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import dateutil.parser

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def to_iso(dt: datetime) -> str:
    """Render as UTC ISO-8601 with millisecond precision and a Z suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value) -> datetime | None:
    """Parse epoch seconds or a date string into an aware UTC datetime.

    Returns None when the value cannot be interpreted; callers decide the fallback.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            dt = dateutil.parser.isoparse(value.strip())
        except ValueError:
            try:
                dt = dateutil.parser.parse(value.strip())
            except (ValueError, OverflowError):
                return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    return None


def normalize_timestamp(value) -> str:
    """Normalize to an ISO-8601 string, falling back to the current time."""
    dt = parse_timestamp(value)
    if dt is None:
        logger.debug("Unparsable timestamp %r, using current time", value)
        return now_iso()
    return to_iso(dt)


def sort_key(timestamp: str) -> datetime:
    """Chronological key for a normalized timestamp; unparsable sorts as now."""
    return parse_timestamp(timestamp) or datetime.now(timezone.utc)

"""
Timestamp parsing and canonical formatting shared by the query layer.

The archive exchanges recording timestamps as ISO-8601 text in UTC with
millisecond precision and a trailing ``Z`` (``2024-05-01T13:45:00.000Z``).
Naive datetimes are taken to be UTC.
"""
from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a stored or submitted timestamp into an aware UTC datetime.

    Returns None for None and blank strings. Raises ValueError for text that is
    not ISO-8601 and TypeError for values of any other type.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return parse_timestamp(datetime.fromisoformat(text))
    raise TypeError(f"Unsupported timestamp value: {value!r}")


def format_timestamp(value: datetime) -> str:
    """Render a datetime as canonical ``YYYY-MM-DDTHH:MM:SS.mmmZ`` text."""
    moment = parse_timestamp(value)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(UTC)


__all__ = ["format_timestamp", "parse_timestamp", "utc_now"]

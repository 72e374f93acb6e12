"""
Record mapper: storage rows <-> domain records.

The recordings table uses flat, lowercase column names. `COLUMN_FIELDS` pairs
every column with its `Recording` field and is the only place the two naming
schemes meet. Reads rename every column and normalize the timestamp to
canonical text. Writes emit every insert column, with explicit None for
absent values, so each insert has the same column set.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from callarchive.domain.models import NewRecording, Recording
from callarchive.query.timestamps import format_timestamp, parse_timestamp, utc_now
from callarchive.utils.logging import get_logger

log = get_logger(__name__)

COLUMN_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("id", "id"),
    ("recordingid", "recording_id"),
    ("recordingdate", "recording_date"),
    ("attributes", "attributes"),
    ("direction", "direction"),
    ("filepath", "file_path"),
    ("firstparticipant", "first_participant"),
    ("otherparticipants", "other_participants"),
    ("dnis", "dnis"),
    ("ani", "ani"),
    ("toconnection", "to_connection"),
    ("fromconnection", "from_connection"),
    ("workgroup", "workgroup"),
    ("duration", "duration"),
    ("mediatype", "media_type"),
    ("recordingtype", "recording_type"),
    ("filesize", "file_size"),
    ("tags", "tags"),
)

COLUMN_TO_FIELD: Dict[str, str] = {column: field for column, field in COLUMN_FIELDS}

# Identity is assigned by the store and never written.
INSERT_COLUMNS: Tuple[str, ...] = tuple(column for column, _ in COLUMN_FIELDS if column != "id")


def normalize_timestamp(value: Any) -> str:
    """
    Canonical text for a stored timestamp.

    A missing or unreadable timestamp becomes the current time rather than
    None, so every returned recording is sortable and displayable.
    """
    try:
        moment = parse_timestamp(value)
    except (TypeError, ValueError):
        log.warning("Unreadable recording timestamp, defaulting to now", extra={"value": repr(value)})
        moment = None
    if moment is None:
        moment = utc_now()
    return format_timestamp(moment)


def from_storage_row(row: Mapping[str, Any]) -> Recording:
    """Build a `Recording` from a flat storage row."""
    values = {field: row.get(column) for column, field in COLUMN_FIELDS}
    values["recording_date"] = normalize_timestamp(values["recording_date"])
    return Recording(**values)


def _storage_value(value: Any) -> Optional[Any]:
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str) and not value:
        return None
    return value


def to_storage_row(data: NewRecording) -> Dict[str, Any]:
    """Flatten a `NewRecording` into an insert row keyed by column name."""
    row: Dict[str, Any] = {}
    for column in INSERT_COLUMNS:
        value = getattr(data, COLUMN_TO_FIELD[column])
        if column == "recordingdate" and value is not None:
            value = format_timestamp(value)
        row[column] = _storage_value(value)
    return row


__all__ = [
    "COLUMN_FIELDS",
    "COLUMN_TO_FIELD",
    "INSERT_COLUMNS",
    "from_storage_row",
    "normalize_timestamp",
    "to_storage_row",
]

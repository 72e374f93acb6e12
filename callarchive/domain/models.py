"""
Domain models for the call recording archive.

Defines the read model for a stored recording, the write model accepted by the
add flow, and the sparse search filters used to query the archive. Column
naming on the storage side lives in `callarchive.query.mapper`; these models
only carry typed, named fields.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Workgroups the archive knows about. Used to populate pick lists; stored
# values are not checked against it.
KNOWN_WORKGROUPS = (
    "Support_Tier1",
    "Support_Tier2",
    "Sales_Inbound",
    "Sales_Outbound",
    "Retention",
    "Billing",
    "HR_Internal",
)


class Direction(str, Enum):
    """Call flow classification."""

    INBOUND = "Inbound"
    OUTBOUND = "Outbound"
    INTERCOM = "Intercom"


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _stored_direction(value):
    # Stored text is not constrained; match case-insensitively, unknown reads as unset.
    value = _blank_to_none(value)
    if value is None or isinstance(value, Direction):
        return value
    text = str(value).strip().casefold()
    for member in Direction:
        if member.value.casefold() == text:
            return member
    return None


class Recording(BaseModel):
    """
    Representation of a single row in the recordings table.
    """

    id: int = Field(..., description="Store-assigned identity.")
    recording_id: Optional[str] = Field(None, description="External recording identifier.")
    recording_date: str = Field(..., description="Canonical UTC timestamp text.")
    attributes: Optional[str] = Field(None, description="Free-text attribute blob.")
    direction: Optional[Direction] = Field(None, description="Inbound, Outbound or Intercom.")
    file_path: Optional[str] = Field(None, description="URL or path of the playable media.")
    first_participant: Optional[str] = None
    other_participants: Optional[str] = None
    dnis: Optional[str] = Field(None, description="Dialed number.")
    ani: Optional[str] = Field(None, description="Calling number.")
    to_connection: Optional[str] = None
    from_connection: Optional[str] = None
    workgroup: Optional[str] = None
    duration: Optional[int] = Field(None, description="Length in whole seconds.")
    media_type: Optional[str] = None
    recording_type: Optional[str] = None
    file_size: Optional[int] = Field(None, description="Size of the media in bytes.")
    tags: Optional[str] = None

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @field_validator("direction", mode="before")
    @classmethod
    def unknown_direction_is_unset(cls, value):
        return _stored_direction(value)


class NewRecording(BaseModel):
    """
    Metadata for a recording about to be inserted.

    Every field is optional at the type level. The write path still refuses a
    record without `file_path`, see `RecordingService.add_recording`.
    """

    recording_id: Optional[str] = None
    recording_date: Optional[datetime] = None
    attributes: Optional[str] = None
    direction: Optional[Direction] = None
    file_path: Optional[str] = None
    first_participant: Optional[str] = None
    other_participants: Optional[str] = None
    dnis: Optional[str] = None
    ani: Optional[str] = None
    to_connection: Optional[str] = None
    from_connection: Optional[str] = None
    workgroup: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
    media_type: Optional[str] = None
    recording_type: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    tags: Optional[str] = None

    @field_validator("recording_date", "direction", "duration", "file_size", mode="before")
    @classmethod
    def blank_values_are_unset(cls, value):
        return _blank_to_none(value)


class SearchFilters(BaseModel):
    """
    Sparse search criteria over the archive.

    Every field is a string; an empty string means "no constraint". Values are
    stripped on construction so whitespace-only input counts as empty. Nothing
    else is validated here: a non-numeric duration bound only fails once the
    store tries to cast it.
    """

    id: str = ""
    recording_id: str = ""
    attributes: str = ""
    agent_name: str = ""
    date_from: str = ""
    date_to: str = ""
    dnis: str = ""
    ani: str = ""
    workgroup: str = ""
    direction: str = ""
    media_type: str = ""
    recording_type: str = ""
    tags: str = ""
    min_duration: str = ""
    max_duration: str = ""

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    def is_empty(self) -> bool:
        return not any(value for value in self.model_dump().values())


__all__ = [
    "Direction",
    "KNOWN_WORKGROUPS",
    "NewRecording",
    "Recording",
    "SearchFilters",
]

"""
Domain package for the call recording archive.

Exports the core domain models and exceptions used across the query layer,
the storage adapters and the recording service. Keep this package focused on
data definitions and validation concerns.
"""

from callarchive.domain.errors import ArchiveError, MissingMediaError, UploadError
from callarchive.domain.models import (
    KNOWN_WORKGROUPS,
    Direction,
    NewRecording,
    Recording,
    SearchFilters,
)

__all__ = [
    "ArchiveError",
    "Direction",
    "KNOWN_WORKGROUPS",
    "MissingMediaError",
    "NewRecording",
    "Recording",
    "SearchFilters",
    "UploadError",
]

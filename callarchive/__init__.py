"""
Call recording archive - search and ingest for archived call recordings.

This package provides the pieces behind a call-recording archive browser:

- A filter compiler turning sparse search criteria into a parameterized
  Postgres predicate
- A record mapper between the flat recordings table and typed records
- Postgres and in-memory recording stores
- Audio upload to S3 ahead of metadata insertion
- A typer CLI for searching and adding recordings
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from callarchive.config import Settings, get_settings
from callarchive.domain import (
    ArchiveError,
    Direction,
    MissingMediaError,
    NewRecording,
    Recording,
    SearchFilters,
    UploadError,
)
from callarchive.query import CompiledQuery, compile_filters, from_storage_row, to_storage_row
from callarchive.service import RecordingService
from callarchive.storage import InMemoryRecordingStore, PostgresRecordingStore, RecordingStore
from callarchive.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "ArchiveError",
    "Direction",
    "MissingMediaError",
    "NewRecording",
    "Recording",
    "SearchFilters",
    "UploadError",
    # Query
    "CompiledQuery",
    "compile_filters",
    "from_storage_row",
    "to_storage_row",
    # Service and stores
    "RecordingService",
    "RecordingStore",
    "InMemoryRecordingStore",
    "PostgresRecordingStore",
    # Logging
    "configure_logging",
    "get_logger",
]

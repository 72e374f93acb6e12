"""
Storage package for the call recording archive.

This module re-exports the store interfaces and the concrete stores so
downstream code can import from `callarchive.storage` directly.
"""

from callarchive.storage.abstract import AbstractRecordingStore, RecordingStore
from callarchive.storage.memory import InMemoryRecordingStore
from callarchive.storage.postgres import PostgresRecordingStore

__all__ = [
    # Abstracts
    "AbstractRecordingStore",
    "RecordingStore",
    # Concrete stores
    "InMemoryRecordingStore",
    "PostgresRecordingStore",
]

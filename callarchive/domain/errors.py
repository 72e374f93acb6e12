"""
Exceptions raised by the archive's write and upload paths.

Store failures are not wrapped: whatever the storage adapter raises (usually a
`psycopg.Error`) reaches the caller unchanged.
"""
from __future__ import annotations


class ArchiveError(Exception):
    """Base class for errors raised by the archive itself."""


class MissingMediaError(ArchiveError, ValueError):
    """A recording was submitted without audio or a media location."""


class UploadError(ArchiveError):
    """The media upload failed; nothing was written to the store."""


__all__ = ["ArchiveError", "MissingMediaError", "UploadError"]

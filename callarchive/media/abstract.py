"""
Media upload interface for the call recording archive.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

DEFAULT_CONTENT_TYPE = "audio/mpeg"


@runtime_checkable
class MediaUploader(Protocol):
    """
    Puts raw audio somewhere playable and returns where.

    Implementations raise `callarchive.domain.errors.UploadError` on failure.
    """

    def upload(self, data: bytes, filename: str, content_type: str = DEFAULT_CONTENT_TYPE) -> str:
        """Store `data` under `filename` and return a publicly resolvable URL."""
        ...


__all__ = ["DEFAULT_CONTENT_TYPE", "MediaUploader"]

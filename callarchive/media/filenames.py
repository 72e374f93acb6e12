"""Collision-resistant object names for uploaded recordings."""

from __future__ import annotations

import random
import string
import time
from typing import Optional

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 7


def generate_audio_filename(
    prefix: Optional[str] = "recording",
    timestamp_ms: Optional[int] = None,
    extension: str = "mp3",
) -> str:
    """
    Build ``<prefix>_<epoch millis>_<random base36 suffix>.<extension>``.

    A blank prefix falls back to ``recording``.
    """
    stem = prefix or "recording"
    millis = int(time.time() * 1000) if timestamp_ms is None else timestamp_ms
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=SUFFIX_LENGTH))
    return f"{stem}_{millis}_{suffix}.{extension}"


__all__ = ["SUFFIX_LENGTH", "generate_audio_filename"]

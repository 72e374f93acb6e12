"""
Media package for the call recording archive.

Upload of recording audio to object storage and the naming policy for the
uploaded objects.
"""

from callarchive.media.abstract import DEFAULT_CONTENT_TYPE, MediaUploader
from callarchive.media.filenames import generate_audio_filename
from callarchive.media.s3 import S3MediaUploader

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "MediaUploader",
    "S3MediaUploader",
    "generate_audio_filename",
]

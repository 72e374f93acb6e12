"""
Recording service: search and add flows over an injected store.

Usage (example from CLI):
    from callarchive.service import RecordingService
    from callarchive.storage import PostgresRecordingStore

    with PostgresRecordingStore() as store:
        service = RecordingService(store)
        recordings = service.search(SearchFilters(direction="Inbound"))

Search compiles the filters, hands the compiled query to the store and maps
the rows it returns. Add validates the media location and inserts one row.
Upload-and-add puts the audio in object storage first and only then inserts;
the two steps are not transactional, so an insert failure leaves the uploaded
object behind.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from callarchive.domain.errors import MissingMediaError, UploadError
from callarchive.domain.models import NewRecording, Recording, SearchFilters
from callarchive.media.abstract import DEFAULT_CONTENT_TYPE, MediaUploader
from callarchive.media.filenames import generate_audio_filename
from callarchive.query.filters import compile_filters
from callarchive.query.mapper import from_storage_row, to_storage_row
from callarchive.query.timestamps import utc_now
from callarchive.storage.abstract import RecordingStore
from callarchive.utils.logging import get_logger

log = get_logger(__name__)


class RecordingService:
    """
    Entry point for reading and writing archived recordings.

    Parameters
    ----------
    store : RecordingStore
        Where recordings live. Owned by the caller.
    uploader : MediaUploader | None
        Required only for `upload_and_add`.
    filename_policy : callable
        Maps a name prefix to a unique object name.
    """

    def __init__(
        self,
        store: RecordingStore,
        uploader: Optional[MediaUploader] = None,
        filename_policy: Callable[[Optional[str]], str] = generate_audio_filename,
    ) -> None:
        self.store = store
        self.uploader = uploader
        self.filename_policy = filename_policy

    def search(
        self, filters: Optional[SearchFilters] = None, limit: Optional[int] = None
    ) -> List[Recording]:
        """
        Return recordings matching every non-empty filter, most recent first.

        Store errors (including a failed cast of a malformed ID or duration
        bound) and rows that cannot be mapped are logged and re-raised
        unchanged.
        """
        query = compile_filters(filters or SearchFilters())
        log.info(
            "[SEARCH START]",
            extra={"store": self.store.name, "fields": query.fields, "limit": limit},
        )
        try:
            rows = self.store.fetch(query, limit=limit)
            recordings = [from_storage_row(row) for row in rows]
        except Exception:
            log.exception("[SEARCH FAILED]", extra={"store": self.store.name, "fields": query.fields})
            raise
        log.info("[SEARCH COMPLETE]", extra={"store": self.store.name, "rows": len(recordings)})
        return recordings

    def add_recording(self, data: NewRecording) -> None:
        """
        Insert one recording's metadata.

        Raises
        ------
        MissingMediaError
            If `data.file_path` is empty. Nothing reaches the store.
        """
        if not data.file_path:
            raise MissingMediaError("A media location is required to add a recording")

        row = to_storage_row(data)
        try:
            self.store.insert(row)
        except Exception:
            log.exception(
                "[ADD FAILED]",
                extra={"store": self.store.name, "recording_id": data.recording_id},
            )
            raise
        log.info(
            "[ADD COMPLETE]",
            extra={"recording_id": data.recording_id, "file_path": data.file_path},
        )

    def upload_and_add(
        self,
        audio: bytes,
        data: Optional[NewRecording] = None,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> str:
        """
        Upload audio, then insert its metadata pointing at the uploaded URL.

        Unset fields are filled the way the add form fills them: the recording
        date defaults to now, the duration to 0 and the file size to the audio
        length.

        Returns
        -------
        str
            The URL of the uploaded audio.

        Raises
        ------
        MissingMediaError
            If `audio` is empty. Neither upload nor insert is attempted.
        UploadError
            If no uploader is configured or the upload fails. No insert is attempted.
        """
        data = data or NewRecording()
        if not audio:
            raise MissingMediaError("Please record or upload an audio file")
        if self.uploader is None:
            raise UploadError("Failed to upload audio file: no media uploader configured")

        filename = self.filename_policy(data.recording_id or "recording")
        url = self.uploader.upload(audio, filename, content_type)

        record = data.model_copy(
            update={
                "file_path": url,
                "file_size": len(audio),
                "recording_date": data.recording_date or utc_now(),
                "duration": data.duration or 0,
            }
        )
        try:
            self.add_recording(record)
        except Exception:
            log.warning("Uploaded audio has no metadata row", extra={"url": url})
            raise
        return url


__all__ = ["RecordingService"]

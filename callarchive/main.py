from __future__ import annotations

import mimetypes
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, NoReturn, Optional

import psycopg
import typer

from callarchive.config import get_settings
from callarchive.domain.errors import ArchiveError
from callarchive.domain.models import KNOWN_WORKGROUPS, Direction, NewRecording, SearchFilters
from callarchive.media.abstract import DEFAULT_CONTENT_TYPE
from callarchive.media.s3 import S3MediaUploader
from callarchive.reporter import print_recordings
from callarchive.service import RecordingService
from callarchive.storage.postgres import PostgresRecordingStore
from callarchive.utils.logging import configure_logging

app = typer.Typer(help="Call recording archive CLI.")

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


@contextmanager
def _open_service() -> Iterator[RecordingService]:
    """Wire a service to the configured Postgres store and S3 bucket."""
    with PostgresRecordingStore() as store:
        yield RecordingService(store, uploader=S3MediaUploader())


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: Exception) -> NoReturn:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    if settings.database_url:
        database = "DATABASE_URL (set)"
    else:
        database = f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    typer.echo(
        f"DB={database} | table={settings.recordings_table} "
        f"timeout_ms={settings.db_statement_timeout_ms}"
    )
    typer.echo(
        f"S3 bucket={settings.aws_bucket_name or '-'} region={settings.aws_region or '-'} "
        f"prefix={settings.upload_key_prefix} "
        f"credentials={'set' if settings.aws_access_key_id else 'default chain'}"
    )


@app.command()
def search(
    record_id: str = typer.Option("", "--id", help="Exact store identity."),
    recording_id: str = typer.Option("", "--recording-id", help="Substring of the recording ID."),
    attributes: str = typer.Option("", "--attributes", help="Substring of the attributes blob."),
    agent_name: str = typer.Option(
        "", "--agent", "-a", help="Substring of either participant description."
    ),
    date_from: str = typer.Option("", "--from", help="Earliest recording day (YYYY-MM-DD)."),
    date_to: str = typer.Option("", "--to", help="Latest recording day, inclusive (YYYY-MM-DD)."),
    dnis: str = typer.Option("", "--dnis", help="Substring of the dialed number."),
    ani: str = typer.Option("", "--ani", help="Substring of the calling number."),
    workgroup: str = typer.Option(
        "", "--workgroup", "-w", help=f"Exact workgroup, e.g. {', '.join(KNOWN_WORKGROUPS)}."
    ),
    direction: Optional[Direction] = typer.Option(None, "--direction", "-d", help="Call direction."),
    media_type: str = typer.Option("", "--media-type", help="Substring of the media type."),
    recording_type: str = typer.Option("", "--recording-type", help="Substring of the recording type."),
    tags: str = typer.Option("", "--tags", "-t", help="Substring of the tags."),
    min_duration: str = typer.Option("", "--min-duration", help="Minimum length in seconds."),
    max_duration: str = typer.Option("", "--max-duration", help="Maximum length in seconds."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=0, help="Cap the number of rows (default from settings)."
    ),
) -> None:
    """
    Search the archive; every given option must match.
    """
    _setup_logging()
    filters = SearchFilters(
        id=record_id,
        recording_id=recording_id,
        attributes=attributes,
        agent_name=agent_name,
        date_from=date_from,
        date_to=date_to,
        dnis=dnis,
        ani=ani,
        workgroup=workgroup,
        direction=direction.value if direction else "",
        media_type=media_type,
        recording_type=recording_type,
        tags=tags,
        min_duration=min_duration,
        max_duration=max_duration,
    )
    if limit is None:
        limit = get_settings().search_limit
    if filters.is_empty():
        typer.secho("No filters given, listing every recording.", dim=True, err=True)
    try:
        with _open_service() as service:
            recordings = service.search(filters, limit=limit)
    except (ArchiveError, psycopg.Error, ValueError) as exc:
        # ValueError covers unmappable rows and casts evaluated outside the database.
        _fail(exc)
    print_recordings(recordings)


@app.command()
def add(
    audio: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Audio file to upload."
    ),
    dnis: str = typer.Option(..., "--dnis", help="Number that was dialed (required)."),
    recording_id: str = typer.Option("", "--recording-id", help="External recording ID."),
    recording_date: Optional[datetime] = typer.Option(
        None, "--date", formats=DATE_FORMATS, help="When the call happened (UTC). Defaults to now."
    ),
    direction: Optional[Direction] = typer.Option(None, "--direction", "-d"),
    workgroup: str = typer.Option("", "--workgroup", "-w"),
    first_participant: str = typer.Option("", "--first-participant"),
    other_participants: str = typer.Option("", "--other-participants"),
    ani: str = typer.Option("", "--ani", help="Calling number."),
    to_connection: str = typer.Option("", "--to-connection"),
    from_connection: str = typer.Option("", "--from-connection"),
    duration: int = typer.Option(0, "--duration", min=0, help="Length in seconds."),
    media_type: str = typer.Option("audio", "--media-type"),
    recording_type: str = typer.Option("call", "--recording-type"),
    attributes: str = typer.Option("", "--attributes"),
    tags: str = typer.Option("", "--tags", "-t"),
) -> None:
    """
    Upload an audio file and record its metadata.
    """
    _setup_logging()
    data = NewRecording(
        recording_id=recording_id,
        recording_date=recording_date,
        direction=direction,
        workgroup=workgroup,
        first_participant=first_participant,
        other_participants=other_participants,
        dnis=dnis,
        ani=ani,
        to_connection=to_connection,
        from_connection=from_connection,
        duration=duration,
        media_type=media_type,
        recording_type=recording_type,
        attributes=attributes,
        tags=tags,
    )
    content_type = mimetypes.guess_type(audio.name)[0] or DEFAULT_CONTENT_TYPE
    try:
        with _open_service() as service:
            url = service.upload_and_add(audio.read_bytes(), data, content_type=content_type)
    except (ArchiveError, psycopg.Error) as exc:
        _fail(exc)
    typer.secho(f"Recording saved: {url}", fg=typer.colors.GREEN)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()

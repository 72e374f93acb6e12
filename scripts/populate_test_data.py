"""
Test data script for the call recording archive.

Generates deterministic pseudo-random recordings and inserts them through the
recording service, so the rows go through the same mapping and validation as
real submissions.
"""

from __future__ import annotations

import json
import random
import sys
import time
from datetime import UTC, datetime, timedelta

import typer

from callarchive.config import get_settings
from callarchive.domain.models import KNOWN_WORKGROUPS, Direction, NewRecording
from callarchive.service import RecordingService
from callarchive.storage.postgres import PostgresRecordingStore
from callarchive.utils.logging import configure_logging

app = typer.Typer(help="Populate the recordings table with synthetic test data.")

WORKGROUPS = list(KNOWN_WORKGROUPS)
PARTICIPANTS = [
    "John Doe",
    "Jane Smith",
    "Mike Johnson",
    "Sarah Williams",
    "David Brown",
    "Emily Davis",
    "Chris Wilson",
    "Lisa Anderson",
    "Tom Martinez",
    "Amy Taylor",
]
TAGS = ["important", "follow-up", "resolved", "escalated"]
SAMPLE_AUDIO_URLS = [
    "https://www2.cs.uic.edu/~i101/SoundFiles/BabyElephantWalk60.wav",
    "https://www2.cs.uic.edu/~i101/SoundFiles/PinkPanther30.wav",
    "https://www2.cs.uic.edu/~i101/SoundFiles/CantinaBand60.wav",
]


def _phone_number(rng: random.Random) -> str:
    return f"{rng.randint(100, 999)}{rng.randint(100, 999)}{rng.randint(1000, 9999)}"


def _generate_records(
    count: int, seed: int, now: datetime | None = None, days: int = 30
) -> list[NewRecording]:
    """Build `count` recordings dated within the `days` before `now`."""
    rng = random.Random(seed)
    now = now or datetime.now(UTC)
    records: list[NewRecording] = []

    for i in range(count):
        direction = rng.choice(list(Direction))
        recorded_at = now - timedelta(
            days=rng.randrange(days), hours=rng.randrange(24), minutes=rng.randrange(60)
        )
        attributes = {
            "interaction_id": f"INT-{rng.randint(0, 99_999)}",
            "campaign": f"Q{rng.randint(1, 4)}-{now.year}",
            "quality_score": rng.randint(1, 5),
        }
        records.append(
            NewRecording(
                recording_id=f"REC-{seed}-{i + 1:05d}",
                media_type="audio",
                recording_type="call",
                file_path=rng.choice(SAMPLE_AUDIO_URLS),
                recording_date=recorded_at,
                file_size=rng.randint(100_000, 5_000_000),
                direction=direction,
                first_participant=rng.choice(PARTICIPANTS),
                other_participants=(
                    rng.choice(PARTICIPANTS) if direction is Direction.INTERCOM else None
                ),
                to_connection=f"CONN-{rng.randrange(10_000)}",
                from_connection=f"CONN-{rng.randrange(10_000)}",
                tags=rng.choice(TAGS),
                attributes=json.dumps(attributes),
                dnis=_phone_number(rng),
                ani=_phone_number(rng),
                duration=rng.randint(30, 600),
                workgroup=rng.choice(WORKGROUPS),
            )
        )
    return records


def _insert_records(service: RecordingService, records: list[NewRecording]) -> int:
    for index, record in enumerate(records, start=1):
        service.add_recording(record)
        minutes, seconds = divmod(record.duration or 0, 60)
        typer.echo(
            f"[{index}/{len(records)}] {record.recording_id} {record.direction.value} "
            f"{record.first_participant} / {record.workgroup} {minutes}:{seconds:02d}"
        )
    return len(records)


@app.command()
def main(
    rows: int = typer.Option(10, "--rows", "-r", help="Number of recordings to insert."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Generate synthetic recordings and insert them into the configured table.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    start = time.perf_counter()

    records = _generate_records(rows, seed=seed)
    with PostgresRecordingStore(dsn_override=dsn) as store:
        inserted = _insert_records(RecordingService(store), records)

    duration = time.perf_counter() - start
    typer.echo(f"Inserted {inserted} recording(s) into {settings.recordings_table} in {duration:.2f}s.")
    typer.echo("Directions: " + ", ".join(sorted({r.direction.value for r in records})))
    typer.echo("Workgroups: " + ", ".join(sorted({r.workgroup for r in records})))


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)

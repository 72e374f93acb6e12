from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from callarchive.domain.models import Direction, Recording

_SIZE_UNITS = ("B", "KB", "MB", "GB")

_DIRECTION_STYLES = {
    Direction.INBOUND: "green",
    Direction.OUTBOUND: "blue",
    Direction.INTERCOM: "white",
}


def format_duration(seconds: Optional[int]) -> str:
    """Render whole seconds as ``Xm Ys``; unknown durations read as zero."""
    if not seconds:
        return "0m 0s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return "-"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def format_date(value: str) -> str:
    """Show a canonical timestamp in the local timezone; pass through anything unreadable."""
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        return value
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def build_table(recordings: Sequence[Recording], title: str = "Call Recordings") -> Table:
    table = Table(
        title=title,
        box=box.ROUNDED,
        caption=f"{len(recordings)} recording(s), most recent first",
    )

    table.add_column("ID", justify="right", style="dim")
    table.add_column("Recording ID", style="cyan", no_wrap=True)
    table.add_column("Dir")
    table.add_column("Date", style="magenta")
    table.add_column("Participants")
    table.add_column("DNIS / ANI")
    table.add_column("Workgroup", style="yellow")
    table.add_column("Duration", justify="right", style="green")
    table.add_column("Size", justify="right")
    table.add_column("Tags", style="dim")

    for rec in recordings:
        if rec.direction is not None:
            style = _DIRECTION_STYLES[rec.direction]
            direction = f"[{style}]{rec.direction.value}[/{style}]"
        else:
            direction = "-"
        participants = "\n".join(p for p in (rec.first_participant, rec.other_participants) if p)
        numbers = f"{rec.dnis or '-'}\n{rec.ani or '-'}"
        table.add_row(
            str(rec.id),
            rec.recording_id or "-",
            direction,
            format_date(rec.recording_date),
            participants or "-",
            numbers,
            rec.workgroup or "-",
            format_duration(rec.duration),
            format_file_size(rec.file_size),
            rec.tags or "",
        )
    return table


def print_recordings(recordings: List[Recording], console: Optional[Console] = None) -> None:
    """
    Render search results as a rich table.
    """
    console = console or Console()

    if not recordings:
        console.print("[yellow]No recordings match the given filters.[/yellow]")
        return

    console.print(build_table(recordings))

"""
In-memory recording store.

Holds rows in a list and evaluates compiled queries through each clause's
row matcher, so it answers searches with the same semantics as the Postgres
store. Useful for demos without a database and as the store in unit tests.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from callarchive.query.filters import CompiledQuery
from callarchive.query.mapper import INSERT_COLUMNS
from callarchive.query.timestamps import parse_timestamp
from callarchive.storage.abstract import AbstractRecordingStore


class InMemoryRecordingStore(AbstractRecordingStore):
    """
    List-backed store with store-assigned, increasing identities.

    Timestamps are stored as aware UTC datetimes, mirroring a ``timestamptz``
    column. Unknown columns are rejected the way the database would.
    """

    name: str = "memory"

    def __init__(self, rows: Iterable[Mapping[str, Any]] = ()) -> None:
        self._rows: List[Dict[str, Any]] = []
        self._next_id = 1
        self._lock = threading.Lock()
        for row in rows:
            self.insert(row)

    def __len__(self) -> int:
        return len(self._rows)

    def insert(self, row: Mapping[str, Any]) -> None:
        unknown = sorted(set(row) - set(INSERT_COLUMNS))
        if unknown:
            raise ValueError(f"Unknown column(s): {', '.join(unknown)}")
        stored: Dict[str, Any] = {column: row.get(column) for column in INSERT_COLUMNS}
        stored["recordingdate"] = parse_timestamp(stored["recordingdate"])
        with self._lock:
            stored["id"] = self._next_id
            self._next_id += 1
            self._rows.append(stored)

    def fetch(self, query: CompiledQuery, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        with self._lock:
            snapshot = list(self._rows)
        matched = [dict(row) for row in snapshot if query.matches(row)]
        dated = [row for row in matched if row["recordingdate"] is not None]
        undated = [row for row in matched if row["recordingdate"] is None]
        dated.sort(key=lambda row: row["recordingdate"], reverse=True)
        ordered = dated + undated
        if limit is not None:
            ordered = ordered[:limit]
        return ordered


__all__ = ["InMemoryRecordingStore"]

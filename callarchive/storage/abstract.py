"""
Storage interfaces for the call recording archive.

The recording service only talks to a `RecordingStore`. Concrete stores
(Postgres, in-memory) implement this protocol and are handed to the service
explicitly, so tests can substitute a fake without touching global state.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from callarchive.query.filters import CompiledQuery


@runtime_checkable
class RecordingStore(Protocol):
    """
    Common interface all recording stores must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    """

    name: str

    def fetch(self, query: CompiledQuery, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Return the rows matching `query`, most recent first.

        Parameters
        ----------
        query : CompiledQuery
            Compiled filter predicate and its positional parameters.
        limit : int | None
            Optional cap on the number of rows returned.

        Returns
        -------
        list[dict]
            Flat rows keyed by lowercase column name.
        """
        ...

    def insert(self, row: Mapping[str, Any]) -> None:
        """Insert a single flat row. The store assigns the identity."""
        ...


class AbstractRecordingStore(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses should set `name` and implement `fetch` and `insert`.
    """

    name: str

    @abc.abstractmethod
    def fetch(
        self, query: CompiledQuery, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def insert(self, row: Mapping[str, Any]) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def close(self) -> None:
        """Release any held resources. No-op by default."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["AbstractRecordingStore", "RecordingStore"]

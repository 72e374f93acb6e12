"""
Filter compiler: turns sparse `SearchFilters` into a parameterized predicate.

Each searchable field maps to exactly one rule in `FILTER_RULES`. Compiling
walks that table once, skips empty fields, and emits one `Clause` per active
field. A clause owns its SQL fragment, the parameters for that fragment's
placeholders (in order), and a row-level matcher with the same semantics so an
in-memory store can evaluate the very same compiled query.

Placeholders are psycopg positional ``%s``. Because every clause carries its own
parameters and the predicate is joined in the same order the parameters are
flattened, placeholder/parameter alignment holds by construction.

The predicate is meant to be conjoined with a base ``SELECT * FROM <table>``;
see `callarchive.storage.postgres.PostgresRecordingStore`.

Values are not validated. A non-numeric ID or duration bound is passed through
and fails when the store casts it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple

from callarchive.domain.models import SearchFilters
from callarchive.query.timestamps import parse_timestamp

Row = Mapping[str, Any]
RowMatcher = Callable[[Row], bool]

# Rows are always returned most-recent-first; undated rows sink to the end.
ORDER_BY = "recordingdate DESC NULLS LAST"

END_OF_DAY = time(23, 59, 59, 999_000)


@dataclass(frozen=True)
class Clause:
    """One compiled filter condition."""

    field: str
    sql: str
    params: Tuple[Any, ...]
    matches: RowMatcher = field(compare=False, repr=False)


@dataclass(frozen=True)
class CompiledQuery:
    """
    The conjunction of all active clauses.

    An empty clause list compiles to the predicate ``TRUE`` with no parameters,
    which matches every row.
    """

    clauses: Tuple[Clause, ...] = ()

    @property
    def predicate(self) -> str:
        if not self.clauses:
            return "TRUE"
        return " AND ".join(clause.sql for clause in self.clauses)

    @property
    def params(self) -> List[Any]:
        return [param for clause in self.clauses for param in clause.params]

    @property
    def fields(self) -> List[str]:
        return [clause.field for clause in self.clauses]

    def matches(self, row: Row) -> bool:
        return all(clause.matches(row) for clause in self.clauses)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _text(row: Row, column: str) -> str:
    value = row.get(column)
    return "" if value is None else str(value)


def _day(value: str) -> date:
    return date.fromisoformat(value)


# --- rule kinds ---------------------------------------------------------------
# Each builder takes the rule's columns and the (non-empty) filter value and
# returns (sql fragment, params, matcher).


def _contains(columns: Sequence[str], value: str):
    pattern = f"%{escape_like(value)}%"
    needle = value.lower()
    if len(columns) == 1:
        sql = f"{columns[0]} ILIKE %s"
    else:
        sql = "(" + " OR ".join(f"{column} ILIKE %s" for column in columns) + ")"

    def matches(row: Row) -> bool:
        return any(needle in _text(row, column).lower() for column in columns)

    return sql, tuple(pattern for _ in columns), matches


def _equals(columns: Sequence[str], value: str):
    (column,) = columns

    def matches(row: Row) -> bool:
        stored = row.get(column)
        if stored is None:
            return False
        return str(getattr(stored, "value", stored)) == value

    return f"{column} = %s", (value,), matches


def _integer_equals(columns: Sequence[str], value: str):
    (column,) = columns

    def matches(row: Row) -> bool:
        return row.get(column) == int(value)

    return f"{column} = %s::bigint", (value,), matches


def _at_least(columns: Sequence[str], value: str):
    (column,) = columns

    def matches(row: Row) -> bool:
        stored = row.get(column)
        return stored is not None and stored >= int(value)

    return f"{column} >= %s::integer", (value,), matches


def _at_most(columns: Sequence[str], value: str):
    (column,) = columns

    def matches(row: Row) -> bool:
        stored = row.get(column)
        return stored is not None and stored <= int(value)

    return f"{column} <= %s::integer", (value,), matches


def _on_or_after_day(columns: Sequence[str], value: str):
    (column,) = columns

    def matches(row: Row) -> bool:
        stored = parse_timestamp(row.get(column))
        if stored is None:
            return False
        return stored >= datetime.combine(_day(value), time.min, tzinfo=UTC)

    return f"{column} >= %s::date", (value,), matches


def _on_or_before_day(columns: Sequence[str], value: str):
    (column,) = columns

    def matches(row: Row) -> bool:
        stored = parse_timestamp(row.get(column))
        if stored is None:
            return False
        return stored <= datetime.combine(_day(value), END_OF_DAY, tzinfo=UTC)

    return f"{column} <= %s::date + time '23:59:59.999'", (value,), matches


RULE_KINDS: Dict[str, Callable[[Sequence[str], str], Tuple[str, Tuple[Any, ...], RowMatcher]]] = {
    "contains": _contains,
    "equals": _equals,
    "integer_equals": _integer_equals,
    "at_least": _at_least,
    "at_most": _at_most,
    "on_or_after_day": _on_or_after_day,
    "on_or_before_day": _on_or_before_day,
}


@dataclass(frozen=True)
class FilterRule:
    field: str
    kind: str
    columns: Tuple[str, ...]


FILTER_RULES: Tuple[FilterRule, ...] = (
    FilterRule("id", "integer_equals", ("id",)),
    FilterRule("recording_id", "contains", ("recordingid",)),
    FilterRule("attributes", "contains", ("attributes",)),
    FilterRule("agent_name", "contains", ("firstparticipant", "otherparticipants")),
    FilterRule("date_from", "on_or_after_day", ("recordingdate",)),
    FilterRule("date_to", "on_or_before_day", ("recordingdate",)),
    FilterRule("dnis", "contains", ("dnis",)),
    FilterRule("ani", "contains", ("ani",)),
    FilterRule("workgroup", "equals", ("workgroup",)),
    FilterRule("direction", "equals", ("direction",)),
    FilterRule("media_type", "contains", ("mediatype",)),
    FilterRule("recording_type", "contains", ("recordingtype",)),
    FilterRule("tags", "contains", ("tags",)),
    FilterRule("min_duration", "at_least", ("duration",)),
    FilterRule("max_duration", "at_most", ("duration",)),
)


def compile_rule(rule: FilterRule, value: str) -> Clause:
    sql, params, matches = RULE_KINDS[rule.kind](rule.columns, value)
    return Clause(field=rule.field, sql=sql, params=params, matches=matches)


def compile_filters(filters: SearchFilters) -> CompiledQuery:
    """
    Compile search filters into a predicate and aligned parameter list.

    Parameters
    ----------
    filters : SearchFilters
        Sparse criteria; empty fields add no constraint.

    Returns
    -------
    CompiledQuery
        Clauses in `FILTER_RULES` order, exposing `predicate` and `params`.
    """
    clauses = []
    for rule in FILTER_RULES:
        value = getattr(filters, rule.field)
        if not value:
            continue
        clauses.append(compile_rule(rule, value))
    return CompiledQuery(clauses=tuple(clauses))


__all__ = [
    "Clause",
    "CompiledQuery",
    "FILTER_RULES",
    "FilterRule",
    "ORDER_BY",
    "compile_filters",
    "escape_like",
]

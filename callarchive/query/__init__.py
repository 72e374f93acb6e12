"""
Query package for the call recording archive.

Pure, side-effect free translation between the domain and the recordings
table: the filter compiler and the record mapper.
"""

from callarchive.query.filters import (
    FILTER_RULES,
    ORDER_BY,
    Clause,
    CompiledQuery,
    compile_filters,
)
from callarchive.query.mapper import (
    COLUMN_FIELDS,
    INSERT_COLUMNS,
    from_storage_row,
    to_storage_row,
)

__all__ = [
    "COLUMN_FIELDS",
    "Clause",
    "CompiledQuery",
    "FILTER_RULES",
    "INSERT_COLUMNS",
    "ORDER_BY",
    "compile_filters",
    "from_storage_row",
    "to_storage_row",
]

"""Pure, stable ordering of aggregate rows."""
from __future__ import annotations
from typing import Any, Iterable, List, TypeVar

from .config import SortField

Row = TypeVar("Row")


def sort_value(row: Any, field: SortField) -> Any:
    """Primary comparison value of row for the given column."""
    if field is SortField.ID:
        return row.key_string
    if field is SortField.EXT:
        return row.extension.lower()
    if field is SortField.REQUESTS:
        return row.request_count
    if field is SortField.AVG_SIZE:
        return row.average_size
    return row.total_bandwidth


def sort_rows(rows: Iterable[Row], field: SortField, descending: bool = False) -> List[Row]:
    """Order rows by field; equal values fall back to ascending id/extension.

    Rows must expose ``tie_break`` plus the attributes read by sort_value.
    The input is not modified.
    """
    ordered = sorted(rows, key=lambda row: row.tie_break)
    # list.sort is stable, including with reverse=True, so the
    # ascending tie-break order survives within equal primary values
    ordered.sort(key=lambda row: sort_value(row, field), reverse=descending)
    return ordered

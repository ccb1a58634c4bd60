"""
Sorted entry table and its ordering rules.
"""

from .sorting import HEAD_CELLS, SORTABLE_COLUMNS, HeadCell, SortDirection, SortState, sort_entries
from .entry_table import EntryTable, build_row, build_table_view

__all__ = [
    "HEAD_CELLS",
    "SORTABLE_COLUMNS",
    "HeadCell",
    "SortDirection",
    "SortState",
    "sort_entries",
    "EntryTable",
    "build_row",
    "build_table_view",
]

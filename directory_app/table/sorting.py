"""
Table ordering.

Only ``name`` and ``hits`` are sortable. Sorting is stable in both
directions: entries with equal keys keep their original relative order,
and the direction never changes how ties are broken.
"""

from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Iterable, List, Sequence, TypeVar

T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def toggled(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


@dataclass(frozen=True)
class HeadCell:
    id: str
    label: str
    numeric: bool = False
    sortable: bool = False

    @property
    def align(self) -> str:
        return "left" if self.id == "name" else "right"


# Categories are stored as integers, so sorting them would not follow the names
HEAD_CELLS: Sequence[HeadCell] = (
    HeadCell("name", "Name", numeric=False, sortable=True),
    HeadCell("link", "Link"),
    HeadCell("category", "Category"),
    HeadCell("hits", "Hits", numeric=True, sortable=True),
    HeadCell("open", "Open", numeric=True),
)

SORTABLE_COLUMNS = frozenset(cell.id for cell in HEAD_CELLS if cell.sortable)

DEFAULT_ORDER_BY = "hits"
DEFAULT_DIRECTION = SortDirection.DESC


def sort_entries(entries: Iterable[T], order_by: str, direction: SortDirection) -> List[T]:
    """
    Return a new list ordered by ``order_by``.

    Python's sort is stable even with reverse=True, so equal keys stay in
    input order for both directions.
    """
    if order_by not in SORTABLE_COLUMNS:
        raise ValueError(f"Column is not sortable: {order_by}")
    return sorted(entries, key=attrgetter(order_by), reverse=direction is SortDirection.DESC)


@dataclass
class SortState:
    """Active sort column and direction of a table"""

    order_by: str = DEFAULT_ORDER_BY
    direction: SortDirection = DEFAULT_DIRECTION

    def request_sort(self, column: str) -> bool:
        """
        Handle a click on a column header.

        Same column toggles the direction, a new column starts ascending,
        non-sortable columns are ignored.

        Returns:
            True if the state changed
        """
        if column not in SORTABLE_COLUMNS:
            return False
        if column == self.order_by:
            self.direction = self.direction.toggled()
        else:
            self.order_by = column
            self.direction = SortDirection.ASC
        return True

    @property
    def label(self) -> str:
        """Accessible description of the active sort"""
        if self.direction is SortDirection.DESC:
            return "sorted descending"
        return "sorted ascending"

    def apply(self, entries: Iterable[T]) -> List[T]:
        return sort_entries(entries, self.order_by, self.direction)

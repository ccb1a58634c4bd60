"""
Category registry.

Categories are fixed classification labels referenced by integer id. The
registry is built once from configuration and handed to the components
that need it; lookup by id is the only operation and never fails.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

UNKNOWN_CATEGORY = "unknown"


@dataclass(frozen=True)
class Category:
    id: int
    name: str


class CategoryRegistry:
    """Immutable, ordered sequence of categories"""

    def __init__(self, categories: Iterable[Category]):
        self._categories: Tuple[Category, ...] = tuple(categories)
        self._by_id: Dict[int, Category] = {c.id: c for c in self._categories}

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "CategoryRegistry":
        """Build a registry where each name's id is its position"""
        return cls(Category(id=i, name=name) for i, name in enumerate(names))

    def get(self, category_id: int) -> Optional[Category]:
        return self._by_id.get(category_id)

    def by_id(self, category_id: int) -> str:
        """Display name for ``category_id``, or ``"unknown"``."""
        category = self._by_id.get(category_id)
        return category.name if category else UNKNOWN_CATEGORY

    def ids(self) -> List[int]:
        return [c.id for c in self._categories]

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

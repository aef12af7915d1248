"""
Ordered item store for one session.

The list order is the traversal order and is never re-sorted.
Items can be appended but never removed.
"""

from typing import Callable, Iterable, Iterator, Optional

from models.session import ProductItem


class ItemRepository:
    """Ordered, append-only sequence of ProductItems."""

    def __init__(self, items: Iterable[ProductItem] = ()):
        self._items: list[ProductItem] = list(items)
        self._ids = {item.id for item in self._items}
        if len(self._ids) != len(self._items):
            raise ValueError("Item ids must be unique within a session")

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ProductItem]:
        return iter(self._items)

    def get(self, index: int) -> ProductItem:
        """Item at index. Negative indexes are not accepted."""
        if not 0 <= index < len(self._items):
            raise IndexError(f"item index {index} out of range")
        return self._items[index]

    def append(self, item: ProductItem) -> int:
        """Append an item and return its index."""
        if item.id in self._ids:
            raise ValueError(f"Duplicate item id: {item.id}")
        self._items.append(item)
        self._ids.add(item.id)
        return len(self._items) - 1

    def first_index(self, predicate: Callable[[ProductItem], bool]) -> Optional[int]:
        """Index of the first item matching predicate, in list order."""
        for index, item in enumerate(self._items):
            if predicate(item):
                return index
        return None

    def count(self, predicate: Callable[[ProductItem], bool]) -> int:
        return sum(1 for item in self._items if predicate(item))

    def entries(
        self,
        predicate: Callable[[ProductItem], bool]
    ) -> list[tuple[int, ProductItem]]:
        """(index, item) pairs matching predicate, in list order."""
        return [
            (index, item)
            for index, item in enumerate(self._items)
            if predicate(item)
        ]

    def snapshot(self) -> list[ProductItem]:
        """Shallow copy of the list (items are shared)."""
        return list(self._items)

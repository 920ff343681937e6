"""Insertion-ordered set keyed by a caller-supplied function."""

from __future__ import annotations

from typing import Callable, Dict, Generic, Hashable, Iterable, Iterator, List, TypeVar

from .models import ActionReference

T = TypeVar("T")


class OrderedKeySet(Generic[T]):
    """Keeps the first item seen for each key, in insertion order."""

    def __init__(self, key: Callable[[T], Hashable], items: Iterable[T] = ()) -> None:
        self._key = key
        self._items: Dict[Hashable, T] = {}
        self.update(items)

    def add(self, item: T) -> bool:
        """Insert `item` unless its key is already present; return True if inserted."""
        key = self._key(item)
        if key in self._items:
            return False
        self._items[key] = item
        return True

    def update(self, items: Iterable[T]) -> int:
        added = 0
        for item in items:
            if self.add(item):
                added += 1
        return added

    def items(self) -> List[T]:
        return list(self._items.values())

    def __contains__(self, item: object) -> bool:
        try:
            key = self._key(item)  # type: ignore[arg-type]
        except (AttributeError, TypeError):
            return False
        return key in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.items()!r})"


def _reference_key(reference: ActionReference) -> str:
    return reference.full


def reference_set(items: Iterable[ActionReference] = ()) -> OrderedKeySet[ActionReference]:
    """Return an ordered set of references deduplicated by `full`."""
    return OrderedKeySet(_reference_key, items)


__all__ = ["OrderedKeySet", "reference_set"]

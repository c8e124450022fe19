"""Lazy k-way merge of already-sorted iterables.

Holds at most one pending element per source, so merging many long (or
deeply nested) streams costs memory proportional to the number of sources,
not the number of elements.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
import heapq
import itertools
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _identity(value: Any) -> Any:
    return value


class LazyMinHeap(Generic[T]):
    """Merge sorted sources into one non-decreasing stream, on demand.

    Every source must already yield elements in non-decreasing ``key``
    order. Ties between sources come out in no guaranteed order.

    Args:
        *sources: Iterables sorted by ``key``.
        key: Sort key for elements. Defaults to the element itself.

    Example:
        >>> list(LazyMinHeap([0, 4, 9], [1, 1, 7], []))
        [0, 1, 1, 4, 7, 9]
    """

    def __init__(self, *sources: Iterable[T], key: Callable[[T], Any] | None = None) -> None:
        self._key = key or _identity
        # Entries are (key, tiebreak, element, source); the counter keeps the
        # heap from ever comparing elements or iterators.
        self._heap: list[tuple[Any, int, T, Iterator[T]]] = []
        self._counter = itertools.count()
        self._active: set[Iterator[T]] = set()
        for source in sources:
            iterator = iter(source)
            self._active.add(iterator)
            self._push_from(iterator)

    @property
    def empty(self) -> bool:
        """True once every source is exhausted and nothing is pending."""
        return not self._active and not self._heap

    @property
    def active_sources(self) -> int:
        return len(self._active)

    def peek(self) -> T:
        """Return the next element without consuming it.

        Raises:
            IndexError: If the heap is empty.
        """
        if not self._heap:
            raise IndexError("peek from an empty LazyMinHeap")
        return self._heap[0][2]

    def pop(self) -> T:
        """Remove and return the smallest pending element.

        The source it came from is advanced by one step: its next element
        takes its place in the heap, or the source is dropped if exhausted.

        Raises:
            IndexError: If the heap is empty.
        """
        if not self._heap:
            raise IndexError("pop from an empty LazyMinHeap")
        _, _, element, source = heapq.heappop(self._heap)
        self._push_from(source)
        return element

    def __iter__(self) -> Iterator[T]:
        while not self.empty:
            yield self.pop()

    def __len__(self) -> int:
        """Number of pending elements (one per active source)."""
        return len(self._heap)

    def _push_from(self, source: Iterator[T]) -> None:
        try:
            element = next(source)
        except StopIteration:
            self._active.discard(source)
            return
        heapq.heappush(self._heap, (self._key(element), next(self._counter), element, source))


__all__ = [
    "LazyMinHeap",
]

"""Fixed-capacity container keeping the highest-scored entries ever inserted."""

from __future__ import annotations

import heapq
import itertools
from typing import Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 30


class BoundedTopK(Generic[T]):
    """Keep the *capacity* highest-scored payloads.

    Entries live in a min-heap ordered by ``(score, insertion sequence)``, so
    the root is always the eviction candidate: the lowest score, and among
    equal scores the earliest insert. A new payload is admitted when there is
    room, or when its score is strictly greater than the root's.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._heap: List[Tuple[int, int, T]] = []
        self._sequence = itertools.count()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._heap)

    def min_score(self) -> Optional[int]:
        """Return the lowest retained score, or ``None`` when empty."""

        return self._heap[0][0] if self._heap else None

    def put(self, score: int, payload: T) -> bool:
        """Offer *payload* under *score*; return whether it was retained."""

        entry = (score, next(self._sequence), payload)
        if len(self._heap) < self._capacity:
            heapq.heappush(self._heap, entry)
            return True
        if score > self._heap[0][0]:
            heapq.heapreplace(self._heap, entry)
            return True
        return False

    def values(self) -> Iterator[T]:
        """Yield retained payloads by ascending score, ties in insertion order."""

        # Sequence numbers are unique, so payloads are never compared.
        for _, _, payload in sorted(self._heap):
            yield payload

    def __iter__(self) -> Iterator[T]:
        return self.values()

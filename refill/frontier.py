"""Frontier tracking for onion-peel fill ordering.

A masked pixel belongs to the frontier when at least one of its
8-neighbors is known. Pixels with more known neighbors have more context
and are filled first; among equal counts, the pixel queued earliest wins.
"""

import heapq
import itertools

import numpy as np

from refill.patches import count_known_neighbors, known_neighbor_counts, neighbors


def compute_frontier(mask: np.ndarray) -> list[tuple[int, int]]:
    """Return frontier pixels ordered by known-neighbor count, descending.

    Ties keep raster order. An all-False mask gives an empty list.
    """
    counts = known_neighbor_counts(mask)
    coords = np.argwhere(mask & (counts > 0))
    ordered = sorted(
        ((int(y), int(x)) for y, x in coords),
        key=lambda c: -int(counts[c]),
    )
    return ordered


class Frontier:
    """Priority queue over the frontier of a shrinking mask.

    The mask is shared with the caller, who clears pixels as they are
    filled and then calls `push_neighbors` so newly exposed pixels join the
    queue and existing members get their priority raised. Stale heap
    entries are discarded lazily on `pop`.
    """

    def __init__(self, mask: np.ndarray):
        self._mask = mask
        self._height, self._width = mask.shape
        self._heap: list[tuple[int, int, int, int]] = []
        self._seq: dict[tuple[int, int], int] = {}
        self._pending: set[tuple[int, int]] = set()
        self._counter = itertools.count()
        for y, x in compute_frontier(mask):
            self.push(y, x)

    def __len__(self) -> int:
        return len(self._pending)

    def push(self, y: int, x: int) -> bool:
        """Queue (y, x) with its current count. Returns False if not a frontier pixel."""
        if not self._mask[y, x]:
            return False
        count = count_known_neighbors(self._mask, y, x)
        if count == 0:
            return False
        key = (y, x)
        if key not in self._seq:
            self._seq[key] = next(self._counter)
        self._pending.add(key)
        heapq.heappush(self._heap, (-count, self._seq[key], y, x))
        return True

    def push_neighbors(self, y: int, x: int) -> None:
        for ny, nx in neighbors(y, x, self._height, self._width):
            if self._mask[ny, nx]:
                self.push(ny, nx)

    def pop(self) -> tuple[int, int] | None:
        """Remove and return the highest-priority pixel, or None when empty."""
        while self._heap:
            neg_count, _, y, x = heapq.heappop(self._heap)
            key = (y, x)
            if key not in self._pending or not self._mask[y, x]:
                self._pending.discard(key)
                continue
            current = count_known_neighbors(self._mask, y, x)
            if current != -neg_count:
                # outdated priority; requeue under the live count
                heapq.heappush(self._heap, (-current, self._seq[key], y, x))
                continue
            self._pending.discard(key)
            return y, x
        self._pending.clear()
        return None

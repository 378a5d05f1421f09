# stonehunt/core/frontier.py
#!/usr/bin/env python3
"""
Open set for the best-first engine.

heapq with lazy deletion: `discard` forgets the live key for a coordinate and
any heap entry whose key no longer matches is dropped on the way out. The key
is a total order, ascending:
  (g + h, h, g, row, col)
"""

import heapq
from typing import Dict, List, Tuple

from stonehunt.core.types import Cell, Coord

Key = Tuple[float, float, float, int, int]


def priority(cell: Cell) -> Key:
    return (cell.total_cost, cell.cost_to_target, cell.cost_from_start, cell.row, cell.col)


class Frontier:
    def __init__(self) -> None:
        self._heap: List[Tuple[Key, Coord]] = []
        self._live: Dict[Coord, Key] = {}

    def push(self, cell: Cell) -> None:
        key = priority(cell)
        self._live[cell.coord] = key
        heapq.heappush(self._heap, (key, cell.coord))

    def discard(self, coord: Coord) -> None:
        """No-op when the coordinate is not queued."""
        self._live.pop(coord, None)

    def pop(self) -> Coord:
        while self._heap:
            key, coord = heapq.heappop(self._heap)
            if self._live.get(coord) == key:
                del self._live[coord]
                return coord
        raise IndexError("pop from an empty frontier")

    def clear(self) -> None:
        self._heap.clear()
        self._live.clear()

    def coords(self) -> List[Coord]:
        return list(self._live)

    def __contains__(self, coord: Coord) -> bool:
        return coord in self._live

    def __len__(self) -> int:
        return len(self._live)

    def __bool__(self) -> bool:
        return bool(self._live)

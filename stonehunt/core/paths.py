# stonehunt/core/paths.py
#!/usr/bin/env python3
"""
Parent-tree helpers.

Every cell's `parent` is a coordinate in the same Grid, so the parent links
form a tree rooted at the start cell. These helpers only read that tree.
"""

from typing import List, Optional, Set

from stonehunt.core.types import Cell, Coord, Grid, NavigationError


def path_to_root(grid: Grid, cell: Cell) -> List[Cell]:
    """[cell, cell.parent, cell.parent.parent, ..., start]"""
    path: List[Cell] = []
    limit = grid.size * grid.size
    cur: Optional[Cell] = cell
    while cur is not None:
        path.append(cur)
        if len(path) > limit:
            raise NavigationError(f"parent chain of {cell.coord} does not terminate")
        cur = grid[cur.parent] if cur.parent is not None else None
    return path


def ancestor_set(grid: Grid, cell: Cell) -> Set[Coord]:
    return {c.coord for c in path_to_root(grid, cell)}


def least_common_ancestor(grid: Grid, first: Cell, second: Cell) -> Optional[Cell]:
    """Deepest cell shared by both parent chains.

    Walks `first`'s chain upward and stops at the first cell that is also an
    ancestor of `second` (each cell counts as its own ancestor).
    """
    shared = ancestor_set(grid, second)
    for c in path_to_root(grid, first):
        if c.coord in shared:
            return c
    return None

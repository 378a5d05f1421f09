# stonehunt/core/backtracking.py
#!/usr/bin/env python3
"""
Exhaustive exploration, one physical move per step().

Phase 1 walks a depth-first tour of every safely reachable cell. The tour is
an explicit stack of frames; after a child frame is finished the agent steps
back onto the parent frame's cell before trying the next sibling.
Phase 2 is a breadth-first sweep over the discovered map (no movement) that
assigns shortest costs, stopping at the target.

Hazard and visited checks run when a neighbour is actually tried, because
the statuses may have changed since the frame was pushed.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from stonehunt.core.interaction import MoveBoundary
from stonehunt.core.types import (
    NEIGHBOR_DELTAS,
    SHIELD,
    TARGET,
    Cell,
    Coord,
    Grid,
    StepResult,
)

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    coord: Coord
    pending: List[Coord]
    found: bool = False


@dataclass
class BacktrackingEngine:
    name: str = "Backtracking"

    grid: Optional[Grid] = None
    boundary: Optional[MoveBoundary] = None
    visited: Set[Coord] = field(default_factory=set)
    stack: List[_Frame] = field(default_factory=list)
    position: Optional[Coord] = None
    has_protective_item: bool = False
    phase: str = "explore"        # "explore" | "sweep" | "finished"
    started: bool = False
    found: bool = False
    target_cost: Optional[int] = None
    done: bool = False
    no_path: bool = False

    def init(self, grid: Grid, boundary: MoveBoundary) -> None:
        self.grid = grid
        self.boundary = boundary
        self.reset()

    def reset(self) -> None:
        if self.grid is None:
            return
        self.visited.clear()
        self.stack.clear()
        self.position = self.grid.start
        self.has_protective_item = False
        self.phase = "explore"
        self.started = False
        self.found = False
        self.target_cost = None
        self.done = False
        self.no_path = False

    def run(self) -> Optional[int]:
        while True:
            res = self.step()
            if res.status == "done":
                return self.target_cost
            if res.status in ("no_path", "idle"):
                return None

    # -------------------- stepping --------------------

    def step(self) -> StepResult:
        if self.grid is None or self.boundary is None:
            return StepResult(status="idle", metrics={"algo": self.name})
        if self.done:
            return StepResult(status="done", current=self.position, metrics=self._metrics())
        if self.no_path:
            return StepResult(status="no_path", metrics=self._metrics())

        if self.phase == "explore":
            return self._explore_step()

        self.target_cost = self.sweep()
        self.phase = "finished"
        if self.target_cost is None:
            self.no_path = True
            return StepResult(status="no_path", metrics=self._metrics())
        self.done = True
        logger.info("%s: sweep assigned target cost %d", self.name, self.target_cost)
        return StepResult(status="done", current=self.position, metrics=self._metrics())

    def _explore_step(self) -> StepResult:
        if not self.started:
            self.started = True
            start = self.grid[self.grid.start]
            self._visit(start)
            return StepResult(status="running", closed=[start.coord], current=start.coord,
                              path=[start.coord], metrics=self._metrics())

        frame = self.stack[-1]
        child = self._next_child(frame)
        if child is not None:
            self._visit(child)
            return StepResult(status="running", closed=[child.coord], current=child.coord,
                              path=[child.coord], metrics=self._metrics())

        # Frame exhausted: report upward and step back onto the parent cell.
        self.stack.pop()
        if self.stack:
            parent = self.stack[-1]
            self._move(self.grid[parent.coord])
            parent.found = parent.found or frame.found
            return StepResult(status="running", current=parent.coord,
                              path=[parent.coord], metrics=self._metrics())

        self.found = frame.found
        if not self.found:
            self.phase = "finished"
            self.no_path = True
            logger.info("%s: explored %d cells without meeting the target", self.name, len(self.visited))
            return StepResult(status="no_path", metrics=self._metrics())
        self.phase = "sweep"
        return StepResult(status="running", current=self.position, metrics=self._metrics())

    def _next_child(self, frame: _Frame) -> Optional[Cell]:
        while frame.pending:
            cell = self.grid[frame.pending.pop(0)]
            if self.grid.is_hazard(cell) or cell.coord in self.visited:
                continue
            return cell
        return None

    def _visit(self, cell: Cell) -> None:
        self._move(cell)
        self.visited.add(cell.coord)
        if cell.status == SHIELD:
            self.has_protective_item = True
        pending = [
            (cell.row + dr, cell.col + dc)
            for dr, dc in NEIGHBOR_DELTAS
            if self.grid.in_bounds(cell.row + dr, cell.col + dc)
        ]
        self.stack.append(_Frame(cell.coord, pending, found=cell.status == TARGET))

    def _move(self, destination: Cell) -> None:
        self.boundary.step(self.grid[self.position], destination)
        self.position = destination.coord

    # -------------------- phase 2 --------------------

    def sweep(self) -> Optional[int]:
        """Breadth-first costs over the discovered map; the target's cost, or None."""
        start = self.grid[self.grid.start]
        start.cost_from_start = 0
        seen: Set[Coord] = {start.coord}
        queue = deque([start])
        while queue:
            cur = queue.popleft()
            for nb in self.grid.neighbors4(cur):
                if self.grid.is_hazard(nb) or nb.coord in seen:
                    continue
                seen.add(nb.coord)
                if cur.cost_from_start + 1 < nb.cost_from_start:
                    nb.cost_from_start = cur.cost_from_start + 1
                    nb.parent = cur.coord
                queue.append(nb)
                if nb.status == TARGET:
                    return nb.cost_from_start
        return None

    def _metrics(self) -> Dict[str, object]:
        return {
            "algo": self.name,
            "popped": len(self.visited),
            "open_size": len(self.stack),
            "closed_count": len(self.visited),
            "moves": len(self.boundary.moves) if self.boundary else 0,
            "total_cost": self.target_cost,
        }

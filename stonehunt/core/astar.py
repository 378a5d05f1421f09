# stonehunt/core/astar.py
#!/usr/bin/env python3
"""
A* that has to walk: one extracted candidate per step().

The frontier is not free: the agent physically stands on one cell. When the
next candidate is not next to it, the agent backs up its own parent chain to
the least common ancestor and then walks down the stored path to the
candidate's parent before stepping in.

Ordering of the open set (see frontier.priority):
  lower f, then lower h, then lower g, then row, then column.
"""

import logging
from math import inf
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from stonehunt.core.frontier import Frontier
from stonehunt.core.interaction import MoveBoundary
from stonehunt.core.paths import least_common_ancestor, path_to_root
from stonehunt.core.types import (
    SHIELD,
    TARGET,
    Cell,
    CellEvent,
    Coord,
    Grid,
    NavigationError,
    StepResult,
)

logger = logging.getLogger(__name__)


@dataclass
class BestFirstEngine:
    name: str = "A*"

    # Internal state
    grid: Optional[Grid] = None
    boundary: Optional[MoveBoundary] = None
    open: Frontier = field(default_factory=Frontier)
    closed: Set[Coord] = field(default_factory=set)
    position: Optional[Coord] = None
    has_protective_item: bool = False
    popped_count: int = 0
    done: bool = False
    no_path: bool = False

    # -------------------- lifecycle --------------------

    def init(self, grid: Grid, boundary: MoveBoundary) -> None:
        self.grid = grid
        self.boundary = boundary
        self.reset()

    def reset(self) -> None:
        """Clear search bookkeeping and seed with the start cell (grid contents are kept)."""
        if self.grid is None:
            return
        self.open.clear()
        self.closed.clear()
        self.position = self.grid.start
        self.has_protective_item = False
        self.popped_count = 0
        self.done = False
        self.no_path = False
        self.open.push(self.grid[self.grid.start])

    def run(self) -> Optional[int]:
        """Step until the target is reached (its cost) or the frontier runs dry (None)."""
        while True:
            res = self.step()
            if res.status == "done":
                return res.metrics["total_cost"]
            if res.status in ("no_path", "idle"):
                return None

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        if self.grid is None or self.boundary is None:
            return StepResult(status="idle", metrics={"algo": self.name})
        if self.done:
            return StepResult(status="done", current=self.position, metrics=self._metrics())
        if self.no_path:
            return StepResult(status="no_path", metrics=self._metrics())

        best = self._next_candidate()
        if best is None:
            self.no_path = True
            logger.info("%s: frontier exhausted after %d moves, target unreachable",
                        self.name, len(self.boundary.moves))
            return StepResult(status="no_path", metrics=self._metrics())
        self.popped_count += 1

        walked: List[Coord] = []
        if not self.grid.adjacent(self.grid[self.position], best):
            walked.extend(self._reconcile(best))
            if self.grid.is_hazard(best):
                # Reported on the way over; stay put and let the next step choose again.
                logger.debug("%s turned hazardous during backtrack, not entering", best.coord)
                return StepResult(status="running", current=self.position,
                                  path=walked, metrics=self._metrics())

        if best.status == TARGET:
            # Nothing left to learn; the judge does not answer this one.
            self._move(best, absorb=False)
            walked.append(best.coord)
            self.done = True
            logger.info("%s: target %s reached, cost %s", self.name, best.coord, best.cost_from_start)
            return StepResult(status="done", closed=[best.coord], current=best.coord,
                              path=walked, metrics=self._metrics())

        self._move(best)
        walked.append(best.coord)
        self.closed.add(best.coord)
        if best.status == SHIELD:
            self.has_protective_item = True

        opened = self.expand(best)
        return StepResult(status="running", opened=opened, closed=[best.coord],
                          current=best.coord, path=walked, metrics=self._metrics())

    def _next_candidate(self) -> Optional[Cell]:
        while self.open:
            cell = self.grid[self.open.pop()]
            # Stale entries: settled already, or turned hazardous after being queued
            if cell.coord in self.closed:
                continue
            if self.grid.is_hazard(cell):
                logger.debug("parking hazardous candidate %s", cell.coord)
                continue
            return cell
        return None

    def expand(self, cell: Cell) -> List[Coord]:
        """Relax the 4 neighbours of a settled cell; returns the ones (re)queued."""
        opened: List[Coord] = []
        alt = cell.cost_from_start + 1
        for nb in self.grid.neighbors4(cell):
            if self.grid.is_hazard(nb):
                continue
            if alt < nb.cost_from_start:
                self._requeue(nb, alt, cell.coord)
                opened.append(nb.coord)
            elif self._parked(nb):
                self.open.push(nb)
                opened.append(nb.coord)
        return opened

    def _requeue(self, cell: Cell, cost: float, parent: Coord) -> None:
        self.open.discard(cell.coord)
        cell.cost_from_start = cost
        cell.cost_to_target = self.grid.distance_to_target(cell)
        cell.parent = parent
        self.open.push(cell)

    # -------------------- physical reconciliation --------------------

    def _reconcile(self, best: Cell) -> List[Coord]:
        """Walk from the current position to best's parent through the LCA."""
        current = self.grid[self.position]
        lca = least_common_ancestor(self.grid, current, best)
        if lca is None or best.parent is None:
            raise NavigationError(f"no common ancestor between {current.coord} and {best.coord}")

        upward = path_to_root(self.grid, current)
        downward = path_to_root(self.grid, self.grid[best.parent])
        up_to_lca = upward[1:upward.index(lca) + 1]
        down_from_lca = list(reversed(downward[:downward.index(lca)]))
        logger.debug("backtrack %s -> %s -> %s (%d + %d moves)", current.coord, lca.coord,
                     best.parent, len(up_to_lca), len(down_from_lca))

        walked: List[Coord] = []
        self.has_protective_item = False
        for c in up_to_lca:
            self._move(c)
            walked.append(c.coord)
        for c in down_from_lca:
            self._move(c)
            walked.append(c.coord)
            if c.status == SHIELD:
                self.has_protective_item = True
        return walked

    def _move(self, destination: Cell, absorb: bool = True) -> None:
        _, events = self.boundary.step(self.grid[self.position], destination, absorb=absorb)
        self.position = destination.coord
        self._absorb(events)

    def _absorb(self, events: List[CellEvent]) -> None:
        for ev in events:
            cell = self.grid[(ev.row, ev.col)]
            if self.grid.is_hazard(cell):
                self.open.discard(cell.coord)
            elif cell.coord not in self.closed:
                self._reconsider(cell)
                if self._parked(cell):
                    logger.debug("reviving cleared cell %s (cost %s)", cell.coord, cell.cost_from_start)
                    self.open.push(cell)

    def _parked(self, cell: Cell) -> bool:
        """Priced once, dropped while hazardous, and neither settled nor queued now."""
        return (cell.cost_from_start < inf and cell.coord not in self.closed
                and cell.coord not in self.open)

    def _reconsider(self, cell: Cell) -> None:
        """Relax a newly passable cell from its settled neighbours."""
        best_parent: Optional[Cell] = None
        for nb in self.grid.neighbors4(cell):
            if nb.coord not in self.closed or self.grid.is_hazard(nb):
                continue
            if best_parent is None or nb.cost_from_start < best_parent.cost_from_start:
                best_parent = nb
        if best_parent is None:
            return
        alt = best_parent.cost_from_start + 1
        if alt < cell.cost_from_start:
            logger.debug("reconsidering %s via %s (cost %s -> %s)", cell.coord,
                         best_parent.coord, cell.cost_from_start, alt)
            self._requeue(cell, alt, best_parent.coord)

    # -------------------- metrics --------------------

    def _metrics(self) -> Dict[str, object]:
        target_cost = self.grid[self.grid.target].cost_from_start if self.done else None
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.open),
            "closed_count": len(self.closed),
            "moves": len(self.boundary.moves) if self.boundary else 0,
            "total_cost": target_cost,
        }

# stonehunt/core/world.py
#!/usr/bin/env python3
"""
In-process oracle: a hidden layout that answers moves the way the judge does.

Map files (stonehunt/maps/*.json):
  {
    "name": "Open field",
    "perception": 1,
    "rows": ["A........", ".........", ...],     # one string per row, col 0 first
    "schedule": [{"after_move": 4, "col": 2, "row": 0, "status": "."}]
  }
`A` must sit at (0, 0) and exactly one `I` marks the target. Every other
character is a status marker (`.` for neutral).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from stonehunt.core.types import (
    AGENT,
    HAZARDS,
    NEUTRAL,
    START,
    TARGET,
    CellEvent,
    Coord,
    manhattan,
)

logger = logging.getLogger(__name__)


@dataclass
class WorldMap:
    target: Coord
    size: int
    layout: Dict[Coord, str]                 # non-neutral cells only
    perception: int = 1
    schedule: Dict[int, Dict[Coord, str]] = field(default_factory=dict)
    name: str = "custom"

    @classmethod
    def from_rows(cls, rows: List[str], perception: int = 1,
                  schedule: Optional[List[dict]] = None, name: str = "custom") -> "WorldMap":
        size = len(rows)
        if size == 0 or any(len(r) != size for r in rows):
            raise ValueError("map rows must form a non-empty square")

        layout: Dict[Coord, str] = {}
        target: Optional[Coord] = None
        for r, line in enumerate(rows):
            for c, ch in enumerate(line):
                if ch == NEUTRAL:
                    continue
                if ch == AGENT:
                    if (r, c) != START:
                        raise ValueError(f"start marker must be at {START}, found at {(r, c)}")
                    continue
                if ch == TARGET:
                    if target is not None:
                        raise ValueError("map has more than one target")
                    target = (r, c)
                layout[(r, c)] = ch
        if target is None:
            raise ValueError("map has no target")

        timeline: Dict[int, Dict[Coord, str]] = {}
        for entry in schedule or []:
            coord = (int(entry["row"]), int(entry["col"]))
            timeline.setdefault(int(entry["after_move"]), {})[coord] = str(entry["status"])

        return cls(target=target, size=size, layout=layout, perception=max(1, int(perception)),
                   schedule=timeline, name=name)


def load_world(path: Union[str, Path]) -> WorldMap:
    with open(path, "r") as f:
        data = json.load(f)
    return WorldMap.from_rows(
        rows=list(data["rows"]),
        perception=int(data.get("perception", 1)),
        schedule=data.get("schedule", []),
        name=str(data.get("name", Path(path).stem)),
    )


class SimulatedWorld:
    """Oracle over a WorldMap. Reports every in-range cell whose status changed."""

    def __init__(self, world: WorldMap):
        self.world = world
        self.hidden: Dict[Coord, str] = dict(world.layout)
        self.position: Coord = START
        self.move_count = 0
        self.trail: List[Coord] = []
        self.hazard_hits: List[Coord] = []
        self.jumps: List[Coord] = []
        self.reached_target = False
        self._reported: Dict[Coord, str] = {}

    def status_at(self, coord: Coord) -> str:
        return self.hidden.get(coord, NEUTRAL)

    def request_move(self, row: int, col: int) -> None:
        dest = (row, col)
        if manhattan(self.position, dest) > 1:
            self.jumps.append(dest)
        self.move_count += 1
        self.position = dest
        self.trail.append(dest)

        for coord, status in self.world.schedule.get(self.move_count, {}).items():
            if status == NEUTRAL:
                self.hidden.pop(coord, None)
            else:
                self.hidden[coord] = status
            logger.debug("world: %s becomes %r after move %d", coord, status, self.move_count)

        here = self.status_at(dest)
        if here in HAZARDS:
            self.hazard_hits.append(dest)
        if here == TARGET:
            self.reached_target = True

    def read_report(self) -> List[CellEvent]:
        r0, c0 = self.position
        k = self.world.perception
        events: List[CellEvent] = []
        for r in range(max(0, r0 - k), min(self.world.size, r0 + k + 1)):
            for c in range(max(0, c0 - k), min(self.world.size, c0 + k + 1)):
                status = self.status_at((r, c))
                if status != self._reported.get((r, c), NEUTRAL):
                    self._reported[(r, c)] = status
                    events.append(CellEvent(r, c, status))
        return events

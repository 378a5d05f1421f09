# stonehunt/core/types.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from math import inf
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

Coord = Tuple[int, int]  # (row, col)

GRID_SIZE = 9
START: Coord = (0, 0)

# Status markers, exactly as exchanged with the judge
NEUTRAL = "."
AGENT = "A"
TARGET = "I"
SHIELD = "S"
PERCEPTION = "P"
HULK = "H"
THOR = "T"
MARVEL = "M"

HAZARDS = frozenset({PERCEPTION, HULK, THOR, MARVEL})
OCCUPANTS = frozenset({HULK, MARVEL, THOR})

# up, left, right, down
NEIGHBOR_DELTAS: Tuple[Coord, ...] = ((-1, 0), (0, -1), (0, 1), (1, 0))


class NavigationError(RuntimeError):
    """A movement or parent-tree invariant was broken; there is no safe way on."""


class ProtocolError(ValueError):
    """The oracle sent something we cannot parse or place on the grid."""


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass(eq=False)
class Cell:
    row: int
    col: int
    status: str = NEUTRAL
    cost_from_start: float = inf
    cost_to_target: float = inf
    parent: Optional[Coord] = None                           # coordinate, never the Cell itself
    attributed_occupants: Set[str] = field(default_factory=set)  # filled, never read

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    @property
    def total_cost(self) -> float:
        return self.cost_from_start + self.cost_to_target

    def __repr__(self) -> str:
        return f"Cell({self.row}, {self.col}, {self.status!r}, g={self.cost_from_start})"


@dataclass
class Grid:
    target: Coord
    size: int = GRID_SIZE
    start: Coord = START
    cells: Dict[Coord, Cell] = field(default_factory=dict)

    @classmethod
    def create(cls, target_row: int, target_col: int, size: int = GRID_SIZE) -> "Grid":
        """Fully populated grid with the start and target cells stamped in."""
        grid = cls(target=(target_row, target_col), size=size)
        if not grid.in_bounds(target_row, target_col):
            raise ValueError(f"target {(target_row, target_col)} is outside a {size}x{size} grid")
        if grid.target == grid.start:
            raise ValueError("target must differ from the start cell")

        for row in range(size):
            for col in range(size):
                grid.cells[(row, col)] = Cell(row, col)

        sr, sc = grid.start
        grid.cells[grid.start] = Cell(
            sr, sc,
            status=AGENT,
            cost_from_start=0,
            cost_to_target=manhattan(grid.start, grid.target),
        )
        grid.cells[grid.target] = Cell(target_row, target_col, status=TARGET, cost_to_target=0)
        return grid

    def __getitem__(self, coord: Coord) -> Cell:
        return self.cells[coord]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells.values())

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def is_hazard(self, cell: Cell) -> bool:
        return cell.status in HAZARDS

    def adjacent(self, a: Cell, b: Cell) -> bool:
        """Distance 0 counts: standing still is a legal 'step'."""
        return manhattan(a.coord, b.coord) <= 1

    def distance_to_target(self, cell: Cell) -> int:
        return manhattan(cell.coord, self.target)

    def neighbors4(self, cell: Cell) -> List[Cell]:
        out: List[Cell] = []
        for dr, dc in NEIGHBOR_DELTAS:
            r, c = cell.row + dr, cell.col + dc
            if self.in_bounds(r, c):
                out.append(self.cells[(r, c)])
        return out

    def apply_status(self, row: int, col: int, status: str) -> Cell:
        if not self.in_bounds(row, col):
            raise ProtocolError(f"event for out-of-bounds cell {(row, col)}")
        cell = self.cells[(row, col)]
        cell.status = status
        return cell


@dataclass(frozen=True)
class CellEvent:
    row: int
    col: int
    status: str


@dataclass
class StepResult:
    status: str                   # "idle" | "running" | "done" | "no_path"
    opened: List[Coord] = field(default_factory=list)
    closed: List[Coord] = field(default_factory=list)
    current: Optional[Coord] = None
    path: Optional[List[Coord]] = None   # cells physically walked during this step
    metrics: Dict[str, Any] = field(default_factory=dict)

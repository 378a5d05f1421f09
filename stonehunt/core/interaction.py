# stonehunt/core/interaction.py
#!/usr/bin/env python3
"""
Move / interaction boundary.

One physical step = one request/response round with the oracle:
  request : "m <col> <row>"
  response: k, then k triples "<col> <row> <status>"
Reported statuses are written straight into the grid. Costs and parents are
left alone; they belong to whichever engine is driving.
"""

import logging
from typing import Iterator, List, Optional, Protocol, TextIO, Tuple

from stonehunt.core.types import (
    HAZARDS,
    OCCUPANTS,
    Cell,
    CellEvent,
    Coord,
    Grid,
    NavigationError,
    ProtocolError,
)

logger = logging.getLogger(__name__)


class Oracle(Protocol):
    def request_move(self, row: int, col: int) -> None: ...

    def read_report(self) -> List[CellEvent]: ...


# -------------------- line-oriented text stream --------------------

class TokenStream:
    """Whitespace-separated tokens pulled lazily from a text stream."""

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._tokens: Iterator[str] = iter(())

    def next_token(self) -> str:
        while True:
            tok = next(self._tokens, None)
            if tok is not None:
                return tok
            line = self._stream.readline()
            if not line:
                raise ProtocolError("input ended while more tokens were expected")
            self._tokens = iter(line.split())

    def next_int(self) -> int:
        tok = self.next_token()
        try:
            return int(tok)
        except ValueError:
            raise ProtocolError(f"expected an integer, got {tok!r}") from None


def read_startup(tokens: TokenStream) -> Tuple[int, int, int]:
    """-> (perception_mode, target_row, target_col); the wire order is mode, col, row."""
    perception_mode = tokens.next_int()
    target_col = tokens.next_int()
    target_row = tokens.next_int()
    return perception_mode, target_row, target_col


class StreamOracle:
    """Talks to an external judge over a pair of text streams."""

    def __init__(self, tokens: TokenStream, out: TextIO):
        self.tokens = tokens
        self.out = out

    def request_move(self, row: int, col: int) -> None:
        self.out.write(f"m {col} {row}\n")
        self.out.flush()

    def read_report(self) -> List[CellEvent]:
        count = self.tokens.next_int()
        if count < 0:
            raise ProtocolError(f"negative event count {count}")
        events: List[CellEvent] = []
        for _ in range(count):
            col = self.tokens.next_int()
            row = self.tokens.next_int()
            status = self.tokens.next_token()
            events.append(CellEvent(row, col, status))
        return events


# -------------------- the boundary both engines share --------------------

class MoveBoundary:
    def __init__(self, grid: Grid, oracle: Oracle, perception_mode: int = 0):
        self.grid = grid
        self.oracle = oracle
        self.perception_mode = perception_mode
        self.moves: List[Coord] = []

    def step(self, current: Cell, destination: Cell, absorb: bool = True) -> Tuple[int, List[CellEvent]]:
        """Walk one cell and fold the oracle's report into the grid.

        With absorb=False the request is sent but no response is read
        (used for the final move onto the target).
        """
        if not self.grid.adjacent(current, destination):
            raise NavigationError(f"cannot step from {current.coord} to {destination.coord}")

        self.oracle.request_move(destination.row, destination.col)
        self.moves.append(destination.coord)
        logger.debug("move #%d -> %s", len(self.moves), destination.coord)
        if not absorb:
            return 0, []

        events = self.oracle.read_report()
        for ev in events:
            cell = self.grid.apply_status(ev.row, ev.col, ev.status)
            if self.perception_mode and cell.status in HAZARDS and not cell.attributed_occupants:
                cell.attributed_occupants.update(OCCUPANTS)
        if events:
            logger.debug("  %d event(s): %s", len(events),
                         " ".join(f"{e.col},{e.row}={e.status}" for e in events))
        return len(events), events

    @property
    def last_move(self) -> Optional[Coord]:
        return self.moves[-1] if self.moves else None

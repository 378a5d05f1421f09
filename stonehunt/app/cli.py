# stonehunt/app/cli.py
#!/usr/bin/env python3
"""
Judge-facing entry point.

stdin : perception mode, target col, target row, then one event report per move
stdout: "m <col> <row>" per move, finally "e <cost>" or "e -1"

  stonehunt --engine=backtracking --log-level=DEBUG < session.txt
"""

import logging
import sys
from typing import List, Optional, TextIO

from stonehunt.config import resolve_engine, resolve_log_file, resolve_log_level
from stonehunt.core.engines import make_engine
from stonehunt.core.interaction import MoveBoundary, StreamOracle, TokenStream, read_startup
from stonehunt.core.types import Grid
from stonehunt.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def run(reader: TextIO, writer: TextIO, engine_label: str = "astar") -> Optional[int]:
    tokens = TokenStream(reader)
    perception_mode, target_row, target_col = read_startup(tokens)
    grid = Grid.create(target_row, target_col)
    boundary = MoveBoundary(grid, StreamOracle(tokens, writer), perception_mode)

    engine = make_engine(engine_label)
    engine.init(grid, boundary)
    logger.info("%s run: target=%s perception_mode=%d", engine.name, grid.target, perception_mode)

    cost = engine.run()
    writer.write(f"e {cost if cost is not None else -1}\n")
    writer.flush()
    logger.info("%s finished after %d moves: %s", engine.name, len(boundary.moves),
                cost if cost is not None else "unreachable")
    return cost


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    setup_logging(resolve_log_level(argv), log_file=resolve_log_file(argv))
    run(sys.stdin, sys.stdout, resolve_engine(argv))
    return 0


if __name__ == "__main__":
    sys.exit(main())

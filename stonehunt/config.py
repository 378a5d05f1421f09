# stonehunt/config.py
"""
Runtime knobs.

Each one is read from the environment and can be overridden on the command
line with --name=value:
  STONEHUNT_ENGINE     / --engine=     astar | backtracking   (default astar)
  STONEHUNT_LOG_LEVEL  / --log-level=  DEBUG | INFO | ...     (default WARNING)
  STONEHUNT_LOG_FILE   / --log-file=   optional extra log file
  --map=               viewer map key (see MAP_FILES) or a path to a map file
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from stonehunt.core.engines import canonical_engine

MAP_DIR = Path(__file__).resolve().parent / "maps"
MAP_FILES = {
    "01_open_field":      MAP_DIR / "01_open_field.json",
    "02_walled_stone":    MAP_DIR / "02_walled_stone.json",
    "03_shifting_hazard": MAP_DIR / "03_shifting_hazard.json",
}
DEFAULT_MAP = "01_open_field"
DEFAULT_ENGINE = "astar"
DEFAULT_LOG_LEVEL = "WARNING"


def _option(name: str, env_var: Optional[str], default: Optional[str],
            argv: Optional[List[str]] = None) -> Optional[str]:
    value = os.getenv(env_var, default) if env_var else default
    prefix = f"--{name}="
    for arg in (sys.argv[1:] if argv is None else argv):
        if arg.startswith(prefix):
            value = arg.split("=", 1)[1]
    return value


def resolve_engine(argv: Optional[List[str]] = None) -> str:
    return canonical_engine(_option("engine", "STONEHUNT_ENGINE", DEFAULT_ENGINE, argv))


def resolve_log_level(argv: Optional[List[str]] = None) -> int:
    name = _option("log-level", "STONEHUNT_LOG_LEVEL", DEFAULT_LOG_LEVEL, argv).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {name!r}")
    return level


def resolve_log_file(argv: Optional[List[str]] = None) -> Optional[str]:
    return _option("log-file", "STONEHUNT_LOG_FILE", None, argv) or None


def resolve_map(argv: Optional[List[str]] = None) -> Path:
    key = _option("map", None, DEFAULT_MAP, argv)
    if key in MAP_FILES:
        return MAP_FILES[key]
    return Path(key)

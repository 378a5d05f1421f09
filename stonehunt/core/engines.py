# stonehunt/core/engines.py
#!/usr/bin/env python3
from typing import Dict, Union

from stonehunt.core.astar import BestFirstEngine
from stonehunt.core.backtracking import BacktrackingEngine

Engine = Union[BestFirstEngine, BacktrackingEngine]

ENGINE_ALIASES: Dict[str, str] = {
    "astar": "astar",
    "a*": "astar",
    "a-star": "astar",
    "best-first": "astar",
    "backtracking": "backtracking",
    "backtrack": "backtracking",
    "dfs": "backtracking",
}


def canonical_engine(label: str) -> str:
    key = (label or "").strip().lower()
    if key not in ENGINE_ALIASES:
        raise ValueError(f"unknown engine {label!r}; choose one of {sorted(set(ENGINE_ALIASES.values()))}")
    return ENGINE_ALIASES[key]


def make_engine(label: str) -> Engine:
    if canonical_engine(label) == "astar":
        return BestFirstEngine(name="A*")
    return BacktrackingEngine(name="Backtracking")

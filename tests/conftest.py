import logging
import sys
from pathlib import Path
from typing import Dict, List

import pytest

# Ensure the repo root is on PYTHONPATH so `import stonehunt` works in tests
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from stonehunt.core.engines import make_engine  # noqa: E402
from stonehunt.core.interaction import MoveBoundary  # noqa: E402
from stonehunt.core.types import CellEvent, Grid  # noqa: E402
from stonehunt.core.world import SimulatedWorld, WorldMap, load_world  # noqa: E402

MAP_DIR = _ROOT / "stonehunt" / "maps"


class FakeOracle:
    """Records moves; answers from `reports` (keyed by 1-based move number), else nothing."""

    def __init__(self):
        self.requests = []
        self.reports: Dict[int, List[CellEvent]] = {}

    def request_move(self, row: int, col: int) -> None:
        self.requests.append((row, col))

    def read_report(self) -> List[CellEvent]:
        return list(self.reports.get(len(self.requests), []))


class Run:
    def __init__(self, world_map: WorldMap, engine_label: str):
        self.world = SimulatedWorld(world_map)
        self.grid = Grid.create(*world_map.target, size=world_map.size)
        self.boundary = MoveBoundary(self.grid, self.world, world_map.perception)
        self.engine = make_engine(engine_label)
        self.engine.init(self.grid, self.boundary)

    def run(self):
        return self.engine.run()


@pytest.fixture
def open_field() -> WorldMap:
    return load_world(MAP_DIR / "01_open_field.json")


@pytest.fixture
def walled_stone() -> WorldMap:
    return load_world(MAP_DIR / "02_walled_stone.json")


@pytest.fixture
def shifting_hazard() -> WorldMap:
    return load_world(MAP_DIR / "03_shifting_hazard.json")


@pytest.fixture
def make_run():
    return Run


@pytest.fixture
def fake_oracle():
    return FakeOracle()


@pytest.fixture(autouse=True)
def _reset_stonehunt_logging():
    yield
    logger = logging.getLogger("stonehunt")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

import io
import logging
from pathlib import Path

import pytest

from stonehunt import config
from stonehunt.core.astar import BestFirstEngine
from stonehunt.core.backtracking import BacktrackingEngine
from stonehunt.core.engines import canonical_engine, make_engine
from stonehunt.logging_utils import setup_logging


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("STONEHUNT_ENGINE", "STONEHUNT_LOG_LEVEL", "STONEHUNT_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)


def test_engine_defaults_to_astar():
    assert config.resolve_engine([]) == "astar"


def test_engine_from_env_then_argv(monkeypatch):
    monkeypatch.setenv("STONEHUNT_ENGINE", "dfs")
    assert config.resolve_engine([]) == "backtracking"
    assert config.resolve_engine(["--engine=A*"]) == "astar"


def test_unknown_engine():
    with pytest.raises(ValueError):
        config.resolve_engine(["--engine=dijkstra"])


@pytest.mark.parametrize("label, cls", [
    ("astar", BestFirstEngine),
    ("best-first", BestFirstEngine),
    ("Backtrack", BacktrackingEngine),
])
def test_make_engine(label, cls):
    assert isinstance(make_engine(label), cls)


def test_canonical_engine_strips_and_lowers():
    assert canonical_engine("  A-Star ") == "astar"


def test_log_level():
    assert config.resolve_log_level([]) == logging.WARNING
    assert config.resolve_log_level(["--log-level=debug"]) == logging.DEBUG
    with pytest.raises(ValueError):
        config.resolve_log_level(["--log-level=chatty"])


def test_log_file(monkeypatch):
    assert config.resolve_log_file([]) is None
    monkeypatch.setenv("STONEHUNT_LOG_FILE", "run.log")
    assert config.resolve_log_file([]) == "run.log"
    assert config.resolve_log_file(["--log-file="]) is None


def test_map_key_or_path():
    assert config.resolve_map([]) == config.MAP_FILES["01_open_field"]
    assert config.resolve_map(["--map=02_walled_stone"]) == config.MAP_FILES["02_walled_stone"]
    assert config.resolve_map(["--map=/tmp/custom.json"]) == Path("/tmp/custom.json")


def test_bundled_maps_exist():
    assert all(p.is_file() for p in config.MAP_FILES.values())


def test_setup_logging_reuses_handlers():
    buf = io.StringIO()
    logger = setup_logging(logging.INFO, stream=buf)
    setup_logging(logging.DEBUG, stream=buf)
    assert len(logger.handlers) == 1
    assert not logger.propagate
    logging.getLogger("stonehunt.core.astar").debug("hello")
    assert "hello" in buf.getvalue()


def test_setup_logging_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logging(logging.INFO, log_file=str(log_file), stream=io.StringIO())
    setup_logging(logging.INFO, log_file=str(log_file), stream=io.StringIO())
    assert len(logger.handlers) == 2
    logging.getLogger("stonehunt.app.cli").info("written")
    for h in logger.handlers:
        h.flush()
    assert "written" in log_file.read_text()


def test_bundled_maps_live_inside_the_package():
    package_dir = Path(config.__file__).resolve().parent
    assert config.MAP_DIR == package_dir / "maps"
    assert all(package_dir in p.parents for p in config.MAP_FILES.values())


def test_maps_are_declared_as_package_data():
    pyproject = Path(config.__file__).resolve().parents[1] / "pyproject.toml"
    text = pyproject.read_text()
    assert "[tool.setuptools.package-data]" in text
    assert '"stonehunt.maps" = ["*.json"]' in text

import json

import pytest

from stonehunt.core.types import CellEvent
from stonehunt.core.world import SimulatedWorld, WorldMap, load_world

EMPTY = ["." * 5 for _ in range(5)]


def _rows(*overrides):
    rows = [list(r) for r in EMPTY]
    rows[0][0] = "A"
    for r, c, ch in overrides:
        rows[r][c] = ch
    return ["".join(r) for r in rows]


def test_load_world_reads_bundled_map(open_field):
    assert open_field.target == (3, 3)
    assert open_field.size == 9
    assert open_field.layout[(0, 2)] == "S"
    assert open_field.perception == 1


def test_load_world_schedule(shifting_hazard):
    assert shifting_hazard.schedule == {4: {(0, 2): "."}}


def test_load_world_from_tmp_file(tmp_path):
    p = tmp_path / "m.json"
    p.write_text(json.dumps({"rows": _rows((4, 4, "I")), "perception": 2}))
    wm = load_world(p)
    assert wm.name == "m"
    assert wm.perception == 2
    assert wm.target == (4, 4)


@pytest.mark.parametrize("rows", [
    _rows(),                                  # no target
    _rows((1, 1, "I"), (2, 2, "I")),          # two targets
    _rows((1, 1, "I"), (3, 3, "A")),          # start elsewhere
    ["A..", "..I"],                           # not square
])
def test_from_rows_rejects_bad_layouts(rows):
    with pytest.raises(ValueError):
        WorldMap.from_rows(rows)


def test_reports_only_changes_within_range():
    wm = WorldMap.from_rows(_rows((0, 2, "P"), (4, 4, "I"), (2, 0, "S")))
    world = SimulatedWorld(wm)
    world.request_move(0, 0)
    assert world.read_report() == []
    world.request_move(0, 1)
    assert world.read_report() == [CellEvent(0, 2, "P")]
    world.request_move(1, 1)
    assert world.read_report() == [CellEvent(2, 0, "S")]
    world.request_move(1, 1)
    assert world.read_report() == []


def test_scheduled_clear_is_reported_as_neutral():
    wm = WorldMap.from_rows(_rows((0, 2, "P"), (4, 4, "I")),
                            schedule=[{"after_move": 2, "col": 2, "row": 0, "status": "."}])
    world = SimulatedWorld(wm)
    world.request_move(0, 1)
    assert world.read_report() == [CellEvent(0, 2, "P")]
    world.request_move(0, 1)
    assert world.read_report() == [CellEvent(0, 2, ".")]
    assert world.status_at((0, 2)) == "."


def test_records_hazard_hits_jumps_and_target():
    wm = WorldMap.from_rows(_rows((0, 1, "P"), (0, 2, "I")))
    world = SimulatedWorld(wm)
    world.request_move(0, 1)
    world.request_move(2, 2)
    world.request_move(1, 2)
    world.request_move(0, 2)
    assert world.hazard_hits == [(0, 1)]
    assert world.jumps == [(2, 2)]
    assert world.reached_target
    assert world.trail == [(0, 1), (2, 2), (1, 2), (0, 2)]

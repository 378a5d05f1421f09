from math import inf

import pytest

from stonehunt.core.backtracking import BacktrackingEngine
from stonehunt.core.interaction import MoveBoundary
from stonehunt.core.types import Grid


def _engine(grid, oracle):
    engine = BacktrackingEngine()
    engine.init(grid, MoveBoundary(grid, oracle))
    return engine


def test_first_step_visits_start_in_place(fake_oracle):
    engine = _engine(Grid.create(2, 2, size=3), fake_oracle)
    res = engine.step()
    assert res.status == "running"
    assert res.current == (0, 0)
    assert fake_oracle.requests == [(0, 0)]
    assert engine.visited == {(0, 0)}


def test_children_tried_in_up_left_right_down_order(fake_oracle):
    engine = _engine(Grid.create(2, 2, size=3), fake_oracle)
    engine.step()
    assert engine.step().current == (0, 1)
    assert engine.step().current == (0, 2)
    assert engine.step().current == (1, 2)


def test_every_move_is_adjacent_and_tour_returns_home(fake_oracle):
    grid = Grid.create(2, 2, size=3)
    engine = _engine(grid, fake_oracle)
    assert engine.run() == 4
    assert len(engine.visited) == 9
    assert engine.position == (0, 0)
    # 1 in-place move, 8 descents, 8 returns
    assert len(fake_oracle.requests) == 17
    steps = [(0, 0)] + fake_oracle.requests
    assert all(abs(a[0] - b[0]) + abs(a[1] - b[1]) <= 1 for a, b in zip(steps, steps[1:]))


def test_sweep_routes_around_hazards():
    grid = Grid.create(0, 4)
    grid.apply_status(0, 2, "P")
    grid.apply_status(1, 2, "H")
    engine = BacktrackingEngine()
    engine.grid = grid
    assert engine.sweep() == 8
    assert grid[(0, 2)].cost_from_start == inf


def test_sweep_without_route_returns_none():
    grid = Grid.create(0, 2)
    grid.apply_status(0, 1, "P")
    grid.apply_status(1, 0, "P")
    engine = BacktrackingEngine()
    engine.grid = grid
    assert engine.sweep() is None


def test_open_field_full_tour(open_field, make_run):
    run = make_run(open_field, "backtracking")
    assert run.run() == 6
    assert len(run.engine.visited) == 81
    assert len(run.boundary.moves) == 161
    assert run.engine.position == (0, 0)
    assert run.engine.has_protective_item
    assert run.grid[(3, 3)].cost_from_start == 6
    assert run.world.jumps == []


def test_walled_target_never_found(walled_stone, make_run):
    run = make_run(walled_stone, "backtracking")
    assert run.run() is None
    assert run.engine.no_path
    assert len(run.engine.visited) == 72
    assert run.grid[(4, 4)].cost_from_start == inf
    assert run.world.hazard_hits == []


def test_no_path_is_sticky(walled_stone, make_run):
    run = make_run(walled_stone, "backtracking")
    run.run()
    moves = len(run.boundary.moves)
    assert run.engine.step().status == "no_path"
    assert len(run.boundary.moves) == moves


def test_cleared_hazard_shortens_final_cost(shifting_hazard, make_run):
    run = make_run(shifting_hazard, "backtracking")
    assert run.run() == 4
    assert run.grid[(0, 2)].status == "."
    assert run.world.hazard_hits == []


@pytest.mark.parametrize("fixture_name, expected", [
    ("open_field", 6),
    ("walled_stone", None),
    ("shifting_hazard", 4),
])
def test_engines_agree(request, make_run, fixture_name, expected):
    world_map = request.getfixturevalue(fixture_name)
    assert make_run(world_map, "astar").run() == expected
    assert make_run(world_map, "backtracking").run() == expected

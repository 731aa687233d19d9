"""
DroidMaze — tests/test_mission.py
End-to-end: explore through a threaded oracle, then answer both questions.
"""

import io
import logging
from pathlib import Path

import pytest
from droid.config import MissionConfig
from droid.explorer import TargetNotFoundError
from droid.mission import (
    Mission,
    fill_time,
    fill_time_from_map,
    shortest_path_to_target,
)
from droid.oracle import MapOracle
from maze.flood import distance_field
from maze.mapfile import parse_map
from maze.pathing import NoPathError

DATA_DIR = Path(__file__).parent.parent / "data" / "mazes"
QUIET = MissionConfig()


def oracle_for(name, start=(1, 1)):
    truth = parse_map((DATA_DIR / name).read_text(encoding="utf-8"))
    return MapOracle(truth, start=start)


def test_ring_scenario():
    # Checked against the parsed adjacency, not assumed.
    truth = parse_map((DATA_DIR / "ring.txt").read_text(encoding="utf-8"))
    assert distance_field(truth, (1, 1))[(3, 3)] == 6
    assert max(distance_field(truth, (3, 3)).values()) == 8

    assert shortest_path_to_target(oracle_for("ring.txt"), config=QUIET) == 6
    assert fill_time(oracle_for("ring.txt"), config=QUIET) == 8

def test_branches_scenario():
    assert shortest_path_to_target(oracle_for("branches.txt"), config=QUIET) == 12
    assert fill_time(oracle_for("branches.txt"), config=QUIET) == 20

def test_sample_scenario():
    assert fill_time(oracle_for("sample.txt"), config=QUIET) == 4
    assert fill_time_from_map((DATA_DIR / "sample.txt").read_text(encoding="utf-8")) == 4

def test_one_exploration_answers_both():
    oracle = oracle_for("branches.txt")
    mission = Mission(oracle, config=QUIET)
    path = mission.shortest_path()
    moves_after_explore = oracle.moves

    assert path[0] == (0, 0)
    assert path[-1] == (6, 2)
    assert mission.fill_time() == 20
    # No further commands were sent for the second answer.
    assert oracle.moves == moves_after_explore

def test_start_position_does_not_change_fill_time():
    # The flood starts at the target; where the droid started is irrelevant.
    assert fill_time(oracle_for("branches.txt", start=(9, 7)), config=QUIET) == 20

def test_render_prints_frames():
    out = io.StringIO()
    mission = Mission(oracle_for("ring.txt"), config=QUIET, render=True, out=out)
    mission.shortest_path()
    mission.fill_time()

    printed = out.getvalue()
    assert "D" in printed
    assert "*" in printed
    # Corners are never observed, so the top wall row has blanks at both ends.
    assert "| ##### |" in printed

def test_render_flag_defers_to_config():
    out = io.StringIO()
    cfg = MissionConfig(render=True, droid_glyph="@")
    Mission(oracle_for("ring.txt"), config=cfg, out=out).explore()
    assert "@" in out.getvalue()

def test_target_never_found():
    truth = parse_map("#####\n#...#\n#####")
    with pytest.raises(TargetNotFoundError):
        shortest_path_to_target(MapOracle(truth, start=(1, 1)), config=QUIET)
    with pytest.raises(TargetNotFoundError):
        fill_time(MapOracle(truth, start=(1, 1)), config=QUIET)

NEXT_DOOR = "#########\n#O......#\n#########"


def test_stop_at_target_does_not_shorten_the_answers():
    # Target one step west of the start; the corridor runs six cells east.
    early = MissionConfig(stop_at_target=True)
    truth = parse_map(NEXT_DOOR)
    assert fill_time(MapOracle(truth, start=(2, 1)), config=QUIET) == 6
    assert fill_time(MapOracle(truth, start=(2, 1)), config=early) == 6
    assert shortest_path_to_target(MapOracle(truth, start=(2, 1)), config=early) == 1

def test_locate_target_then_resume_to_full_map():
    cfg = MissionConfig(stop_at_target=True)
    oracle = oracle_for("branches.txt")
    mission = Mission(oracle, config=cfg)

    partial = mission.locate_target()
    assert partial.complete is False
    assert partial.target == (6, 2)
    moves_at_target = oracle.moves

    path = mission.shortest_path()
    assert mission.result.complete is True
    assert oracle.moves > moves_at_target
    # Origin is kept across the resumed run.
    assert path[0] == (0, 0)
    assert len(path) - 1 == 12
    assert mission.fill_time() == 20

def test_locate_target_without_early_stop_is_the_full_run():
    mission = Mission(oracle_for("ring.txt"), config=QUIET)
    assert mission.locate_target().complete is True
    assert mission.explore() is mission.result

def test_distance_cross_check_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="droid.mission")
    assert fill_time(oracle_for("ring.txt"), config=QUIET) == 8
    assert "depth 8, rounds 8" in caplog.text

def test_fill_time_from_map_validation():
    with pytest.raises(TargetNotFoundError):
        fill_time_from_map("###\n#.#\n###")
    with pytest.raises(ValueError):
        fill_time_from_map("#O.O#")

def test_fill_time_from_map_renders():
    out = io.StringIO()
    assert fill_time_from_map("#O..#", render=True, out=out) == 2
    assert "|#OOO#|" in out.getvalue()

def test_unreachable_target_in_map_has_no_path():
    from maze.pathing import astar
    grid = parse_map("#######\n#.#O..#\n#######")
    with pytest.raises(NoPathError):
        astar(grid, (1, 1), (3, 1))

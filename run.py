"""
DroidMaze — run.py
Command-line entry point: explore a maze file with a simulated oracle.
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure we can import droidmaze packages
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from droid.config import load_config
from droid.explorer import TargetNotFoundError
from droid.mission import Mission
from droid.oracle import MapOracle
from droid.protocol import ProtocolViolation
from maze.mapfile import MapParseError, parse_map
from maze.pathing import PathfindingError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Map a maze through a stepping oracle and solve it.")
    parser.add_argument("maze", type=Path, help="Ground-truth map text served by the oracle")
    parser.add_argument("--part", choices=["path", "fill", "both"], default="both")
    parser.add_argument("--start", type=int, nargs=2, metavar=("X", "Y"),
                        help="Droid start inside the map file (defaults to config)")
    parser.add_argument("--render", action="store_true", help="Print a frame after every step")
    parser.add_argument("--config", type=Path, default=None, help="Mission TOML file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.start is not None:
            config = config.model_copy(update={"start": tuple(args.start)})
        truth = parse_map(args.maze.read_text(encoding="utf-8"))
        oracle = MapOracle(truth, start=config.start)

        mission = Mission(oracle, config=config, render=args.render or config.render)
        if args.part in ("path", "both"):
            path = mission.shortest_path()
            print(f"Shortest path to target: {len(path) - 1} steps")
        if args.part in ("fill", "both"):
            print(f"Flood fill time: {mission.fill_time()} rounds")
    except (OSError, ValueError, MapParseError, ProtocolViolation,
            TargetNotFoundError, PathfindingError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

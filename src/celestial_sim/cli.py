"""
Command-line interface for star-system propagation.

Usage:
    celestial-sim tree data/celestial/sol.yaml
    celestial-sim propagate data/celestial/sol.yaml --dt 86400 --duration 31557600
    celestial-sim propagate sol.yaml --json out/simlog.json --html out/tracks.html
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from celestial_sim.core.constants import DEFAULT_DT_S
from celestial_sim.core.system_loader import load_system_file
from celestial_sim.objects.celestial import CelestialNode, format_tree, resolve_positions
from celestial_sim.simulation.engine import Engine
from celestial_sim.simulation.systems.orbit_completion import OrbitCompletionSystem
from celestial_sim.simulation.systems.state_recorder import StateRecorderSystem
from celestial_sim.visualization.export_log import export_log_to_json

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="celestial-sim",
        description="Load a star-system description and propagate its orbits",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    tree = sub.add_parser("tree", help="Print the object hierarchy")
    tree.add_argument("path", help="YAML star-system file")

    prop = sub.add_parser("propagate", help="Step the system and report positions")
    prop.add_argument("path", help="YAML star-system file")
    prop.add_argument("--dt", type=float, default=DEFAULT_DT_S, help="Tick length in seconds")
    prop.add_argument("--duration", type=float, default=10 * DEFAULT_DT_S, help="Simulated seconds")
    prop.add_argument("--json", dest="json_path", help="Write recorded tracks to this JSON file")
    prop.add_argument("--html", dest="html_path", help="Write a plotly track plot to this HTML file")
    return parser


def cmd_tree(args: argparse.Namespace) -> int:
    root = load_system_file(args.path)
    print(format_tree(root))
    return 0


def check_elliptic_orbits(root: CelestialNode) -> None:
    for _depth, node in root.walk():
        if not (0.0 <= node.orbit.eccentricity < 1.0):
            raise ValueError(f"{node.name}: eccentricity {node.orbit.eccentricity} cannot be positioned (needs 0 <= e < 1)")


def cmd_propagate(args: argparse.Namespace) -> int:
    root = load_system_file(args.path)
    check_elliptic_orbits(root)
    engine = Engine(dt_s=args.dt, systems=[StateRecorderSystem(), OrbitCompletionSystem()])
    log = engine.run(root, t_start_s=0.0, t_end_s=args.duration)

    for event in log.events:
        logger.info("t=%.1fs %s completed an orbit", event["t"], event["body"])

    for path, (x, y, _z) in resolve_positions(root).items():
        print(f"{path:<40} x={x:16.1f} km  y={y:16.1f} km")

    if args.json_path:
        print(f"Wrote {export_log_to_json(log, args.json_path)}")
    if args.html_path:
        from celestial_sim.visualization.plotly_viewer import render_tracks
        print(f"Wrote {render_tracks(log, args.html_path)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(module)s - %(message)s',
    )

    handlers = {"tree": cmd_tree, "propagate": cmd_propagate}
    try:
        return handlers[args.command](args)
    except ValueError as e:
        # SystemLoadError and invalid run parameters
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

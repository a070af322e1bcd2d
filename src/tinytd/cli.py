from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Sequence, Tuple

from .config import ConfigError, default_config, load_config
from .formatting import format_snapshot, format_wave_table, reports_to_dict, summarize_placements
from .sim.clock import HeadlessDriver, WaveReport
from .sim.models import MapNotFoundError, PlacementResult
from .sim.simulation import Simulation


def _parse_point(raw: str) -> Tuple[float, float]:
    try:
        x_raw, y_raw = raw.split(",", 1)
        return float(x_raw), float(y_raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected X,Y coordinates, got '{raw}'.") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinytd",
        description="Run tower-defense waves headlessly and report how each wave went.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON/YAML game config (defaults to the built-in rules).",
    )
    parser.add_argument(
        "--map",
        default="0",
        help="Map id or index from the catalog.",
    )
    parser.add_argument(
        "--tower",
        dest="towers",
        action="append",
        type=_parse_point,
        default=[],
        metavar="X,Y",
        help="Place a tower at pixel coordinates before the first wave (repeatable).",
    )
    parser.add_argument(
        "--waves",
        type=int,
        default=1,
        help="How many waves to run.",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=1.0 / 60.0,
        help="Frame delta in seconds for the virtual clock.",
    )
    parser.add_argument(
        "--max-wave-seconds",
        type=float,
        default=300.0,
        help="Give up on a wave after this much simulated time.",
    )
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log simulation events to stderr.",
    )
    return parser


def _print_table(
    placements: Sequence[PlacementResult],
    reports: Sequence[WaveReport],
    simulation: Simulation,
) -> None:
    print(f"Towers: {summarize_placements(placements)}")
    print()
    print(format_wave_table(reports))
    print()
    print(format_snapshot(simulation.snapshot()))


def _print_json(
    placements: Sequence[PlacementResult],
    reports: Sequence[WaveReport],
    simulation: Simulation,
) -> None:
    payload = reports_to_dict(reports, simulation.snapshot())
    payload["placements"] = [result.to_dict() for result in placements]
    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.waves < 0:
        parser.error("--waves must be >= 0.")
    if args.dt <= 0:
        parser.error("--dt must be > 0.")

    try:
        config = load_config(Path(args.config)) if args.config else default_config()
    except ConfigError as exc:
        parser.error(str(exc))

    map_key = int(args.map) if args.map.isdigit() else args.map
    try:
        simulation = Simulation(config, map_key=map_key)
    except MapNotFoundError as exc:
        parser.error(str(exc))

    placements: List[PlacementResult] = [simulation.place_tower(x, y) for x, y in args.towers]

    driver = HeadlessDriver(simulation)
    reports: List[WaveReport] = []
    for _ in range(args.waves):
        reports.append(driver.run_wave(frame_dt=args.dt, max_seconds=args.max_wave_seconds))
        if simulation.game_over:
            break

    if args.format == "json":
        _print_json(placements, reports, simulation)
    else:
        _print_table(placements, reports, simulation)
    return 1 if simulation.game_over else 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Command-line entry point: run the engine over a JSON snapshot.

Usage:
    python -m insight_engine snapshot.json
    python -m insight_engine snapshot.json --mode watts --fatigue 15kj
    python -m insight_engine snapshot.json --archive 2024
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from insight_engine.archive import build_archive
from insight_engine.config import ThresholdConfig
from insight_engine.engine import InsightEngine
from insight_engine.exceptions import ConfigurationError, SnapshotFormatError
from insight_engine.models.enums import FatigueState, PowerMode
from insight_engine.serialization import (
    archive_to_dict,
    report_to_dict,
    snapshot_from_dict,
)

logger = logging.getLogger(__name__)

EXIT_BAD_INPUT = 2

_MODES = {"watts": PowerMode.WATTS, "per_kg": PowerMode.PER_KG}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="insight-engine",
        description="Detect insights and alerts in a roster power-profile snapshot",
    )
    parser.add_argument("snapshot", help="Path to the JSON snapshot")
    parser.add_argument("--mode", choices=sorted(_MODES), default="per_kg")
    parser.add_argument(
        "--fatigue",
        choices=[s.value for s in FatigueState],
        default=FatigueState.FRESH.value,
    )
    parser.add_argument(
        "--all-athletes",
        action="store_true",
        help="Compare every athlete against the team, not only the reserve",
    )
    parser.add_argument(
        "--archive",
        type=int,
        metavar="SEASON",
        help="Print the season archive for SEASON instead of the findings",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        help="Reference date (YYYY-MM-DD) for age categories",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        with open(args.snapshot) as f:
            snapshot = snapshot_from_dict(json.load(f))
    except (OSError, json.JSONDecodeError, SnapshotFormatError) as exc:
        logger.error("Cannot read snapshot %s: %s", args.snapshot, exc)
        return EXIT_BAD_INPUT

    if args.archive is not None:
        archive = build_archive(snapshot.athletes, snapshot.debriefs, snapshot.events, args.archive)
        print(json.dumps(archive_to_dict(archive), indent=2))
        return 0

    try:
        thresholds = ThresholdConfig.from_env()
    except ConfigurationError as exc:
        logger.error("Invalid threshold configuration: %s", exc)
        return EXIT_BAD_INPUT

    engine = InsightEngine(
        thresholds=thresholds,
        compared_roster_roles=None if args.all_athletes else ("reserve",),
    )
    report = engine.run(
        snapshot.athletes,
        snapshot.scouts,
        mode=_MODES[args.mode],
        fatigue_state=FatigueState(args.fatigue),
        as_of=args.as_of,
    )
    print(json.dumps(report_to_dict(report), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Personal Bests Runner
Command-line entry point: load a race history file, build the personal-bests
hierarchy, and write it out as JSON or a flat table.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import get_args

from pb_pipeline import config
from pb_pipeline.config import validate_configuration
from pb_pipeline.exceptions import PBPipelineError
from pb_pipeline.export import export_personal_bests
from pb_pipeline.loader import read_races_file
from pb_pipeline.schemas import RaceCategory, TransformOptions
from pb_pipeline.transform.base import PersonalBestsTransformer

logger = logging.getLogger("pb_runner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a driver's personal bests from a race history file."
    )
    parser.add_argument("--races", type=Path, required=True, help="JSON file of races")
    parser.add_argument("--cust-id", type=int, required=True, help="Driver id")
    parser.add_argument("--driver-name", default="", help="Driver display name")
    parser.add_argument(
        "--rating", type=int, default=None, help="Current rating; enables skill analysis"
    )
    parser.add_argument(
        "--category",
        action="append",
        choices=get_args(RaceCategory),
        help="Keep only this category (repeatable)",
    )
    parser.add_argument("--series", action="append", help="Keep only this series (repeatable)")
    parser.add_argument(
        "--date-from", type=datetime.fromisoformat, help="Earliest race date (ISO 8601)"
    )
    parser.add_argument("--date-to", type=datetime.fromisoformat, help="Latest race date (ISO 8601)")
    parser.add_argument("--min-sof", type=int, default=None, help="Minimum strength of field")
    parser.add_argument("--min-races", type=int, default=None, help="Minimum races per layout")
    parser.add_argument(
        "--workers", type=int, default=None, help="Threads for skill analysis"
    )
    parser.add_argument("--out", type=Path, default=None, help="Output file (default: stdout)")
    parser.add_argument(
        "--format",
        choices=["json", "parquet", "csv"],
        default="json",
        help="json writes the full hierarchy; parquet/csv write one row per personal best",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        validate_configuration()
        races = read_races_file(args.races)
    except (PBPipelineError, OSError, ValueError) as e:
        logger.error(f"❌ Could not load races: {e}")
        return 1

    options = TransformOptions(
        category_filter=args.category,
        series_filter=args.series,
        date_from=args.date_from,
        date_to=args.date_to,
        min_strength_of_field=args.min_sof,
        min_races=args.min_races,
    )
    transformer = PersonalBestsTransformer(
        options=options, max_workers=args.workers or config.ANALYSIS_WORKERS
    )

    result = transformer.transform(args.cust_id, args.driver_name, races, args.rating)

    for ignored in result.context.ignored_races:
        logger.info(f"  ⏭️ Ignored race {ignored.race_id}: {ignored.reason}")

    if result.errors:
        for error in result.errors:
            logger.error(f"❌ {error}")
        return 1

    if args.format == "json":
        payload = result.model_dump_json(by_alias=True, indent=2)
        if args.out is None:
            sys.stdout.write(payload + "\n")
        else:
            args.out.write_text(payload, encoding="utf-8")
            logger.info(f"💾 Wrote personal bests to {args.out}")
    else:
        if args.out is None:
            logger.error(f"❌ --out is required for {args.format} output")
            return 1
        export_personal_bests(result.personal_bests, args.out, args.format)

    logger.info(f"✨ Done in {result.context.processing_time_ms} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())

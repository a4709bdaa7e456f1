"""
Manual holiday synchronization.

Usage:
    python sync_holidays.py              # current year
    python sync_holidays.py 2025
    python sync_holidays.py --regular 2025-01
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime

from database import SessionLocal, init_db
from scheduler import holiday_scheduler
from services.regular_holidays import generate_regular_holidays_for_all_centers

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100


def parse_year(value: str) -> int:
    if len(value) != 4 or not value.isdigit() or not MIN_YEAR <= int(value) <= MAX_YEAR:
        raise argparse.ArgumentTypeError(f"Invalid year argument. Must be between {MIN_YEAR} and {MAX_YEAR}.")
    return int(value)


def parse_month(value: str):
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        raise argparse.ArgumentTypeError("Month must be in YYYY-MM format.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync public holidays to all active centers")
    parser.add_argument("year", nargs="?", type=parse_year, help="Year to sync (default: current year)")
    parser.add_argument(
        "--regular",
        metavar="YYYY-MM",
        type=parse_month,
        help="Generate regular weekly holidays for this month instead",
    )
    return parser


def run_regular(month) -> int:
    db = SessionLocal()
    try:
        return generate_regular_holidays_for_all_centers(db, month)
    finally:
        db.close()


def main(argv=None) -> int:
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        return 1 if e.code else 0

    try:
        init_db()
        if args.regular is not None:
            count = run_regular(args.regular)
            print(f"Successfully generated {count} regular holidays for {args.regular:%Y-%m}")
        else:
            count = asyncio.run(holiday_scheduler.sync_holidays_manually(args.year))
            print(f"Successfully synced {count} holidays")
    except Exception as e:
        logger.error(f"Holiday sync failed: {e}")
        print(f"Holiday sync failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())

"""Backfill coordinates for restaurants saved without them.

Usage: python -m dinewave.scripts.geocode_restaurants [--dry-run] [--delay 0.2]
"""

from __future__ import annotations

import argparse
import logging

from dinewave.core.config import settings
from dinewave.db.session import Database
from dinewave.services.geocoding import Geocoder
from dinewave.services.restaurant_service import backfill_coordinates

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Geocode restaurants that have no coordinates.")
    parser.add_argument("--database-url", default=settings.database_url)
    parser.add_argument("--delay", type=float, default=0.2, help="Seconds to wait between provider calls.")
    parser.add_argument("--dry-run", action="store_true", help="Resolve addresses without saving them.")
    return parser


def main(argv: list[str] | None = None, geocoder: Geocoder | None = None) -> int:
    args = build_parser().parse_args(argv)
    geocoder = geocoder or Geocoder(settings.google_maps_api_key)
    if not geocoder.is_configured:
        logger.error("[BACKFILL] GOOGLE_MAPS_API_KEY is not set; nothing to do.")
        return 1

    database = Database(args.database_url)
    database.connect()
    try:
        database.create_all()
        with database.session() as db:
            succeeded, failed = backfill_coordinates(db, geocoder, delay_seconds=args.delay, dry_run=args.dry_run)
    finally:
        database.disconnect()

    logger.info("[BACKFILL] Done: %s geocoded, %s failed%s", succeeded, failed, " (dry run)" if args.dry_run else "")
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())

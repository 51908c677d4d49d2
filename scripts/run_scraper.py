"""Scraper runner for cron jobs and manual debugging.

Usage:
    python scripts/run_scraper.py all
    python scripts/run_scraper.py list --store djaksport --store planeta
    python scripts/run_scraper.py details --store buzz --force
    python scripts/run_scraper.py maintain
    python scripts/run_scraper.py reset-details --store intersport
    python scripts/run_scraper.py schedule

Exits with status 1 when any store failed.
"""

import argparse
import asyncio
import os
import sys

# Add backend to path so we can import akcija modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from akcija.config import settings
from akcija.core.logging_config import configure_logging
from akcija.db.utils import init_db
from akcija.scrapers.factory import get_scraper_factory
from akcija.scrapers.scheduler import ScraperScheduler
from akcija.scrapers.scraper_service import ScraperService


def build_parser() -> argparse.ArgumentParser:
    stores = get_scraper_factory().get_registered_stores()

    parser = argparse.ArgumentParser(description="Run the akcija deal scrapers.")
    parser.add_argument("--no-headless", action="store_true", help="Show the browser window")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables first")
    sub = parser.add_subparsers(dest="command", required=True)

    run_all = sub.add_parser("all", help="All list passes, then all detail passes")
    run_all.add_argument("--skip-details", action="store_true")
    run_all.add_argument("--force", action="store_true", help="Re-enrich every deal")

    run_list = sub.add_parser("list", help="List pass for selected stores")
    run_list.add_argument("--store", action="append", required=True, choices=stores)

    details = sub.add_parser("details", help="Detail pass for selected stores")
    details.add_argument("--store", action="append", required=True, choices=stores)
    details.add_argument("--force", action="store_true", help="Re-enrich every deal")

    sub.add_parser("maintain", help="Remove sold-out apparel and re-classify the catalog")

    reset = sub.add_parser("reset-details", help="Mark a store's deals for re-enrichment")
    reset.add_argument("--store", action="append", required=True, choices=stores)

    sub.add_parser("schedule", help="Run the daily job on SCHEDULE_CRON")
    return parser


async def run_schedule() -> int:
    scheduler = ScraperScheduler()
    scheduler.start()
    try:
        # Block until the process is stopped
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
    return 0


async def main(args: argparse.Namespace) -> int:
    if args.init_db:
        await init_db()

    service = ScraperService()

    if args.command == "all":
        summary = await service.run_all(include_details=not args.skip_details, force=args.force)
        print(summary.format())
        return 0 if summary.ok else 1

    if args.command == "list":
        summary = await service.run_all(stores=args.store, include_details=False)
        print(summary.format())
        return 0 if summary.ok else 1

    if args.command == "details":
        failed = False
        for store in args.store:
            try:
                stats = await service.run_details(store, force=args.force)
            except Exception as e:
                print(f"{store}: failed ({type(e).__name__}: {e})")
                failed = True
                continue
            print(
                f"{store}: {stats.enriched}/{stats.pending} enriched, {stats.deleted} deleted, "
                f"{stats.listing_pages} listing pages, {stats.mixed_sizes} mixed-size pages, {stats.errors} errors"
            )
        return 1 if failed else 0

    if args.command == "maintain":
        stats = await service.run_maintenance()
        print(
            f"Processed {stats.processed}: {stats.paths_fixed} paths fixed, "
            f"{stats.categories_added} categories added, {stats.gender_updated} genders updated"
        )
        return 0

    if args.command == "reset-details":
        for store in args.store:
            count = await service.reset_details(store)
            print(f"{store}: {count} deals marked for re-enrichment")
        return 0

    if args.command == "schedule":
        return await run_schedule()

    return 2


if __name__ == "__main__":
    arguments = build_parser().parse_args()
    if arguments.no_headless:
        settings.HEADLESS = False
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    try:
        sys.exit(asyncio.run(main(arguments)))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)

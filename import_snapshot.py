#!/usr/bin/env python3
"""
Snapshot import script

Ingests a local governor spreadsheet into the season tracker database, the
same way the bot's /admin-upload command does.

Usage:
    python import_snapshot.py 100-2026-01-01-2026-01-10.xlsx --kind creation
    python import_snapshot.py 100-2026-01-10-2026-01-17.xlsx --kind update
    python import_snapshot.py scan.csv --kind update --force
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from tracker.database.database import Database
from tracker.data_models.season import IngestResult
from tracker.operations.season_operations import SeasonOperations
from tracker.services.configuration import ConfigurationService
from tracker.utils.exceptions import TrackerException


def setup_logging() -> logging.Logger:
    """Setup logging for the import script"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )
    return logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import a governor snapshot spreadsheet")
    parser.add_argument('path', type=Path, help="Spreadsheet to import (.xlsx, .xlsm or .csv)")
    parser.add_argument(
        '--kind',
        choices=('creation', 'update'),
        default='update',
        help="creation starts a new season baseline; update refreshes current values (default)"
    )
    parser.add_argument('--force', action='store_true', help="Ignore kingdom/date continuity warnings")
    parser.add_argument('--database-url', default=None, help="Override DATABASE_URL")
    return parser.parse_args(argv)


async def import_snapshot(path: Path, kind: str, force: bool = False, database_url=None) -> IngestResult:
    """Ingest one file and return the result"""
    db = Database(database_url)
    await db.initialize()
    try:
        config_service = ConfigurationService(db)
        await config_service.load_all()
        season_ops = SeasonOperations(db, config_service)
        return await season_ops.ingest(kind, path.read_bytes(), filename=path.name, override_continuity=force)
    finally:
        await db.close()


async def main(argv=None) -> int:
    """Main entry point for standalone script execution"""
    args = parse_args(argv)
    logger = setup_logging()

    if not args.path.is_file():
        print(f"ERROR: {args.path} does not exist")
        return 1

    try:
        result = await import_snapshot(args.path, args.kind, args.force, args.database_url)
    except TrackerException as e:
        logger.error(f"Import failed: {e}")
        print(f"\nERROR: {e.user_message}")
        return 1

    if not result.accepted:
        print(f"\nWARNING: {result.warning.message}")
        print("Nothing was imported. Re-run with --force to import anyway.")
        return 2

    print("\n" + "=" * 50)
    print(f"{result.kind.upper()} IMPORT COMPLETED")
    print("=" * 50)
    print(f"Done: {result.processed}")
    print(f"New governors: {result.inserted}")
    print(f"Updated governors: {result.updated}")
    if result.backup_id is not None:
        print(f"Backup created: #{result.backup_id}")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

"""
Command-line access to the backup subsystem.

Usage:
    python scripts/backup_cli.py export [--output PATH]
    python scripts/backup_cli.py info PATH
    python scripts/backup_cli.py restore PATH [--yes]
    python scripts/backup_cli.py stats
"""

import argparse
import asyncio
import json
import logging
import sys
import os
from pathlib import Path

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from backup.restorer import SnapshotRestorer
from backup.serializer import SnapshotSerializer, archive_filename
from backup.stats import StatsReporter
from backup.store import EntityStore
from core.config import settings
from core.database import build_engine
from core.exceptions import BackupException
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def cmd_export(store: EntityStore, args) -> int:
    archive = await SnapshotSerializer(store).export_archive()
    output = Path(args.output or archive_filename())
    output.write_bytes(archive)
    logger.info(f"Wrote {output} ({len(archive)} bytes)")
    return 0


async def cmd_info(store: EntityStore, args) -> int:
    info = SnapshotRestorer(store).inspect(Path(args.path).read_bytes())
    print(json.dumps(info.model_dump(), indent=2))
    return 0


async def cmd_restore(store: EntityStore, args) -> int:
    archive = Path(args.path).read_bytes()
    restorer = SnapshotRestorer(store)

    if not args.yes:
        info = restorer.inspect(archive)
        print(json.dumps(info.model_dump(), indent=2))
        answer = input("This replaces ALL data in the database. Continue? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            logger.info("Restore cancelled")
            return 1

    report = await restorer.restore(archive)
    print(json.dumps(report.to_imported_data(), indent=2))
    return 0


async def cmd_stats(store: EntityStore, args) -> int:
    counts = await StatsReporter(store).stats()
    print(json.dumps(counts.to_payload(), indent=2))
    return 0


COMMANDS = {
    "export": cmd_export,
    "info": cmd_info,
    "restore": cmd_restore,
    "stats": cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export, inspect and restore database backups")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Write a backup archive")
    export.add_argument("--output", "-o", help="Archive path (default: <app>-backup-<date>.zip)")

    info = sub.add_parser("info", help="Show an archive's manifest")
    info.add_argument("path")

    restore = sub.add_parser("restore", help="Replace the database with an archive")
    restore.add_argument("path")
    restore.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")

    sub.add_parser("stats", help="Show record counts")
    return parser


async def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)
    store = EntityStore(build_engine(settings.DATABASE_URL), isolation_level=settings.BACKUP_ISOLATION_LEVEL)

    try:
        return await COMMANDS[args.command](store, args)
    except BackupException as e:
        logger.error(str(e))
        return 2
    except OSError as e:
        logger.error(f"File error: {e}")
        return 2
    finally:
        await store.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from backup.serializer import SnapshotSerializer
from core.config import settings

logger = logging.getLogger(__name__)


def scheduled_prefix() -> str:
    # Distinct from manual downloads so pruning never touches them
    return f"{settings.APP_SLUG}-scheduled-backup-"


def scheduled_archive_name(now: datetime) -> str:
    """Sortable name with microseconds so runs never share a file"""
    return f"{scheduled_prefix()}{now.strftime('%Y-%m-%d-%H%M%S-%f')}.zip"


class BackupScheduler:
    """
    Periodically writes export archives to a directory and keeps only the
    newest `retention` of them.
    """

    def __init__(
        self,
        serializer: SnapshotSerializer,
        backup_dir: Optional[str] = None,
        interval_hours: Optional[int] = None,
        retention: Optional[int] = None
    ):
        self.serializer = serializer
        self.backup_dir = Path(backup_dir or settings.BACKUP_DIR)
        self.interval_hours = interval_hours or settings.BACKUP_INTERVAL_HOURS
        self.retention = retention if retention is not None else settings.BACKUP_RETENTION
        self.scheduler = AsyncIOScheduler()

    async def run_backup_job(self) -> Optional[Path]:
        """Job to export one archive; failures are logged, not raised"""
        logger.info("Scheduler: Starting backup job")
        try:
            archive = await self.serializer.export_archive()

            self.backup_dir.mkdir(parents=True, exist_ok=True)
            path = self.backup_dir / scheduled_archive_name(datetime.utcnow())
            path.write_bytes(archive)
            logger.info(f"Scheduler: Wrote {path} ({len(archive)} bytes)")

            self.prune()
            return path

        except Exception as e:
            logger.error(f"Scheduler: Backup job failed - {e}")
            return None

    def prune(self) -> List[Path]:
        """Delete the oldest scheduled archives beyond the retention count"""
        archives = sorted(
            self.backup_dir.glob(f"{scheduled_prefix()}*.zip"),
            key=lambda p: p.name,
            reverse=True
        )
        removed = archives[self.retention:] if self.retention > 0 else []
        for path in removed:
            path.unlink()
            logger.info(f"Scheduler: Removed old archive {path.name}")
        return removed

    def next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job("backup_job")
        return job.next_run_time if job else None

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_backup_job,
            trigger=IntervalTrigger(hours=self.interval_hours),
            id="backup_job",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Backup scheduler started (every {self.interval_hours}h)")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Backup scheduler stopped")

import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime
from backup.scheduler import BackupScheduler, scheduled_archive_name
from core.config import settings
from core.exceptions import StoreUnavailableError


def make_serializer(archive=b"PK-archive-bytes"):
    serializer = MagicMock()
    serializer.export_archive = AsyncMock(return_value=archive)
    return serializer


def test_scheduler_initialization(tmp_path):
    scheduler = BackupScheduler(make_serializer(), backup_dir=str(tmp_path))
    assert scheduler.scheduler is not None
    assert scheduler.interval_hours == settings.BACKUP_INTERVAL_HOURS
    assert scheduler.retention == settings.BACKUP_RETENTION


@pytest.mark.asyncio
async def test_backup_job_writes_archive(tmp_path):
    serializer = make_serializer(b"archive-content")
    scheduler = BackupScheduler(serializer, backup_dir=str(tmp_path / "backups"), retention=3)

    path = await scheduler.run_backup_job()

    assert serializer.export_archive.called
    assert path is not None
    assert path.parent == tmp_path / "backups"
    assert path.name.startswith(f"{settings.APP_SLUG}-scheduled-backup-")
    assert path.suffix == ".zip"
    assert path.read_bytes() == b"archive-content"


@pytest.mark.asyncio
async def test_backup_job_failure_is_logged_not_raised(tmp_path):
    serializer = MagicMock()
    serializer.export_archive = AsyncMock(side_effect=StoreUnavailableError("Database is down"))
    scheduler = BackupScheduler(serializer, backup_dir=str(tmp_path))

    result = await scheduler.run_backup_job()

    assert result is None
    assert list(tmp_path.iterdir()) == []


def test_prune_keeps_newest_archives(tmp_path):
    for day in range(1, 6):
        (tmp_path / f"{settings.APP_SLUG}-scheduled-backup-2024-01-0{day}-120000-000000.zip").write_bytes(b"x")
    (tmp_path / "unrelated.zip").write_bytes(b"x")

    scheduler = BackupScheduler(make_serializer(), backup_dir=str(tmp_path), retention=2)
    removed = scheduler.prune()

    assert len(removed) == 3
    remaining = sorted(p.name for p in tmp_path.iterdir())
    assert remaining == [
        f"{settings.APP_SLUG}-scheduled-backup-2024-01-04-120000-000000.zip",
        f"{settings.APP_SLUG}-scheduled-backup-2024-01-05-120000-000000.zip",
        "unrelated.zip",
    ]


def test_zero_retention_keeps_everything(tmp_path):
    for day in range(1, 4):
        (tmp_path / f"{settings.APP_SLUG}-scheduled-backup-2024-01-0{day}-120000-000000.zip").write_bytes(b"x")

    scheduler = BackupScheduler(make_serializer(), backup_dir=str(tmp_path), retention=0)

    assert scheduler.prune() == []
    assert len(list(tmp_path.iterdir())) == 3


@pytest.mark.asyncio
async def test_scheduler_start_registers_job(tmp_path):
    scheduler = BackupScheduler(make_serializer(), backup_dir=str(tmp_path), interval_hours=6)

    scheduler.start()
    try:
        assert scheduler.scheduler.get_job("backup_job") is not None
        assert scheduler.next_run_time() is not None
    finally:
        scheduler.stop()


def test_scheduled_name_has_microseconds():
    name = scheduled_archive_name(datetime(2024, 1, 15, 10, 30, 5, 123456))

    assert name == f"{settings.APP_SLUG}-scheduled-backup-2024-01-15-103005-123456.zip"


@pytest.mark.asyncio
async def test_back_to_back_runs_write_separate_archives(tmp_path):
    scheduler = BackupScheduler(make_serializer(), backup_dir=str(tmp_path), retention=5)

    first = await scheduler.run_backup_job()
    second = await scheduler.run_backup_job()

    assert first != second
    assert len(list(tmp_path.glob("*.zip"))) == 2


def test_prune_ignores_manual_exports(tmp_path):
    manual = tmp_path / f"{settings.APP_SLUG}-backup-2024-01-05.zip"
    manual.write_bytes(b"x")
    for hour in ("08", "09", "10"):
        (tmp_path / f"{settings.APP_SLUG}-scheduled-backup-2024-01-05-{hour}0000-000000.zip").write_bytes(b"x")

    scheduler = BackupScheduler(make_serializer(), backup_dir=str(tmp_path), retention=1)
    removed = scheduler.prune()

    assert sorted(p.name for p in removed) == [
        f"{settings.APP_SLUG}-scheduled-backup-2024-01-05-080000-000000.zip",
        f"{settings.APP_SLUG}-scheduled-backup-2024-01-05-090000-000000.zip",
    ]
    assert manual.exists()
    assert (tmp_path / f"{settings.APP_SLUG}-scheduled-backup-2024-01-05-100000-000000.zip").exists()

"""
Integration tests for the backup command-line tool
"""

import json
import pytest
from core.config import settings
from scripts import backup_cli
from tests.conftest import SEEDED_COUNTS, sqlite_url, wipe


@pytest.fixture
def cli_database(seeded_store, tmp_path, monkeypatch):
    """Point the CLI's settings at the seeded test database"""
    monkeypatch.setattr(settings, "DATABASE_URL", sqlite_url(tmp_path))
    monkeypatch.setattr(settings, "BACKUP_ISOLATION_LEVEL", None)
    # Keep stdout for the command output only
    monkeypatch.setattr(backup_cli, "setup_logging", lambda level=None: None)
    return seeded_store


@pytest.mark.asyncio
async def test_stats_command(cli_database, capsys):
    exit_code = await backup_cli.main(["stats"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["totalRecords"] == sum(SEEDED_COUNTS.values())


@pytest.mark.asyncio
async def test_export_info_and_restore(cli_database, tmp_path, capsys):
    archive_path = tmp_path / "nightly.zip"

    assert await backup_cli.main(["export", "--output", str(archive_path)]) == 0
    assert archive_path.exists()

    assert await backup_cli.main(["info", str(archive_path)]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["totalRecords"] == SEEDED_COUNTS

    await wipe(cli_database)

    assert await backup_cli.main(["restore", str(archive_path), "--yes"]) == 0
    imported = json.loads(capsys.readouterr().out)
    assert imported["totalRecords"] == sum(SEEDED_COUNTS.values())


@pytest.mark.asyncio
async def test_restore_cancelled_at_prompt(cli_database, tmp_path, monkeypatch, capsys):
    archive_path = tmp_path / "nightly.zip"
    await backup_cli.main(["export", "--output", str(archive_path)])
    await wipe(cli_database)
    monkeypatch.setattr("builtins.input", lambda prompt: "n")

    assert await backup_cli.main(["restore", str(archive_path)]) == 1
    capsys.readouterr()

    assert await backup_cli.main(["stats"]) == 0
    assert json.loads(capsys.readouterr().out)["totalRecords"] == 0


@pytest.mark.asyncio
async def test_invalid_archive_exit_code(cli_database, tmp_path):
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"not a zip")

    assert await backup_cli.main(["restore", str(bogus), "--yes"]) == 2


@pytest.mark.asyncio
async def test_missing_archive_file_exit_code(cli_database, tmp_path):
    missing = tmp_path / "missing.zip"

    assert await backup_cli.main(["restore", str(missing), "--yes"]) == 2
    assert await backup_cli.main(["info", str(missing)]) == 2

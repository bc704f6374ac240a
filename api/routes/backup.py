"""
Backup endpoints: export, import, info (preview) and stats
"""

import asyncio
from typing import Optional
from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response
import logging

from api.dependencies import get_restore_lock, get_restorer, get_serializer, get_stats_reporter
from api.middleware import get_request_id
from backup.restorer import SnapshotRestorer
from backup.serializer import SnapshotSerializer, archive_filename
from backup.stats import StatsReporter
from core.config import settings
from core.exceptions import (
    ArchiveError,
    BackupException,
    MalformedArchiveError,
    RestoreTransactionFailedError,
)
from schemas.backup import ErrorResponse, ImportResponse, InfoResponse, StatsResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/backup", tags=["Backup"])

UPLOAD_CHUNK_BYTES = 1024 * 1024

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Archive missing, malformed or invalid"},
    500: {"model": ErrorResponse, "description": "Store failure; nothing was changed"},
}


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump()
    )


def _error_text(error: BackupException) -> str:
    """User-facing message; points at the offending record or cause when known"""
    kind = error.context.get("entity_kind")
    index = error.context.get("record_index")
    if isinstance(error, ArchiveError) and kind is not None and index is not None:
        return f"{error.message} ({kind}[{index}])"
    if isinstance(error, RestoreTransactionFailedError) and error.original_exception:
        return f"{error.message}: {error.original_exception}"
    return error.message


def _status_for(error: BackupException) -> int:
    return 400 if isinstance(error, ArchiveError) else 500


async def _read_upload(backup_file: Optional[UploadFile]) -> bytes:
    if backup_file is None:
        raise MalformedArchiveError("No backup file was provided", context={"field": "backupFile"})
    
    filename = backup_file.filename or ""
    if not filename.lower().endswith(".zip"):
        raise MalformedArchiveError("Backup file must be a .zip archive", context={"filename": filename})
    
    max_bytes = settings.BACKUP_MAX_UPLOAD_MB * 1024 * 1024
    if backup_file.size is not None and backup_file.size > max_bytes:
        raise MalformedArchiveError(
            "Backup file is too large",
            context={"filename": filename, "size": backup_file.size, "max_bytes": max_bytes}
        )

    # Declared size can be missing, so the read itself stops past the limit
    data = bytearray()
    while True:
        chunk = await backup_file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > max_bytes:
            raise MalformedArchiveError(
                "Backup file is too large",
                context={"filename": filename, "max_bytes": max_bytes}
            )
    return bytes(data)


@router.get(
    "/export",
    response_class=Response,
    responses={200: {"content": {"application/zip": {}}}, 500: ERROR_RESPONSES[500]}
)
async def export_backup(
    request: Request,
    serializer: SnapshotSerializer = Depends(get_serializer)
):
    """Download the whole database as a zip archive."""
    request_id = get_request_id(request)
    logger.info(f"[{request_id}] GET /backup/export")
    
    try:
        archive = await serializer.export_archive()
    except BackupException as e:
        logger.error(f"[{request_id}] Export failed: {e}")
        return _failure(500, "Failed to create backup")
    except Exception as e:
        logger.exception(f"[{request_id}] Unexpected export error: {str(e)}")
        return _failure(500, "Failed to create backup")
    
    filename = archive_filename()
    logger.info(f"[{request_id}] Export ready: {filename} ({len(archive)} bytes)")
    
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/import", response_model=ImportResponse, responses=ERROR_RESPONSES)
async def import_backup(
    request: Request,
    backupFile: Optional[UploadFile] = File(None),
    restorer: SnapshotRestorer = Depends(get_restorer),
    restore_lock: asyncio.Lock = Depends(get_restore_lock)
):
    """
    Replace the whole database with an uploaded archive.
    
    The replace is all-or-nothing: on any error the database is left as it
    was. Concurrent imports are queued behind one another.
    """
    request_id = get_request_id(request)
    logger.info(f"[{request_id}] POST /backup/import")
    
    try:
        archive = await _read_upload(backupFile)
        async with restore_lock:
            report = await restorer.restore(archive)
    except BackupException as e:
        logger.error(f"[{request_id}] Import failed: {e}")
        return _failure(_status_for(e), _error_text(e))
    except Exception as e:
        logger.exception(f"[{request_id}] Unexpected import error: {str(e)}")
        return _failure(500, "Failed to import backup")
    
    return ImportResponse(
        message="Backup imported successfully",
        importedData=report.to_imported_data()
    )


@router.post("/info", response_model=InfoResponse, responses=ERROR_RESPONSES)
async def backup_info(
    request: Request,
    backupFile: Optional[UploadFile] = File(None),
    restorer: SnapshotRestorer = Depends(get_restorer)
):
    """Preview an archive's record counts without importing it."""
    request_id = get_request_id(request)
    logger.info(f"[{request_id}] POST /backup/info")
    
    try:
        archive = await _read_upload(backupFile)
        info = restorer.inspect(archive)
    except BackupException as e:
        logger.error(f"[{request_id}] Reading backup info failed: {e}")
        return _failure(_status_for(e), _error_text(e))
    except Exception as e:
        logger.exception(f"[{request_id}] Unexpected info error: {str(e)}")
        return _failure(500, "Failed to read backup info")
    
    return InfoResponse(data=info)


@router.get("/stats", response_model=StatsResponse, responses={500: ERROR_RESPONSES[500]})
async def backup_stats(
    request: Request,
    reporter: StatsReporter = Depends(get_stats_reporter)
):
    """Current record count per entity kind."""
    request_id = get_request_id(request)
    logger.info(f"[{request_id}] GET /backup/stats")
    
    try:
        counts = await reporter.stats()
    except BackupException as e:
        logger.error(f"[{request_id}] Stats failed: {e}")
        return _failure(500, "Failed to read database statistics")
    except Exception as e:
        logger.exception(f"[{request_id}] Unexpected stats error: {str(e)}")
        return _failure(500, "Failed to read database statistics")
    
    return StatsResponse(data=counts.to_payload())

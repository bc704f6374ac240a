"""
Zip archive codec for snapshots.

An archive holds two JSON entries:
    backup.json       full snapshot document (records + exportDate + version)
    backup-info.json  manifest only (exportDate, totalRecords, version), so an
                      archive can be previewed without parsing the records
"""

import io
import json
import zipfile
import zlib
from typing import Any, Dict, Optional
import logging

from core.config import settings
from core.exceptions import MalformedArchiveError

logger = logging.getLogger(__name__)

SNAPSHOT_ENTRY = "backup.json"
MANIFEST_ENTRY = "backup-info.json"

# Corrupt streams, encrypted entries and unknown compression methods
UNREADABLE_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    OSError,
    EOFError,
    RuntimeError,
    NotImplementedError,
)


def pack_archive(document: Dict[str, Any], manifest: Dict[str, Any]) -> bytes:
    """Write both entries into an in-memory deflated zip and return its bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(SNAPSHOT_ENTRY, json.dumps(document, indent=2, ensure_ascii=False))
        zf.writestr(MANIFEST_ENTRY, json.dumps(manifest, indent=2, ensure_ascii=False))
    
    data = buffer.getvalue()
    logger.info(f"Packed archive: {len(data)} bytes")
    return data


def read_json_entry(archive: bytes, entry: str, max_bytes: Optional[int] = None) -> Any:
    """
    Read and decode one JSON entry from an archive.
    
    Args:
        archive: Raw zip bytes
        entry: Entry name inside the zip
        max_bytes: Largest uncompressed entry accepted
            (default: BACKUP_MAX_ENTRY_MB)
    
    Raises:
        MalformedArchiveError: If the payload is not a readable zip, the entry
            is missing or too large, or its content is not valid UTF-8 JSON.
    """
    if not archive:
        raise MalformedArchiveError("Archive is empty", context={"entry": entry})
    
    if max_bytes is None:
        max_bytes = settings.BACKUP_MAX_ENTRY_MB * 1024 * 1024
    
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            if entry not in zf.namelist():
                raise MalformedArchiveError(
                    f"Archive does not contain {entry}",
                    context={"entry": entry}
                )
            # zipfile stops inflating at the declared size, so this bounds memory
            size = zf.getinfo(entry).file_size
            if size > max_bytes:
                raise MalformedArchiveError(
                    f"{entry} is too large",
                    context={"entry": entry, "size": size, "max_bytes": max_bytes}
                )
            raw = zf.read(entry)
    except MalformedArchiveError:
        raise
    except UNREADABLE_ARCHIVE_ERRORS as e:
        raise MalformedArchiveError(
            "Archive cannot be opened",
            context={"entry": entry},
            original_exception=e
        )
    
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedArchiveError(
            f"{entry} is not valid JSON",
            context={"entry": entry},
            original_exception=e
        )

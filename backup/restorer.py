"""
Snapshot restorer: validates an archive and replaces the store atomically.

Restore is an identity-preserving replace, not a merge:
    1. Unpack backup.json (MalformedArchiveError)
    2. Validate the document, every record and every reference
       (InvalidSnapshotFormatError)
    3. In one transaction, delete every kind children-first, then bulk insert
       every kind parents-first with the original primary keys
       (RestoreTransactionFailedError, rolled back)

Steps 1 and 2 never touch the database.
"""

from typing import Any, Dict, List, Set
from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, insert
import logging

from backup.archive import SNAPSHOT_ENTRY, MANIFEST_ENTRY, read_json_entry
from backup.entities import EntityRegistry, SHIPMENT_ENTITIES, REQUIRED_COLLECTIONS
from backup.serializer import format_timestamp
from backup.store import EntityStore
from core.exceptions import (
    BackupException,
    InvalidSnapshotFormatError,
    RestoreTransactionFailedError,
)
from schemas.backup import BackupInfo, RestoreReport, Snapshot
from schemas.records import SnapshotRecord, naive_utc

logger = logging.getLogger(__name__)

SUPPORTED_MAJOR_VERSION = "1"


class SnapshotRestorer:
    """Restore a snapshot archive into the entity store"""

    def __init__(self, store: EntityStore, registry: EntityRegistry = SHIPMENT_ENTITIES):
        self.store = store
        self.registry = registry

    async def restore(self, archive: bytes) -> RestoreReport:
        """
        Replace the store's contents with the archive's snapshot.

        Returns:
            RestoreReport with the number of records written per kind.

        Raises:
            MalformedArchiveError: Archive unreadable or backup.json missing
            InvalidSnapshotFormatError: Document, record or reference invalid
            RestoreTransactionFailedError: Delete/insert failed; nothing changed
        """
        snapshot = self.parse(archive)
        counts = await self.replace(snapshot)

        report = RestoreReport(
            counts=counts,
            total_records=sum(counts.values()),
            backup_date=format_timestamp(naive_utc(snapshot.export_date)) if snapshot.export_date else None,
            version=snapshot.version
        )
        logger.info(f"Restore completed: {report.total_records} records")
        return report

    def inspect(self, archive: bytes) -> BackupInfo:
        """Read the manifest only; the store is not accessed."""
        manifest = read_json_entry(archive, MANIFEST_ENTRY)
        try:
            return BackupInfo.model_validate(manifest)
        except ValidationError as e:
            raise InvalidSnapshotFormatError(
                f"{MANIFEST_ENTRY} has an unexpected shape",
                context={"field_errors": e.errors(include_url=False)},
                original_exception=e
            )

    # ------------------------------------------------------------------
    # Parsing and validation
    # ------------------------------------------------------------------

    def parse(self, archive: bytes) -> Snapshot:
        document = read_json_entry(archive, SNAPSHOT_ENTRY)

        if not isinstance(document, dict):
            raise InvalidSnapshotFormatError("Snapshot document must be a JSON object")

        missing = [key for key in REQUIRED_COLLECTIONS if not isinstance(document.get(key), list)]
        if missing:
            raise InvalidSnapshotFormatError(
                "Snapshot is missing required collections",
                context={"missing": missing}
            )

        self._check_version(document.get("version"))

        collections = {
            kind.key: self._validate_collection(kind.key, kind.record, document.get(kind.key))
            for kind in self.registry
        }
        self._check_references(collections)

        try:
            snapshot = Snapshot(
                export_date=document.get("exportDate"),
                version=document.get("version"),
                collections=collections
            )
        except ValidationError as e:
            raise InvalidSnapshotFormatError(
                "Snapshot header is invalid",
                context={"field_errors": e.errors(include_url=False)},
                original_exception=e
            )

        logger.info(f"Parsed snapshot: {snapshot.total_records} records, version={snapshot.version}")
        return snapshot

    def _check_version(self, version: Any):
        if version is None:
            return
        if not isinstance(version, str) or version.split(".")[0] != SUPPORTED_MAJOR_VERSION:
            raise InvalidSnapshotFormatError(
                "Unsupported snapshot version",
                context={"version": version, "supported_major": SUPPORTED_MAJOR_VERSION}
            )

    def _validate_collection(self, key: str, record_cls: type, raw: Any) -> List[SnapshotRecord]:
        # Optional collections may be absent in older archives
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise InvalidSnapshotFormatError(
                f"{key} must be a list",
                context={"entity_kind": key}
            )

        records = []
        for index, item in enumerate(raw):
            try:
                records.append(record_cls.model_validate(item))
            except ValidationError as e:
                raise InvalidSnapshotFormatError(
                    f"Invalid record in {key}",
                    context={
                        "entity_kind": key,
                        "record_index": index,
                        "field_errors": e.errors(include_url=False),
                    },
                    original_exception=e
                )
        return records

    def _check_references(self, collections: Dict[str, List[SnapshotRecord]]):
        """Reject duplicate ids and references to records absent from the snapshot."""
        ids: Dict[str, Set[str]] = {}

        for kind in self.registry:
            seen: Set[str] = set()
            for index, record in enumerate(collections[kind.key]):
                if record.id in seen:
                    raise InvalidSnapshotFormatError(
                        f"Duplicate id in {kind.key}",
                        context={"entity_kind": kind.key, "record_index": index, "id": record.id}
                    )
                seen.add(record.id)
            ids[kind.key] = seen

        for kind in self.registry:
            for ref in kind.references:
                parent_ids = ids[ref.target]
                for index, record in enumerate(collections[kind.key]):
                    value = getattr(record, ref.field)
                    if value is None and not ref.required:
                        continue
                    if value not in parent_ids:
                        raise InvalidSnapshotFormatError(
                            f"{kind.key} references a missing {ref.target} record",
                            context={
                                "entity_kind": kind.key,
                                "record_index": index,
                                "field": to_camel(ref.field),
                                "value": value,
                            }
                        )

    # ------------------------------------------------------------------
    # Atomic replace
    # ------------------------------------------------------------------

    async def replace(self, snapshot: Snapshot) -> Dict[str, int]:
        """
        Delete everything and insert the snapshot in a single transaction.

        Returns:
            Records inserted per kind, in declaration order.
        """
        phase = "delete"
        current_kind = None
        inserted: Dict[str, int] = {}

        try:
            async with self.store.transaction() as session:
                for kind in self.registry.delete_order():
                    current_kind = kind.key
                    result = await session.execute(delete(kind.model))
                    logger.debug(f"Deleted {result.rowcount} {kind.key}")

                phase = "insert"
                for kind in self.registry.insert_order():
                    current_kind = kind.key
                    records = snapshot.collections.get(kind.key, [])
                    if records:
                        await session.execute(
                            insert(kind.model),
                            [record.to_row() for record in records]
                        )
                    inserted[kind.key] = len(records)
                    logger.info(f"Inserted {len(records)} {kind.key}")

        except BackupException:
            raise

        except Exception as e:
            logger.error(f"Restore rolled back during {phase} of {current_kind}: {str(e)}")
            raise RestoreTransactionFailedError(
                "Restore failed and was rolled back",
                context={"phase": phase, "entity_kind": current_kind},
                original_exception=e
            )

        return {key: inserted.get(key, 0) for key in self.registry.keys()}

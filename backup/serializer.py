"""
Snapshot serializer: reads the full entity graph and packs it into an archive
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from pydantic.alias_generators import to_camel
import logging

from backup.archive import pack_archive
from backup.entities import EntityRegistry, SHIPMENT_ENTITIES
from backup.store import EntityStore
from core.config import settings
from core.exceptions import StoreUnavailableError
from schemas.backup import Snapshot

logger = logging.getLogger(__name__)

# Scalar parent fields copied into inlined summaries; never the password hash
SUMMARY_FIELDS = ("id", "name", "email", "role", "code", "flag", "color", "shipmentNumber")


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z"""
    return value.isoformat(timespec="milliseconds") + "Z"


def archive_filename(when: Optional[datetime] = None, app_slug: Optional[str] = None) -> str:
    when = when or datetime.utcnow()
    return f"{app_slug or settings.APP_SLUG}-backup-{when.date().isoformat()}.zip"


class SnapshotSerializer:
    """
    Export every row of every entity kind.
    
    All reads share one transaction, so on databases with snapshot
    isolation the result is consistent across kinds. The whole graph is
    held in memory before it is zipped.
    """
    
    def __init__(
        self,
        store: EntityStore,
        registry: EntityRegistry = SHIPMENT_ENTITIES,
        version: Optional[str] = None,
        inline_parents: Optional[bool] = None
    ):
        self.store = store
        self.registry = registry
        self.version = version or settings.BACKUP_FORMAT_VERSION
        self.inline_parents = settings.BACKUP_INLINE_PARENTS if inline_parents is None else inline_parents
    
    async def export(self) -> Snapshot:
        """
        Read the store into a Snapshot.
        
        Raises:
            StoreUnavailableError: If any read fails; no partial snapshot is returned.
        """
        collections: Dict[str, List[Any]] = {}
        current_kind = None
        
        try:
            async with self.store.transaction() as session:
                for kind in self.registry:
                    current_kind = kind.key
                    columns = inspect(kind.model).column_attrs
                    result = await session.execute(
                        select(kind.model).order_by(kind.model.id)
                    )
                    collections[kind.key] = [
                        kind.record.model_validate({c.key: getattr(row, c.key) for c in columns})
                        for row in result.scalars().all()
                    ]
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Export failed while reading {current_kind}: {str(e)}")
            raise StoreUnavailableError(
                "Failed to read the entity store",
                context={"operation": "export", "entity_kind": current_kind},
                original_exception=e
            )
        
        snapshot = Snapshot(
            export_date=datetime.utcnow(),
            version=self.version,
            collections=collections
        )
        logger.info(f"Exported snapshot with {snapshot.total_records} records")
        return snapshot
    
    def build_document(self, snapshot: Snapshot) -> Dict[str, Any]:
        """Full ``backup.json`` document"""
        wire = {
            key: [record.to_wire() for record in snapshot.collections.get(key, [])]
            for key in self.registry.keys()
        }
        
        if self.inline_parents:
            self._inline_parent_summaries(wire)
        
        return {
            **wire,
            "exportDate": format_timestamp(snapshot.export_date),
            "version": snapshot.version,
        }
    
    def build_manifest(self, snapshot: Snapshot) -> Dict[str, Any]:
        """``backup-info.json`` document"""
        return {
            "exportDate": format_timestamp(snapshot.export_date),
            "totalRecords": {
                key: len(snapshot.collections.get(key, []))
                for key in self.registry.keys()
            },
            "version": snapshot.version,
        }
    
    async def export_archive(self) -> bytes:
        snapshot = await self.export()
        return pack_archive(self.build_document(snapshot), self.build_manifest(snapshot))
    
    def _inline_parent_summaries(self, wire: Dict[str, List[Dict[str, Any]]]):
        """
        Attach a read-only summary of each referenced parent.
        
        Restore ignores these keys; they only make the document readable.
        """
        summaries = {
            key: {
                record["id"]: {f: record[f] for f in SUMMARY_FIELDS if f in record}
                for record in records
            }
            for key, records in wire.items()
        }
        
        for kind in self.registry:
            for ref in kind.references:
                if not ref.inline_as:
                    continue
                id_key = to_camel(ref.field)
                parents = summaries[ref.target]
                for record in wire[kind.key]:
                    parent_id = record.get(id_key)
                    record[ref.inline_as] = parents.get(parent_id) if parent_id else None

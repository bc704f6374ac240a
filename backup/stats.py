"""
Entity counts for the current store
"""

from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
import logging

from backup.entities import EntityRegistry, SHIPMENT_ENTITIES
from backup.store import EntityStore
from core.exceptions import StoreUnavailableError
from schemas.backup import EntityCounts

logger = logging.getLogger(__name__)


class StatsReporter:
    """Count rows per entity kind (read only)"""
    
    def __init__(self, store: EntityStore, registry: EntityRegistry = SHIPMENT_ENTITIES):
        self.store = store
        self.registry = registry
    
    async def stats(self) -> EntityCounts:
        counts = {}
        
        try:
            async with self.store.session() as session:
                for kind in self.registry:
                    result = await session.execute(
                        select(func.count()).select_from(kind.model)
                    )
                    counts[kind.key] = result.scalar() or 0
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to count records: {str(e)}")
            raise StoreUnavailableError(
                "Failed to read the entity store",
                context={"operation": "stats"},
                original_exception=e
            )
        
        total = sum(counts.values())
        logger.info(f"Stats: {total} records across {len(counts)} entity kinds")
        
        return EntityCounts(
            counts=counts,
            total_records=total,
            last_updated=datetime.utcnow()
        )

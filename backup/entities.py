"""
Entity registry and foreign-key dependency graph.

Every entity kind that takes part in a snapshot is declared once here:
its wire key in ``backup.json``, its ORM model, its record schema and the
foreign keys it holds. Insert order (parents before children) and delete
order (children before parents) are both derived from these declarations.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Type
import logging

from core.exceptions import EntityGraphError
from models import (
    Branch,
    Country,
    ShipmentStatus,
    User,
    Shipment,
    ShipmentHistory,
    TrackingEvent,
    Invoice,
    Waybill,
    LogEntry,
)
from schemas.records import (
    SnapshotRecord,
    BranchRecord,
    CountryRecord,
    ShipmentStatusRecord,
    UserRecord,
    ShipmentRecord,
    ShipmentHistoryRecord,
    TrackingEventRecord,
    InvoiceRecord,
    WaybillRecord,
    LogEntryRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForeignKeyRef:
    """
    A foreign key column on a child kind.
    
    Attributes:
        field: Record attribute holding the parent id (snake_case)
        target: Wire key of the parent kind
        required: False when the column is nullable
        inline_as: Wire name of the cosmetic parent summary added on export
    """
    field: str
    target: str
    required: bool = True
    inline_as: Optional[str] = None


@dataclass(frozen=True)
class EntityKind:
    key: str
    model: type
    record: Type[SnapshotRecord]
    references: Tuple[ForeignKeyRef, ...] = field(default_factory=tuple)
    
    @property
    def parents(self) -> List[str]:
        return [ref.target for ref in self.references]


class EntityRegistry:
    """
    Ordered collection of entity kinds with derived write orders.
    
    Raises:
        EntityGraphError: If a reference points to an undeclared kind or the
            references form a cycle.
    """
    
    def __init__(self, kinds: List[EntityKind]):
        self.kinds: Dict[str, EntityKind] = {}
        for kind in kinds:
            if kind.key in self.kinds:
                raise EntityGraphError(
                    "Entity kind declared twice",
                    context={"entity_kind": kind.key}
                )
            self.kinds[kind.key] = kind
        
        for kind in kinds:
            for ref in kind.references:
                if ref.target not in self.kinds:
                    raise EntityGraphError(
                        "Foreign key references an undeclared entity kind",
                        context={"entity_kind": kind.key, "field": ref.field, "target": ref.target}
                    )
        
        self._insert_order = self._topological_order()
        logger.debug(f"Insert order: {', '.join(self._insert_order)}")
    
    def _topological_order(self) -> List[str]:
        """Kahn's algorithm; ties go to the kind declared first."""
        declared = list(self.kinds)
        remaining = {
            key: {p for p in self.kinds[key].parents if p != key}
            for key in declared
        }
        order: List[str] = []
        
        while remaining:
            ready = [key for key in declared if key in remaining and not remaining[key]]
            if not ready:
                raise EntityGraphError(
                    "Foreign key graph contains a cycle",
                    context={"unresolved": sorted(remaining)}
                )
            chosen = ready[0]
            order.append(chosen)
            del remaining[chosen]
            for parents in remaining.values():
                parents.discard(chosen)
        
        return order
    
    def insert_order(self) -> List[EntityKind]:
        return [self.kinds[key] for key in self._insert_order]
    
    def delete_order(self) -> List[EntityKind]:
        return [self.kinds[key] for key in reversed(self._insert_order)]
    
    def keys(self) -> List[str]:
        return list(self.kinds)
    
    def __getitem__(self, key: str) -> EntityKind:
        return self.kinds[key]
    
    def __iter__(self):
        return iter(self.kinds.values())
    
    def __len__(self) -> int:
        return len(self.kinds)


SHIPMENT_ENTITIES = EntityRegistry([
    EntityKind("branches", Branch, BranchRecord),
    EntityKind("countries", Country, CountryRecord),
    EntityKind("shipmentStatuses", ShipmentStatus, ShipmentStatusRecord),
    EntityKind("users", User, UserRecord, (
        ForeignKeyRef("branch_id", "branches", required=False, inline_as="branch"),
    )),
    EntityKind("shipments", Shipment, ShipmentRecord, (
        ForeignKeyRef("branch_id", "branches", inline_as="branch"),
        ForeignKeyRef("created_by_id", "users", inline_as="createdBy"),
        ForeignKeyRef("status_id", "shipmentStatuses", inline_as="status"),
        ForeignKeyRef("origin_country_id", "countries", inline_as="originCountry"),
        ForeignKeyRef("destination_country_id", "countries", inline_as="destinationCountry"),
    )),
    EntityKind("shipmentHistories", ShipmentHistory, ShipmentHistoryRecord, (
        ForeignKeyRef("shipment_id", "shipments"),
        ForeignKeyRef("user_id", "users", inline_as="user"),
        ForeignKeyRef("status_id", "shipmentStatuses", required=False, inline_as="status"),
    )),
    EntityKind("trackingEvents", TrackingEvent, TrackingEventRecord, (
        ForeignKeyRef("shipment_id", "shipments"),
        ForeignKeyRef("status_id", "shipmentStatuses", inline_as="status"),
        ForeignKeyRef("updated_by_id", "users", inline_as="updatedBy"),
    )),
    EntityKind("invoices", Invoice, InvoiceRecord, (
        ForeignKeyRef("shipment_id", "shipments"),
    )),
    EntityKind("waybills", Waybill, WaybillRecord, (
        ForeignKeyRef("shipment_id", "shipments"),
    )),
    EntityKind("logEntries", LogEntry, LogEntryRecord, (
        ForeignKeyRef("user_id", "users", inline_as="user"),
        ForeignKeyRef("shipment_id", "shipments", required=False),
    )),
])

# Collections that must be present in any snapshot document
REQUIRED_COLLECTIONS = ("users", "branches", "countries")

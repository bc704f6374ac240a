"""
Pydantic schemas for snapshot records (one per entity kind).

Records travel in ``backup.json`` with camelCase keys (``branchId``,
``createdAt``) and map one-to-one onto ORM attributes in snake_case.
Unknown keys are ignored, which is how inlined parent summaries such as
``"branch": {...}`` on a user are dropped on the way back in: only the flat
``...Id`` columns are trusted.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from models.base import (
    UserRole,
    CountryType,
    PaymentMethod,
    PaymentStatus,
    InvoiceStatus,
    LogType,
)


def naive_utc(value: datetime) -> datetime:
    """Drop the offset of an aware datetime after converting it to UTC"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class SnapshotRecord(BaseModel):
    """Base for every record kind"""
    id: str = Field(..., min_length=1, max_length=36)
    
    def to_row(self) -> Dict[str, Any]:
        """
        Column values for a bulk insert.
        
        Timestamps are stored naive in UTC, so aware values coming from
        ``...Z`` strings are converted first.
        """
        row = self.model_dump()
        for key, value in row.items():
            if isinstance(value, datetime):
                row[key] = naive_utc(value)
        return row
    
    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys"""
        return self.model_dump(mode="json", by_alias=True)
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        extra = "ignore"


# ============================================================================
# Root entities
# ============================================================================

class BranchRecord(SnapshotRecord):
    name: str
    location: str
    manager: str
    email: str
    phone: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class CountryRecord(SnapshotRecord):
    name: str
    code: str = Field(..., min_length=1, max_length=10)
    flag: Optional[str] = None
    flag_image: Optional[str] = None
    type: CountryType = CountryType.BOTH
    is_active: bool = True
    created_at: datetime


class ShipmentStatusRecord(SnapshotRecord):
    name: str
    color: str
    description: Optional[str] = None
    order: int = 0
    is_active: bool = True
    created_at: datetime


# ============================================================================
# Dependent entities
# ============================================================================

class UserRecord(SnapshotRecord):
    name: str
    email: str
    password: str
    role: UserRole
    branch_id: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class ShipmentRecord(SnapshotRecord):
    shipment_number: str
    branch_id: str
    created_by_id: str
    status_id: str
    origin_country_id: str
    destination_country_id: str
    
    sender_name: str
    sender_phone: str
    sender_email: Optional[str] = None
    sender_address: str
    recipient_name: str
    recipient_phone: str
    recipient_email: Optional[str] = None
    recipient_address: str
    
    weight: float
    number_of_boxes: int = 1
    content: str
    
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY
    shipping_cost: Optional[float] = None
    paid_amount: Optional[float] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    
    receiving_date: datetime
    expected_delivery_date: datetime
    actual_delivery_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ShipmentHistoryRecord(SnapshotRecord):
    shipment_id: str
    user_id: str
    status_id: Optional[str] = None
    action: str
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    notes: Optional[str] = None
    timestamp: datetime


class TrackingEventRecord(SnapshotRecord):
    shipment_id: str
    status_id: str
    updated_by_id: str
    location: Optional[str] = None
    description: str
    notes: Optional[str] = None
    event_time: datetime
    created_at: datetime


class InvoiceRecord(SnapshotRecord):
    shipment_id: str
    invoice_number: str
    total_amount: float
    tax_amount: Optional[float] = None
    discount_amount: Optional[float] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    issue_date: datetime
    due_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class WaybillRecord(SnapshotRecord):
    shipment_id: str
    waybill_number: str
    carrier_name: Optional[str] = None
    carrier_ref_number: Optional[str] = None
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LogEntryRecord(SnapshotRecord):
    type: LogType
    action: str
    details: str
    user_id: str
    shipment_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime

"""
SQLAlchemy ORM models for database tables.

This package defines the shipment-office schema using SQLAlchemy ORM models:

Models:
    base: Declarative Base, id generator and shared enums
    reference_data: Branch, Country, ShipmentStatus (no foreign keys)
    user: User (optional Branch)
    shipment: Shipment, ShipmentHistory, TrackingEvent
    documents: Invoice, Waybill (one-to-one with Shipment)
    log_entry: LogEntry (User, optional Shipment)

Usage:
    from models import Branch, Shipment
    from models.base import UserRole, CountryType

Relationships:
    - Branch → User (optional), Branch → Shipment
    - User → Shipment (creator), ShipmentHistory, TrackingEvent, LogEntry
    - ShipmentStatus → Shipment, ShipmentHistory (optional), TrackingEvent
    - Country → Shipment (origin and destination)
    - Shipment → ShipmentHistory, TrackingEvent, Invoice, Waybill, LogEntry (optional)
"""

from models.base import (
    Base,
    UserRole,
    CountryType,
    PaymentMethod,
    PaymentStatus,
    InvoiceStatus,
    LogType,
)
from models.reference_data import Branch, Country, ShipmentStatus
from models.user import User
from models.shipment import Shipment, ShipmentHistory, TrackingEvent
from models.documents import Invoice, Waybill
from models.log_entry import LogEntry

__all__ = [
    "Base",
    "UserRole",
    "CountryType",
    "PaymentMethod",
    "PaymentStatus",
    "InvoiceStatus",
    "LogType",
    "Branch",
    "Country",
    "ShipmentStatus",
    "User",
    "Shipment",
    "ShipmentHistory",
    "TrackingEvent",
    "Invoice",
    "Waybill",
    "LogEntry",
]

from sqlalchemy import Column, String, Float, DateTime, Enum, Text, ForeignKey
from models.base import Base, InvoiceStatus, generate_id, utcnow


class Invoice(Base):
    """Invoice issued for a shipment (at most one per shipment)."""
    __tablename__ = "invoices"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    shipment_id = Column(String(36), ForeignKey("shipments.id"), nullable=False, unique=True)
    invoice_number = Column(String(50), nullable=False, unique=True)
    
    total_amount = Column(Float, nullable=False)
    tax_amount = Column(Float, nullable=True)
    discount_amount = Column(Float, nullable=True)
    status = Column(Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.DRAFT)
    
    issue_date = Column(DateTime, nullable=False, default=utcnow)
    due_date = Column(DateTime, nullable=True)
    paid_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Waybill(Base):
    """Carrier waybill for a shipment (at most one per shipment)."""
    __tablename__ = "waybills"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    shipment_id = Column(String(36), ForeignKey("shipments.id"), nullable=False, unique=True)
    waybill_number = Column(String(50), nullable=False, unique=True)
    
    carrier_name = Column(String(200), nullable=True)
    carrier_ref_number = Column(String(100), nullable=True)
    departure_time = Column(DateTime, nullable=True)
    arrival_time = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

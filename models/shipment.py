from sqlalchemy import Column, String, Integer, Float, DateTime, Enum, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base, PaymentMethod, PaymentStatus, generate_id, utcnow


class Shipment(Base):
    """
    A parcel consignment created by a branch.
    
    All five references (branch, creator, status, origin and destination
    country) are mandatory.
    """
    __tablename__ = "shipments"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    shipment_number = Column(String(30), nullable=False, unique=True, index=True)  # e.g. FEN000000001
    
    # References
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=False, index=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    status_id = Column(String(36), ForeignKey("shipment_statuses.id"), nullable=False, index=True)
    origin_country_id = Column(String(36), ForeignKey("countries.id"), nullable=False)
    destination_country_id = Column(String(36), ForeignKey("countries.id"), nullable=False)
    
    # Sender
    sender_name = Column(String(200), nullable=False)
    sender_phone = Column(String(50), nullable=False)
    sender_email = Column(String(255), nullable=True)
    sender_address = Column(Text, nullable=False)
    
    # Recipient
    recipient_name = Column(String(200), nullable=False)
    recipient_phone = Column(String(50), nullable=False)
    recipient_email = Column(String(255), nullable=True)
    recipient_address = Column(Text, nullable=False)
    
    # Parcel
    weight = Column(Float, nullable=False)
    number_of_boxes = Column(Integer, nullable=False, default=1)
    content = Column(Text, nullable=False)
    
    # Payment
    payment_method = Column(Enum(PaymentMethod), nullable=False, default=PaymentMethod.CASH_ON_DELIVERY)
    shipping_cost = Column(Float, nullable=True)
    paid_amount = Column(Float, nullable=True)
    payment_status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    
    # Dates
    receiving_date = Column(DateTime, nullable=False)
    expected_delivery_date = Column(DateTime, nullable=False)
    actual_delivery_date = Column(DateTime, nullable=True)
    
    notes = Column(Text, nullable=True)
    
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    
    # Relationships
    branch = relationship("Branch")
    created_by = relationship("User")
    status = relationship("ShipmentStatus")
    origin_country = relationship("Country", foreign_keys=[origin_country_id])
    destination_country = relationship("Country", foreign_keys=[destination_country_id])
    
    __table_args__ = (
        Index("idx_shipment_branch_created", "branch_id", "created_at"),
    )


class ShipmentHistory(Base):
    """Field-level change history of a shipment."""
    __tablename__ = "shipment_histories"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    
    shipment_id = Column(String(36), ForeignKey("shipments.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    status_id = Column(String(36), ForeignKey("shipment_statuses.id"), nullable=True)
    
    action = Column(String(200), nullable=False)
    field = Column(String(100), nullable=True)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    
    timestamp = Column(DateTime, nullable=False, default=utcnow)


class TrackingEvent(Base):
    """Public tracking timeline entry, written on every status change."""
    __tablename__ = "tracking_events"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    
    shipment_id = Column(String(36), ForeignKey("shipments.id"), nullable=False, index=True)
    status_id = Column(String(36), ForeignKey("shipment_statuses.id"), nullable=False)
    updated_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    
    location = Column(String(500), nullable=True)
    description = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    
    event_time = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)

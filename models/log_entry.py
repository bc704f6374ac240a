from sqlalchemy import Column, String, DateTime, Enum, Text, ForeignKey, Index
from models.base import Base, LogType, generate_id, utcnow


class LogEntry(Base):
    """
    Audit trail of user and system actions.
    
    The shipment reference is optional: system and user actions are not
    tied to a shipment.
    """
    __tablename__ = "log_entries"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    
    type = Column(Enum(LogType), nullable=False, index=True)
    action = Column(String(200), nullable=False)
    details = Column(Text, nullable=False)
    
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    shipment_id = Column(String(36), ForeignKey("shipments.id"), nullable=True)
    
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    
    timestamp = Column(DateTime, nullable=False, default=utcnow)
    
    __table_args__ = (
        Index("idx_log_type_timestamp", "type", "timestamp"),
    )

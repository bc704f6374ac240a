from sqlalchemy import Column, String, Integer, DateTime, Enum, Boolean, Text
from models.base import Base, CountryType, generate_id, utcnow


class Branch(Base):
    """
    A logistics office. Branch users only see shipments of their own branch.
    """
    __tablename__ = "branches"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    
    name = Column(String(200), nullable=False)
    location = Column(String(500), nullable=False)
    manager = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    
    is_active = Column(Boolean, nullable=False, default=True)
    
    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Country(Base):
    """Country a shipment can leave from and/or be delivered to."""
    __tablename__ = "countries"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    
    name = Column(String(200), nullable=False)
    code = Column(String(10), nullable=False, unique=True, index=True)  # ISO alpha-2, upper case
    flag = Column(String(50), nullable=True)  # Emoji flag
    flag_image = Column(Text, nullable=True)
    type = Column(Enum(CountryType), nullable=False, default=CountryType.BOTH)
    
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class ShipmentStatus(Base):
    """
    User-defined shipment status (e.g. "In warehouse", "Delivered").
    
    `order` controls the display sequence; 0 is used for terminal states
    such as cancelled.
    """
    __tablename__ = "shipment_statuses"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    
    name = Column(String(200), nullable=False)
    color = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

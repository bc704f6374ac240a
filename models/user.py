from sqlalchemy import Column, String, DateTime, Enum, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base, UserRole, generate_id, utcnow


class User(Base):
    """
    Application user.
    
    Managers see every branch and usually have no branch of their own;
    branch users are attached to exactly one branch.
    """
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True, default=generate_id)
    
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(Enum(UserRole), nullable=False, default=UserRole.BRANCH)
    
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=True, index=True)
    
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    
    # Relationships
    branch = relationship("Branch")

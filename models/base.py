from datetime import datetime
from sqlalchemy.orm import declarative_base
import enum
import uuid

Base = declarative_base()


def generate_id() -> str:
    """Primary keys are opaque strings so they survive export/restore verbatim."""
    return str(uuid.uuid4())


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(str, enum.Enum):
    """User role (visibility scope)"""
    MANAGER = "MANAGER"
    BRANCH = "BRANCH"


class CountryType(str, enum.Enum):
    """Whether a country can be a shipment origin, destination or both"""
    ORIGIN = "ORIGIN"
    DESTINATION = "DESTINATION"
    BOTH = "BOTH"


class PaymentMethod(str, enum.Enum):
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
    PREPAID = "PREPAID"
    CREDIT_CARD = "CREDIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class InvoiceStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class LogType(str, enum.Enum):
    """Audit log category"""
    SHIPMENT_UPDATE = "SHIPMENT_UPDATE"
    SYSTEM_ACTION = "SYSTEM_ACTION"
    USER_ACTION = "USER_ACTION"


def utcnow() -> datetime:
    return datetime.utcnow()

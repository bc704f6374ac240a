"""
Seed the database with demo countries, statuses, branches, users and shipments.

Existing rows are removed first (children before parents).
"""

import asyncio
import logging
import sys
import os
from datetime import datetime, timedelta

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

import bcrypt
from sqlalchemy import delete

from backup.entities import SHIPMENT_ENTITIES
from backup.store import EntityStore
from core.config import settings
from core.database import build_engine
from core.logging import setup_logging
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
    UserRole,
    CountryType,
    PaymentMethod,
    PaymentStatus,
    InvoiceStatus,
    LogType,
)

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "123456"

COUNTRIES = [
    ("Saudi Arabia", "SA", "🇸🇦"),
    ("United Arab Emirates", "AE", "🇦🇪"),
    ("Kuwait", "KW", "🇰🇼"),
    ("Qatar", "QA", "🇶🇦"),
    ("Bahrain", "BH", "🇧🇭"),
    ("Oman", "OM", "🇴🇲"),
]

STATUSES = [
    ("In warehouse", "#6366f1", "Shipment arrived at the warehouse", 1),
    ("In transit", "#f59e0b", "Shipment is on its way to the destination", 2),
    ("Arrived at destination", "#8b5cf6", "Shipment reached the destination city", 3),
    ("Delivered", "#10b981", "Shipment handed over to the recipient", 4),
    ("Cancelled", "#ef4444", "Shipment was cancelled", 0),
]

BRANCHES = [
    ("Riyadh Branch", "Riyadh, Saudi Arabia", "Ahmed Mohammed", "riyadh@fenertravel.com", "+966112345678"),
    ("Jeddah Branch", "Jeddah, Saudi Arabia", "Fatima Ali", "jeddah@fenertravel.com", "+966122345678"),
    ("Dubai Branch", "Dubai, United Arab Emirates", "Mohammed Khaled", "dubai@fenertravel.com", "+971501234567"),
]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


async def seed_database():
    engine = build_engine(settings.DATABASE_URL)
    store = EntityStore(engine)
    now = datetime.utcnow()

    try:
        async with store.transaction() as session:
            for kind in SHIPMENT_ENTITIES.delete_order():
                await session.execute(delete(kind.model))

            countries = [
                Country(name=name, code=code, flag=flag, type=CountryType.BOTH)
                for name, code, flag in COUNTRIES
            ]
            statuses = [
                ShipmentStatus(name=name, color=color, description=description, order=order)
                for name, color, description, order in STATUSES
            ]
            branches = [
                Branch(name=name, location=location, manager=manager, email=email, phone=phone)
                for name, location, manager, email, phone in BRANCHES
            ]
            session.add_all(countries + statuses + branches)
            await session.flush()
            logger.info(f"Created {len(countries)} countries, {len(statuses)} statuses, {len(branches)} branches")

            hashed = hash_password(DEMO_PASSWORD)
            admin = User(name="System Manager", email="admin@fenertravel.com", password=hashed, role=UserRole.MANAGER)
            branch_users = [
                User(
                    name=branch.manager,
                    email=f"{branch.email.split('@')[0]}.user@fenertravel.com",
                    password=hashed,
                    role=UserRole.BRANCH,
                    branch=branch
                )
                for branch in branches
            ]
            session.add_all([admin] + branch_users)
            await session.flush()
            logger.info(f"Created {1 + len(branch_users)} users")

            shipments = []
            for number, (branch, user) in enumerate(zip(branches, branch_users), start=1):
                shipment = Shipment(
                    shipment_number=f"FEN{number:09d}",
                    branch_id=branch.id,
                    created_by_id=user.id,
                    status_id=statuses[0].id,
                    origin_country_id=countries[0].id,
                    destination_country_id=countries[number % len(countries)].id,
                    sender_name=f"Sender {number}",
                    sender_phone="+966500000000",
                    sender_address=branch.location,
                    recipient_name=f"Recipient {number}",
                    recipient_phone="+971500000000",
                    recipient_address="Destination address",
                    weight=2.5 * number,
                    number_of_boxes=number,
                    content="Clothes",
                    payment_method=PaymentMethod.CASH_ON_DELIVERY,
                    shipping_cost=50.0 * number,
                    paid_amount=0,
                    payment_status=PaymentStatus.PENDING,
                    receiving_date=now,
                    expected_delivery_date=now + timedelta(days=7)
                )
                shipments.append(shipment)
            session.add_all(shipments)
            await session.flush()

            for shipment, user in zip(shipments, branch_users):
                session.add(TrackingEvent(
                    shipment_id=shipment.id,
                    status_id=statuses[0].id,
                    updated_by_id=user.id,
                    location=shipment.sender_address,
                    description="Shipment received at the branch"
                ))
                session.add(ShipmentHistory(
                    shipment_id=shipment.id,
                    user_id=user.id,
                    status_id=statuses[0].id,
                    action="Shipment created"
                ))
                session.add(LogEntry(
                    type=LogType.SHIPMENT_UPDATE,
                    action="Create shipment",
                    details=f"Shipment {shipment.shipment_number} created",
                    user_id=user.id,
                    shipment_id=shipment.id
                ))

            first = shipments[0]
            session.add(Invoice(
                shipment_id=first.id,
                invoice_number=f"INV-{first.shipment_number}",
                total_amount=first.shipping_cost,
                status=InvoiceStatus.SENT,
                issue_date=now
            ))
            session.add(Waybill(
                shipment_id=first.id,
                waybill_number=f"WB-{first.shipment_number}",
                carrier_name="FenerTravel Cargo"
            ))
            session.add(LogEntry(
                type=LogType.SYSTEM_ACTION,
                action="Seed database",
                details="Demo data created",
                user_id=admin.id
            ))
            logger.info(f"Created {len(shipments)} shipments with tracking, history and documents")

        logger.info(f"Seeding completed. Demo password for every user: {DEMO_PASSWORD}")
    finally:
        await store.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed_database())

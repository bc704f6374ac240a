"""
Pytest configuration and fixtures
"""

import asyncio
import io
import struct
import zipfile
import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from sqlalchemy import delete
from typing import AsyncGenerator

from backup.entities import SHIPMENT_ENTITIES
from backup.store import EntityStore
from core.database import build_engine
from models import (
    Base,
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

BASE_TIME = datetime(2024, 1, 15, 10, 0, 0)

# Rows created by seed_graph, per wire key
SEEDED_COUNTS = {
    "branches": 2,
    "countries": 2,
    "shipmentStatuses": 2,
    "users": 3,
    "shipments": 2,
    "shipmentHistories": 2,
    "trackingEvents": 2,
    "invoices": 1,
    "waybills": 1,
    "logEntries": 2,
}


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


async def create_schema(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_graph(store: EntityStore):
    """Insert a small graph touching every entity kind and every FK edge."""
    async with store.transaction() as session:
        session.add_all([
            Branch(id="b-riyadh", name="Riyadh Branch", location="Riyadh", manager="Ahmed",
                   email="riyadh@example.com", phone="+966112345678",
                   created_at=BASE_TIME, updated_at=BASE_TIME),
            Branch(id="b-dubai", name="Dubai Branch", location="Dubai", manager="Khaled",
                   email="dubai@example.com", is_active=False,
                   created_at=BASE_TIME, updated_at=BASE_TIME),
            Country(id="c-sa", name="Saudi Arabia", code="SA", flag="🇸🇦",
                    type=CountryType.BOTH, created_at=BASE_TIME),
            Country(id="c-ae", name="United Arab Emirates", code="AE",
                    type=CountryType.DESTINATION, created_at=BASE_TIME),
            ShipmentStatus(id="s-warehouse", name="In warehouse", color="#6366f1",
                           description="Arrived at the warehouse", order=1, created_at=BASE_TIME),
            ShipmentStatus(id="s-delivered", name="Delivered", color="#10b981",
                           order=4, created_at=BASE_TIME),
        ])
        await session.flush()

        session.add_all([
            User(id="u-admin", name="Admin", email="admin@example.com", password="$2b$10$hash",
                 role=UserRole.MANAGER, branch_id=None, created_at=BASE_TIME, updated_at=BASE_TIME),
            User(id="u-riyadh", name="Riyadh User", email="riyadh.user@example.com", password="$2b$10$hash",
                 role=UserRole.BRANCH, branch_id="b-riyadh", created_at=BASE_TIME, updated_at=BASE_TIME),
            User(id="u-dubai", name="Dubai User", email="dubai.user@example.com", password="$2b$10$hash",
                 role=UserRole.BRANCH, branch_id="b-dubai", created_at=BASE_TIME, updated_at=BASE_TIME),
        ])
        await session.flush()

        session.add_all([
            Shipment(id="sh-1", shipment_number="FEN000000001", branch_id="b-riyadh",
                     created_by_id="u-riyadh", status_id="s-warehouse",
                     origin_country_id="c-sa", destination_country_id="c-ae",
                     sender_name="Sender One", sender_phone="+966500000001", sender_address="Riyadh",
                     recipient_name="Recipient One", recipient_phone="+971500000001",
                     recipient_email="one@example.com", recipient_address="Dubai",
                     weight=12.5, number_of_boxes=2, content="Clothes",
                     payment_method=PaymentMethod.CASH_ON_DELIVERY, shipping_cost=150.0,
                     paid_amount=0.0, payment_status=PaymentStatus.PENDING,
                     receiving_date=BASE_TIME, expected_delivery_date=BASE_TIME + timedelta(days=7),
                     created_at=BASE_TIME, updated_at=BASE_TIME),
            Shipment(id="sh-2", shipment_number="FEN000000002", branch_id="b-dubai",
                     created_by_id="u-dubai", status_id="s-delivered",
                     origin_country_id="c-ae", destination_country_id="c-sa",
                     sender_name="Sender Two", sender_phone="+971500000002", sender_address="Dubai",
                     recipient_name="Recipient Two", recipient_phone="+966500000002",
                     recipient_address="Riyadh", weight=3.0, number_of_boxes=1, content="Books",
                     payment_method=PaymentMethod.BANK_TRANSFER, shipping_cost=80.0,
                     paid_amount=80.0, payment_status=PaymentStatus.PAID,
                     receiving_date=BASE_TIME, expected_delivery_date=BASE_TIME + timedelta(days=5),
                     actual_delivery_date=BASE_TIME + timedelta(days=4, hours=3, microseconds=250),
                     notes="Fragile", created_at=BASE_TIME, updated_at=BASE_TIME),
        ])
        await session.flush()

        session.add_all([
            ShipmentHistory(id="h-1", shipment_id="sh-1", user_id="u-riyadh", status_id="s-warehouse",
                            action="Shipment created", timestamp=BASE_TIME),
            ShipmentHistory(id="h-2", shipment_id="sh-2", user_id="u-dubai", status_id=None,
                            action="Field updated", field="notes", old_value=None, new_value="Fragile",
                            timestamp=BASE_TIME + timedelta(hours=1)),
            TrackingEvent(id="t-1", shipment_id="sh-1", status_id="s-warehouse", updated_by_id="u-riyadh",
                          location="Riyadh", description="Received at branch",
                          event_time=BASE_TIME, created_at=BASE_TIME),
            TrackingEvent(id="t-2", shipment_id="sh-2", status_id="s-delivered", updated_by_id="u-admin",
                          description="Delivered", event_time=BASE_TIME + timedelta(days=4),
                          created_at=BASE_TIME + timedelta(days=4)),
            Invoice(id="inv-1", shipment_id="sh-2", invoice_number="INV-0001", total_amount=80.0,
                    tax_amount=12.0, status=InvoiceStatus.PAID, issue_date=BASE_TIME,
                    paid_date=BASE_TIME + timedelta(days=1), created_at=BASE_TIME, updated_at=BASE_TIME),
            Waybill(id="wb-1", shipment_id="sh-1", waybill_number="WB-0001", carrier_name="Fener Cargo",
                    departure_time=BASE_TIME + timedelta(days=1), created_at=BASE_TIME, updated_at=BASE_TIME),
            LogEntry(id="l-1", type=LogType.SYSTEM_ACTION, action="Create branch",
                     details="Branch Riyadh created", user_id="u-admin", shipment_id=None,
                     ip_address="127.0.0.1", timestamp=BASE_TIME),
            LogEntry(id="l-2", type=LogType.SHIPMENT_UPDATE, action="Create shipment",
                     details="Shipment FEN000000001 created", user_id="u-riyadh", shipment_id="sh-1",
                     user_agent="pytest", timestamp=BASE_TIME),
        ])


def corrupt_entry_data(archive: bytes, entry: str) -> bytes:
    """Invert every compressed byte of one entry, leaving the zip headers intact"""
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        info = zf.getinfo(entry)

    # Local file header: 30 fixed bytes, then the name and extra field
    offset = info.header_offset
    name_len, extra_len = struct.unpack("<HH", archive[offset + 26:offset + 30])
    start = offset + 30 + name_len + extra_len

    data = bytearray(archive)
    for i in range(start, start + info.compress_size):
        data[i] ^= 0xFF
    return bytes(data)


async def wipe(store: EntityStore):
    async with store.transaction() as session:
        for kind in SHIPMENT_ENTITIES.delete_order():
            await session.execute(delete(kind.model))


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite database with foreign keys enforced"""
    engine = build_engine(sqlite_url(tmp_path))
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def store(test_engine) -> EntityStore:
    return EntityStore(test_engine)


@pytest_asyncio.fixture(scope="function")
async def seeded_store(store) -> EntityStore:
    await seed_graph(store)
    return store


@pytest_asyncio.fixture(scope="function")
async def db_session(store) -> AsyncGenerator:
    async with store.session() as session:
        yield session


@pytest.fixture
def sync_store(tmp_path):
    """
    Store for synchronous tests (TestClient runs its own event loop).

    Each asyncio.run opens fresh connections; the engine uses NullPool so
    nothing is shared between loops.
    """
    engine = build_engine(sqlite_url(tmp_path))
    asyncio.run(create_schema(engine))
    store = EntityStore(engine)

    yield store

    asyncio.run(engine.dispose())

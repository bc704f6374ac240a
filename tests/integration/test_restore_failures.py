"""
Integration tests for restore failures and store outages.

Every failing restore must leave the store exactly as it was.
"""

import copy
import pytest
from sqlalchemy.exc import IntegrityError

from backup.archive import MANIFEST_ENTRY, SNAPSHOT_ENTRY, pack_archive, read_json_entry
from backup.restorer import SnapshotRestorer
from backup.serializer import SnapshotSerializer
from backup.stats import StatsReporter
from backup.store import EntityStore
from core.database import build_engine
from core.exceptions import (
    InvalidSnapshotFormatError,
    MalformedArchiveError,
    RestoreTransactionFailedError,
    StoreUnavailableError,
)
from models import User, UserRole
from tests.conftest import BASE_TIME, SEEDED_COUNTS


async def export_wire(store):
    snapshot = await SnapshotSerializer(store).export()
    return {key: [record.to_wire() for record in records] for key, records in snapshot.collections.items()}


async def exported_document(store):
    archive = await SnapshotSerializer(store).export_archive()
    return read_json_entry(archive, SNAPSHOT_ENTRY), read_json_entry(archive, MANIFEST_ENTRY)


@pytest.mark.asyncio
async def test_foreign_keys_are_enforced(store):
    """Sanity check: the test database rejects dangling references"""
    with pytest.raises(IntegrityError):
        async with store.transaction() as session:
            session.add(User(
                id="u-orphan", name="Orphan", email="orphan@example.com", password="x",
                role=UserRole.BRANCH, branch_id="no-such-branch",
                created_at=BASE_TIME, updated_at=BASE_TIME
            ))


@pytest.mark.asyncio
async def test_constraint_violation_rolls_back_everything(seeded_store):
    before = await export_wire(seeded_store)
    document, manifest = await exported_document(seeded_store)

    # Passes validation: an extra branch and two shipments sharing a number.
    # The unique constraint only fires when shipments are inserted, after the
    # deletes and the earlier kinds have already been written.
    extra_branch = copy.deepcopy(document["branches"][0])
    extra_branch["id"] = "b-extra"
    extra_branch["name"] = "Extra Branch"
    document["branches"].append(extra_branch)
    document["shipments"][1]["shipmentNumber"] = document["shipments"][0]["shipmentNumber"]

    with pytest.raises(RestoreTransactionFailedError) as exc_info:
        await SnapshotRestorer(seeded_store).restore(pack_archive(document, manifest))

    assert exc_info.value.context["phase"] == "insert"
    assert exc_info.value.context["entity_kind"] == "shipments"
    assert isinstance(exc_info.value.original_exception, IntegrityError)

    assert await export_wire(seeded_store) == before


@pytest.mark.asyncio
async def test_malformed_archive_leaves_store_unchanged(seeded_store):
    reporter = StatsReporter(seeded_store)
    before = await reporter.stats()

    with pytest.raises(MalformedArchiveError):
        await SnapshotRestorer(seeded_store).restore(b"definitely not a zip archive")

    after = await reporter.stats()
    assert after.counts == before.counts == SEEDED_COUNTS


@pytest.mark.asyncio
async def test_empty_snapshot_document_is_rejected(seeded_store):
    _, manifest = await exported_document(seeded_store)
    before = await export_wire(seeded_store)

    # A valid manifest does not make up for an empty document
    archive = pack_archive({}, manifest)
    with pytest.raises(InvalidSnapshotFormatError):
        await SnapshotRestorer(seeded_store).restore(archive)

    assert await export_wire(seeded_store) == before


@pytest.mark.asyncio
async def test_dangling_reference_is_rejected_before_writing(seeded_store):
    before = await export_wire(seeded_store)
    document, manifest = await exported_document(seeded_store)
    document["shipments"][0]["statusId"] = "no-such-status"

    with pytest.raises(InvalidSnapshotFormatError) as exc_info:
        await SnapshotRestorer(seeded_store).restore(pack_archive(document, manifest))

    assert exc_info.value.context["entity_kind"] == "shipments"
    assert exc_info.value.context["field"] == "statusId"
    assert await export_wire(seeded_store) == before


@pytest.mark.asyncio
async def test_invalid_record_is_rejected_before_writing(seeded_store):
    before = await export_wire(seeded_store)
    document, manifest = await exported_document(seeded_store)
    del document["trackingEvents"][1]["description"]

    with pytest.raises(InvalidSnapshotFormatError) as exc_info:
        await SnapshotRestorer(seeded_store).restore(pack_archive(document, manifest))

    assert exc_info.value.context["entity_kind"] == "trackingEvents"
    assert exc_info.value.context["record_index"] == 1
    assert await export_wire(seeded_store) == before


@pytest.mark.asyncio
async def test_unavailable_store(tmp_path):
    """A database that cannot be opened surfaces as StoreUnavailableError"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'store.db'}")
    store = EntityStore(engine)

    try:
        with pytest.raises(StoreUnavailableError) as export_error:
            await SnapshotSerializer(store).export()
        with pytest.raises(StoreUnavailableError):
            await StatsReporter(store).stats()

        assert export_error.value.context["operation"] == "export"
        assert await store.ping() is False
    finally:
        await store.dispose()

"""
Pydantic schemas for data validation and serialization.

Schemas:
    records: One validated record model per entity kind, used at the
        snapshot parsing boundary and for JSON output
    backup: Manifest, operation results and API response envelopes

Usage:
    from schemas.records import ShipmentRecord
    from schemas.backup import BackupInfo, RestoreReport

Example:
    # Validate a record coming from backup.json (camelCase keys)
    record = UserRecord.model_validate(payload)
    
    # Convert back for a bulk insert (snake_case ORM attributes)
    row = record.to_row()
"""

__all__ = [
    "SnapshotRecord",
    "BranchRecord",
    "CountryRecord",
    "ShipmentStatusRecord",
    "UserRecord",
    "ShipmentRecord",
    "ShipmentHistoryRecord",
    "TrackingEventRecord",
    "InvoiceRecord",
    "WaybillRecord",
    "LogEntryRecord",
    "BackupInfo",
    "Snapshot",
    "RestoreReport",
    "EntityCounts",
]

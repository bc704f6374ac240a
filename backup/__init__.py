"""
Backup subsystem: export, preview, restore and count the entity graph.

Modules:
    entities: Entity kinds, foreign-key edges and derived write orders
    store: Entity store handle (engine + transactional sessions)
    archive: Zip codec for backup.json / backup-info.json
    serializer: SnapshotSerializer (export)
    restorer: SnapshotRestorer (restore, inspect)
    stats: StatsReporter (entity counts)
    scheduler: BackupScheduler (periodic exports with retention)

Architecture:
    The store handle is opened once at process start and passed to every
    component; nothing here holds a module-level connection.
    
    Export reads all kinds in one transaction and zips the result.
    Restore validates the whole archive first, then deletes children-first
    and inserts parents-first inside a single transaction.

Usage:
    store = EntityStore(build_engine(), isolation_level="SERIALIZABLE")
    archive = await SnapshotSerializer(store).export_archive()
    report = await SnapshotRestorer(store).restore(archive)
"""

__all__ = [
    "EntityStore",
    "EntityRegistry",
    "SHIPMENT_ENTITIES",
    "SnapshotSerializer",
    "SnapshotRestorer",
    "StatsReporter",
    "BackupScheduler",
]

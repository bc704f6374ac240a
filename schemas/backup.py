"""
Pydantic schemas for snapshot manifests and backup API responses
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


# ============================================================================
# Archive documents
# ============================================================================

class BackupInfo(BaseModel):
    """Contents of ``backup-info.json``: the manifest without any records"""
    exportDate: str
    totalRecords: Dict[str, int] = Field(default_factory=dict)
    version: str
    
    class Config:
        json_schema_extra = {
            "example": {
                "exportDate": "2024-01-15T10:30:00.000Z",
                "totalRecords": {
                    "users": 4,
                    "branches": 3,
                    "countries": 6,
                    "shipmentStatuses": 5,
                    "shipments": 120,
                    "shipmentHistories": 340,
                    "trackingEvents": 260,
                    "invoices": 80,
                    "waybills": 80,
                    "logEntries": 900
                },
                "version": "1.0.0"
            }
        }


class Snapshot(BaseModel):
    """
    Point-in-time export of the whole entity graph.
    
    `collections` maps a wire key (``users``, ``shipmentStatuses``...) to the
    validated records of that kind.
    """
    export_date: Optional[datetime] = None
    version: Optional[str] = None
    collections: Dict[str, List[Any]] = Field(default_factory=dict)
    
    def counts(self) -> Dict[str, int]:
        return {key: len(records) for key, records in self.collections.items()}
    
    @property
    def total_records(self) -> int:
        return sum(self.counts().values())


# ============================================================================
# Operation results
# ============================================================================

class RestoreReport(BaseModel):
    """Per-kind counts written by a restore"""
    counts: Dict[str, int]
    total_records: int
    backup_date: Optional[str] = None
    version: Optional[str] = None
    
    def to_imported_data(self) -> Dict[str, Any]:
        return {
            **self.counts,
            "totalRecords": self.total_records,
            "backupDate": self.backup_date,
            "version": self.version,
        }


class EntityCounts(BaseModel):
    """Row count per entity kind at `last_updated`"""
    counts: Dict[str, int]
    total_records: int
    last_updated: datetime
    
    def to_payload(self) -> Dict[str, Any]:
        return {
            **self.counts,
            "totalRecords": self.total_records,
            "lastUpdated": self.last_updated.isoformat(),
        }


# ============================================================================
# API responses
# ============================================================================

class ImportResponse(BaseModel):
    success: bool = True
    message: str
    importedData: Dict[str, Any]


class InfoResponse(BaseModel):
    success: bool = True
    data: BackupInfo


class StatsResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    scheduled_backups_enabled: bool = False
    next_scheduled_backup: Optional[datetime] = None

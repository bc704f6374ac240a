"""
Health check endpoint with database and scheduler status
"""

from fastapi import APIRouter, Depends, Request
from api.dependencies import get_store
from backup.store import EntityStore
from schemas.backup import HealthCheckResponse
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request, store: EntityStore = Depends(get_store)):
    """
    Health check endpoint.
    
    Returns:
    - Database connectivity status
    - Scheduled backup status
    """
    db_connected = await store.ping()
    
    scheduler = getattr(request.app.state, "backup_scheduler", None)
    
    return HealthCheckResponse(
        status="healthy" if db_connected else "unhealthy",
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        scheduled_backups_enabled=scheduler is not None,
        next_scheduled_backup=scheduler.next_run_time() if scheduler else None
    )

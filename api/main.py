"""
FastAPI application initialization
"""

import asyncio
from fastapi import FastAPI
from api.routes import health, backup as backup_routes
from api.middleware import RequestContextMiddleware
from backup.scheduler import BackupScheduler
from backup.serializer import SnapshotSerializer
from backup.store import EntityStore
from core.config import settings
from core.database import build_engine
from core.logging import setup_logging
import logging

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="FenerTravel Shipment Backend API",
    description="Shipment-office backend: database backup, preview, restore and statistics",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(backup_routes.router)


@app.on_event("startup")
async def startup_event():
    """Open the entity store once for the whole process"""
    setup_logging()
    logger.info("Starting FenerTravel Shipment Backend API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    
    # A store may already be attached (tests, embedding applications)
    if getattr(app.state, "store", None) is None:
        app.state.store = EntityStore(
            build_engine(echo=settings.ENVIRONMENT == "development"),
            isolation_level=settings.BACKUP_ISOLATION_LEVEL
        )
        app.state.owns_store = True
    
    app.state.restore_lock = asyncio.Lock()
    app.state.backup_scheduler = None
    
    if settings.BACKUP_SCHEDULE_ENABLED:
        scheduler = BackupScheduler(SnapshotSerializer(app.state.store))
        scheduler.start()
        app.state.backup_scheduler = scheduler


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down FenerTravel Shipment Backend API")
    
    if getattr(app.state, "backup_scheduler", None) is not None:
        app.state.backup_scheduler.stop()
    
    if getattr(app.state, "owns_store", False):
        await app.state.store.dispose()
        app.state.store = None
        app.state.owns_store = False


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "FenerTravel Shipment Backend API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "export": "/backup/export",
            "import": "/backup/import",
            "info": "/backup/info",
            "stats": "/backup/stats"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)

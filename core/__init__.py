"""
Core utilities and configuration for the shipment-office backend.

This package provides foundational components used throughout the service:

Modules:
    config: Application configuration and environment variable management
    database: Async engine and session factory construction
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import build_engine, build_session_maker
    from core.exceptions import MalformedArchiveError, StoreUnavailableError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()
    
    # Open the database once per process
    engine = build_engine()
    session_maker = build_session_maker(engine)
"""

__all__ = [
    "settings",
    "build_engine",
    "build_session_maker",
    "setup_logging",
    # Exceptions
    "BackupException",
    "ArchiveError",
    "MalformedArchiveError",
    "InvalidSnapshotFormatError",
    "RestoreTransactionFailedError",
    "StoreUnavailableError",
    "EntityGraphError",
]

"""
FastAPI dependencies for the shared store and backup components
"""

import asyncio
from fastapi import Request
from backup.restorer import SnapshotRestorer
from backup.serializer import SnapshotSerializer
from backup.stats import StatsReporter
from backup.store import EntityStore


def get_store(request: Request) -> EntityStore:
    """Store opened at startup"""
    return request.app.state.store


def get_serializer(request: Request) -> SnapshotSerializer:
    return SnapshotSerializer(get_store(request))


def get_restorer(request: Request) -> SnapshotRestorer:
    return SnapshotRestorer(get_store(request))


def get_stats_reporter(request: Request) -> StatsReporter:
    return StatsReporter(get_store(request))


def get_restore_lock(request: Request) -> asyncio.Lock:
    """Serialises imports: only one restore may run at a time"""
    return request.app.state.restore_lock

"""
Entity store handle shared by the backup components
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from core.database import build_session_maker
import logging

logger = logging.getLogger(__name__)


class EntityStore:
    """
    Transactional read/write surface over the relational database.
    
    Opened once per process and passed to the serializer, restorer and
    stats reporter. `isolation_level` applies to snapshot reads and to the
    restore transaction; None keeps the driver default.
    """
    
    def __init__(self, engine: AsyncEngine, isolation_level: Optional[str] = None):
        self.engine = engine
        self.isolation_level = isolation_level
        self._session_maker = build_session_maker(engine)
        
        if isolation_level:
            isolated_engine = engine.execution_options(isolation_level=isolation_level)
            self._isolated_session_maker = build_session_maker(isolated_engine)
        else:
            self._isolated_session_maker = self._session_maker
    
    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Plain session for single statements (counts, health probes)."""
        async with self._session_maker() as session:
            yield session
    
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Session inside one transaction at the configured isolation level.
        
        Commits when the block exits cleanly; any exception rolls the whole
        transaction back and propagates.
        """
        async with self._isolated_session_maker() as session:
            async with session.begin():
                yield session
    
    async def ping(self) -> bool:
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {str(e)}")
            return False
    
    async def dispose(self):
        await self.engine.dispose()

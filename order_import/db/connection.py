"""
Async database connection for the sync ledger.

Unlike a process-wide singleton, a `LedgerDatabase` is created and owned by
the caller so tests can point each instance at its own SQLite file.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from order_import.core.config import get_settings
from order_import.db.models import Base
from order_import.utils.error_handler import LedgerException

logger = logging.getLogger(__name__)


class LedgerDatabase:
    """
    Engine and session factory for the ledger database.

    Args:
        database_url: Any async SQLAlchemy URL, defaults to LEDGER_DATABASE_URL
        echo: Log SQL statements, defaults to LEDGER_ECHO_SQL
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        settings = get_settings()
        self.database_url = database_url or settings.LEDGER_DATABASE_URL
        self._echo = settings.LEDGER_ECHO_SQL if echo is None else echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def initialize(self) -> None:
        """Creates the engine lazily. Safe to call more than once."""
        if self.engine is not None:
            return

        logger.info("Initializing ledger database connection")
        options = {"echo": self._echo, "future": True}
        if self.database_url.startswith("sqlite"):
            # File databases only; connections are opened per session
            options["poolclass"] = NullPool
        else:
            options["pool_pre_ping"] = True
        self.engine = create_async_engine(self.database_url, **options)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """
        Yields a session that commits on success and rolls back on error.
        """
        self.initialize()
        assert self.session_factory is not None

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Creates the ledger and config tables when missing."""
        self.initialize()
        assert self.engine is not None

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise LedgerException(f"Failed to create ledger tables: {e}", operation="create_tables") from e
        logger.info("Ledger tables ready")

    async def test_connection(self) -> bool:
        """
        Checks that the database answers a trivial query.

        Returns:
            bool: True when the connection works
        """
        try:
            async with self.session_scope() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except SQLAlchemyError as e:
            logger.error(f"Ledger database connection test failed: {e}")
            return False

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Ledger database connection closed")
        self.engine = None
        self.session_factory = None

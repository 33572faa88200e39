"""
Read-only access to the per-shop Ticimax connection settings.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from order_import.db.base import log_operation, with_retry
from order_import.db.connection import LedgerDatabase
from order_import.db.models import RemoteConnectionConfigRow
from order_import.domain.models.connection_config import RemoteConnectionConfig
from order_import.utils.error_handler import ConfigMissingError, LedgerException

logger = logging.getLogger(__name__)


class ConnectionConfigRepository:
    """Reads `remote_connection_configs`; rows are maintained by the application."""

    def __init__(self, database: LedgerDatabase):
        self.database = database

    @with_retry()
    @log_operation()
    async def find(self, shop: str) -> Optional[RemoteConnectionConfig]:
        try:
            async with self.database.session_scope() as session:
                row = (
                    await session.execute(
                        select(RemoteConnectionConfigRow).where(RemoteConnectionConfigRow.shop == shop)
                    )
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise LedgerException(f"Failed to read connection settings: {e}", operation="config_find") from e

        if row is None:
            return None
        return RemoteConnectionConfig(
            shop=row.shop,
            wsdl_url=row.wsdl_url,
            member_code=row.member_code,
            is_active=row.is_active,
            last_sync_at=row.last_sync_at,
        )

    async def get(self, shop: str) -> RemoteConnectionConfig:
        """
        Connection settings of a shop.

        Raises:
            ConfigMissingError: If the shop has no settings
        """
        config = await self.find(shop)
        if config is None:
            raise ConfigMissingError(shop)
        if not config.is_active:
            logger.warning(f"Ticimax integration is disabled for {shop}, using stored settings anyway")
        return config

"""DuplicateGuard - refuses to import an order that already reached Shopify."""

import logging

from order_import.services.orders.interfaces import ISyncLedger
from order_import.utils.error_handler import DuplicateError

logger = logging.getLogger(__name__)


class DuplicateGuard:
    """Checks the ledger for a `synced` row. Never writes to it."""

    def __init__(self, ledger: ISyncLedger):
        self.ledger = ledger

    async def already_synced(self, shop: str, order_number: str) -> bool:
        return await self.ledger.find_synced(shop, order_number) is not None

    async def ensure_not_synced(self, shop: str, order_number: str) -> None:
        """
        Raises:
            DuplicateError: Naming the existing host order
        """
        existing = await self.ledger.find_synced(shop, order_number)
        if existing is None:
            return

        logger.info(f"Order #{order_number} already imported into {shop} as {existing.host_order_label}")
        raise DuplicateError(
            shop=shop,
            order_number=order_number,
            host_order_name=existing.host_order_name,
            host_order_id=existing.host_order_id,
        )

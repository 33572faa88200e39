"""
Shopify draft order creation and completion.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from order_import.db.queries import DRAFT_ORDER_COMPLETE_MUTATION, DRAFT_ORDER_CREATE_MUTATION
from order_import.utils.error_handler import ShopifyAPIException

from .base_client import BaseShopifyGraphQLClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedOrder:
    """
    Host order produced by a transfer.

    Attributes:
        order_id: GID of the draft order, or of the order once completed
        name: Human readable name ("#D12", "#1043")
        customer_id: GID of the linked customer, if any
    """

    order_id: str
    name: str
    customer_id: Optional[str] = None


class ShopifyDraftOrderClient(BaseShopifyGraphQLClient):
    """Draft order operations used to import orders."""

    async def create_draft_order(self, draft_input: Dict[str, Any]) -> CreatedOrder:
        """
        Creates a draft order.

        Args:
            draft_input: `DraftOrderInput` payload

        Raises:
            ShopifyAPIException: On transport errors or `userErrors`
        """
        result = await self._execute_query(
            DRAFT_ORDER_CREATE_MUTATION, {"input": draft_input}, retry_network_errors=False
        )
        payload = result.get("draftOrderCreate") or {}
        self._handle_user_errors(payload, "draftOrderCreate")

        draft = payload.get("draftOrder") or {}
        if not draft.get("id"):
            raise ShopifyAPIException("draftOrderCreate returned no draft order")

        logger.info(f"Created draft order {draft.get('name')} ({draft['id']})")
        return CreatedOrder(
            order_id=draft["id"],
            name=draft.get("name") or "",
            customer_id=(draft.get("customer") or {}).get("id"),
        )

    async def complete_draft_order(self, draft_order_id: str) -> CreatedOrder:
        """
        Turns a draft order into a real order.

        Raises:
            ShopifyAPIException: On transport errors or `userErrors`
        """
        result = await self._execute_query(
            DRAFT_ORDER_COMPLETE_MUTATION, {"id": draft_order_id}, retry_network_errors=False
        )
        payload = result.get("draftOrderComplete") or {}
        self._handle_user_errors(payload, "draftOrderComplete")

        order = ((payload.get("draftOrder") or {}).get("order")) or {}
        if not order.get("id"):
            raise ShopifyAPIException(f"draftOrderComplete returned no order for {draft_order_id}")

        logger.info(f"Completed draft order {draft_order_id} into {order.get('name')}")
        return CreatedOrder(order_id=order["id"], name=order.get("name") or "")

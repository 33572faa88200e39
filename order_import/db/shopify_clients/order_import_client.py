"""
Single Shopify client for the order import, combining the customer and
draft order clients over one HTTP session.
"""

import logging
from typing import Any, Dict, Optional

from order_import.domain.models.customer import CustomerDraft, CustomerMatch

from .base_client import BaseShopifyGraphQLClient
from .customer_client import ShopifyCustomerClient
from .draft_order_client import CreatedOrder, ShopifyDraftOrderClient

logger = logging.getLogger(__name__)


class ShopifyOrderImportClient(BaseShopifyGraphQLClient):
    """
    Facade over the specialized clients of one shop.

    Example:
        >>> async with ShopifyOrderImportClient("shop.myshopify.com", token) as client:
        ...     match = await client.find_customer_by_email("a@b.com")
    """

    def __init__(self, shop_url: str, access_token: str):
        super().__init__(shop_url, access_token)
        self.customers = ShopifyCustomerClient(shop_url, access_token)
        self.draft_orders = ShopifyDraftOrderClient(shop_url, access_token)

    async def initialize(self, verify: bool = False):
        await super().initialize(verify=verify)
        for client in (self.customers, self.draft_orders):
            client.share_session(self)
        logger.info(f"Shopify order import client ready for {self.shop_url}")

    async def close(self):
        for client in (self.customers, self.draft_orders):
            client.session = None
        await super().close()

    async def find_customer_by_email(self, email: str) -> Optional[CustomerMatch]:
        return await self.customers.find_customer_by_email(email)

    async def find_customer_by_phone(self, phone: str) -> Optional[CustomerMatch]:
        return await self.customers.find_customer_by_phone(phone)

    async def create_customer(self, draft: CustomerDraft) -> CustomerMatch:
        return await self.customers.create_customer(draft)

    async def create_draft_order(self, draft_input: Dict[str, Any]) -> CreatedOrder:
        return await self.draft_orders.create_draft_order(draft_input)

    async def complete_draft_order(self, draft_order_id: str) -> CreatedOrder:
        return await self.draft_orders.complete_draft_order(draft_order_id)

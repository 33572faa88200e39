"""
Shopify customer lookup and creation.
"""

import logging
from typing import Any, Dict, Optional

from order_import.db.queries import CUSTOMER_CREATE_MUTATION, CUSTOMER_SEARCH_QUERY
from order_import.domain.models.customer import CustomerDraft, CustomerMatch
from order_import.utils.error_handler import ShopifyAPIException

from .base_client import BaseShopifyGraphQLClient

logger = logging.getLogger(__name__)


def _search_value(value: str) -> str:
    # Quote values so characters like "+" or "@" are not parsed as search syntax
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class ShopifyCustomerClient(BaseShopifyGraphQLClient):
    """Customer operations needed to attach imported orders to a buyer."""

    async def find_customer_by_email(self, email: str) -> Optional[CustomerMatch]:
        """First customer whose email matches, or None."""
        return await self._find_customer(f"email:{_search_value(email)}")

    async def find_customer_by_phone(self, phone: str) -> Optional[CustomerMatch]:
        """First customer whose phone matches, or None."""
        return await self._find_customer(f"phone:{_search_value(phone)}")

    async def _find_customer(self, search: str) -> Optional[CustomerMatch]:
        result = await self._execute_query(CUSTOMER_SEARCH_QUERY, {"query": search})
        edges = (result.get("customers") or {}).get("edges") or []
        if not edges:
            return None

        node: Dict[str, Any] = edges[0].get("node") or {}
        if not node.get("id"):
            return None

        logger.debug(f"Customer found for {search}: {node['id']}")
        return CustomerMatch(customer_id=node["id"], display_name=node.get("displayName") or "", is_new=False)

    async def create_customer(self, draft: CustomerDraft) -> CustomerMatch:
        """
        Creates a customer.

        Raises:
            ShopifyAPIException: On transport errors or `userErrors`
        """
        result = await self._execute_query(
            CUSTOMER_CREATE_MUTATION, {"input": draft.to_input()}, retry_network_errors=False
        )
        payload = result.get("customerCreate") or {}
        self._handle_user_errors(payload, "customerCreate")

        customer = payload.get("customer") or {}
        if not customer.get("id"):
            raise ShopifyAPIException("customerCreate returned no customer")

        logger.info(f"Created Shopify customer {customer['id']}")
        return CustomerMatch(
            customer_id=customer["id"],
            display_name=customer.get("displayName") or f"{draft.first_name} {draft.last_name}".strip(),
            is_new=True,
        )

"""
Shopify GraphQL clients organized by responsibility.
"""

from .base_client import BaseShopifyGraphQLClient
from .customer_client import ShopifyCustomerClient
from .draft_order_client import CreatedOrder, ShopifyDraftOrderClient
from .order_import_client import ShopifyOrderImportClient

__all__ = [
    "BaseShopifyGraphQLClient",
    "CreatedOrder",
    "ShopifyCustomerClient",
    "ShopifyDraftOrderClient",
    "ShopifyOrderImportClient",
]

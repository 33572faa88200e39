"""
Shopify Admin GraphQL queries and mutations used by the order import.
"""

from .core import SHOP_INFO_QUERY
from .customers import CUSTOMER_CREATE_MUTATION, CUSTOMER_SEARCH_QUERY
from .draft_orders import DRAFT_ORDER_COMPLETE_MUTATION, DRAFT_ORDER_CREATE_MUTATION

__all__ = [
    "SHOP_INFO_QUERY",
    "CUSTOMER_SEARCH_QUERY",
    "CUSTOMER_CREATE_MUTATION",
    "DRAFT_ORDER_CREATE_MUTATION",
    "DRAFT_ORDER_COMPLETE_MUTATION",
]

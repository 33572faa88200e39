"""
Order import services: normalization, customer resolution, duplicate
protection and the transfer orchestrator.
"""

from .builders import DraftOrderBuilder
from .fetcher import MAX_PAGES, fetch_all_orders
from .guards import DuplicateGuard
from .normalizer import OrderNormalizer
from .orchestrator import OrderTransferOrchestrator, TransferResult
from .resolvers import CustomerResolver

__all__ = [
    "CustomerResolver",
    "DraftOrderBuilder",
    "DuplicateGuard",
    "MAX_PAGES",
    "OrderNormalizer",
    "OrderTransferOrchestrator",
    "TransferResult",
    "fetch_all_orders",
]

"""
Domain models for business entities.
"""

from .connection_config import RemoteConnectionConfig
from .customer import CustomerDraft, CustomerMatch
from .filter import UNRESTRICTED, OrderFilter, Pagination, Unrestricted
from .ledger import LedgerEntry, SyncStatus
from .order import NormalizedOrder
from .remote_order import LineItem, OrderStatus, RemoteOrder, RemoteOrderPage, ShippingAddress

__all__ = [
    "CustomerDraft",
    "CustomerMatch",
    "LedgerEntry",
    "LineItem",
    "NormalizedOrder",
    "OrderFilter",
    "OrderStatus",
    "Pagination",
    "RemoteConnectionConfig",
    "RemoteOrder",
    "RemoteOrderPage",
    "ShippingAddress",
    "SyncStatus",
    "UNRESTRICTED",
    "Unrestricted",
]

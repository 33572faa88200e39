"""
Interfaces/Protocols for order import services.

Collaborators are injected through these contracts so tests can replace the
Shopify API, the Ticimax service and the ledger with in-memory fakes.
"""

from typing import Any, Protocol

from order_import.db.shopify_clients.draft_order_client import CreatedOrder
from order_import.domain.models import (
    CustomerDraft,
    CustomerMatch,
    LedgerEntry,
    NormalizedOrder,
    OrderFilter,
    RemoteConnectionConfig,
    RemoteOrderPage,
    SyncStatus,
)


class ICustomerDirectory(Protocol):
    """Host-side customer lookups and creation."""

    async def find_customer_by_email(self, email: str) -> CustomerMatch | None: ...

    async def find_customer_by_phone(self, phone: str) -> CustomerMatch | None: ...

    async def create_customer(self, draft: CustomerDraft) -> CustomerMatch: ...


class IDraftOrderGateway(Protocol):
    """Host-side order creation."""

    async def create_draft_order(self, draft_input: dict[str, Any]) -> CreatedOrder: ...

    async def complete_draft_order(self, draft_order_id: str) -> CreatedOrder: ...


class IRemoteOrderSource(Protocol):
    """Paged access to the legacy order service."""

    async def fetch_page(
        self,
        config: RemoteConnectionConfig,
        order_filter: OrderFilter | None = None,
        page_size: int | None = None,
        page_number: int = 1,
    ) -> RemoteOrderPage: ...


class ISyncLedger(Protocol):
    """Persisted record of transfer attempts."""

    async def append(self, entry: LedgerEntry) -> LedgerEntry: ...

    async def find(self, shop: str, order_number: str) -> LedgerEntry | None: ...

    async def find_synced(self, shop: str, order_number: str) -> LedgerEntry | None: ...

    async def list(self, shop: str, limit: int = 50, status: SyncStatus | None = None) -> list[LedgerEntry]: ...

    async def delete(self, entry_id: int) -> bool: ...


class ICustomerResolver(Protocol):
    """Finds or creates the host customer of an order."""

    async def lookup(self, order: NormalizedOrder) -> CustomerMatch | None: ...

    async def resolve(self, order: NormalizedOrder, prefetched: CustomerMatch | None = None) -> CustomerMatch | None: ...

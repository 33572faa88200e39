"""
OrderSyncService - operator-facing entry point of the order import.

Fetches Ticimax orders for a shop, imports them one by one and reports the
outcome of every order. A fetch error aborts the batch; an order-level error
is recorded and the batch continues.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from order_import.core.config import get_settings
from order_import.core.logging_config import log_sync_operation
from order_import.db.config_repository import ConnectionConfigRepository
from order_import.db.connection import LedgerDatabase
from order_import.db.ledger_repository import SyncLedger
from order_import.db.remote import ConnectionTestResult, RemoteClientPool, RemoteOrderClient
from order_import.db.shopify_clients import ShopifyOrderImportClient
from order_import.domain.models import (
    CustomerMatch,
    LedgerEntry,
    NormalizedOrder,
    OrderFilter,
    RemoteOrder,
    SyncStatus,
)
from order_import.services.orders.fetcher import fetch_all_orders
from order_import.services.orders.guards import DuplicateGuard
from order_import.services.orders.normalizer import OrderNormalizer
from order_import.services.orders.orchestrator import OrderTransferOrchestrator
from order_import.services.orders.resolvers import CustomerResolver
from order_import.utils.error_handler import (
    AppException,
    ConfigMissingError,
    DuplicateError,
    ErrorAggregator,
    convert_to_app_exception,
    log_error,
)

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    SYNCED = "synced"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class OrderOutcome:
    order_number: str
    status: OutcomeStatus
    customer_name: str = ""
    total: Decimal = Decimal("0")
    host_order_id: Optional[str] = None
    host_order_name: Optional[str] = None
    customer_created: bool = False
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_number": self.order_number,
            "status": self.status.value,
            "customer_name": self.customer_name,
            "total": str(self.total),
            "host_order_id": self.host_order_id,
            "host_order_name": self.host_order_name,
            "customer_created": self.customer_created,
            "reason": self.reason,
        }


@dataclass
class SyncReport:
    """Outcome of one `sync_orders` run."""

    shop: str
    fetched_count: int = 0
    outcomes: List[OrderOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: Optional[datetime] = None
    errors: ErrorAggregator = field(default_factory=ErrorAggregator)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def synced_count(self) -> int:
        return self._count(OutcomeStatus.SYNCED)

    @property
    def duplicate_count(self) -> int:
        return self._count(OutcomeStatus.DUPLICATE)

    @property
    def failed_count(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def duration_seconds(self) -> float:
        end = self.finished_at or datetime.now(UTC)
        return (end - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shop": self.shop,
            "fetched": self.fetched_count,
            "synced": self.synced_count,
            "duplicates": self.duplicate_count,
            "failed": self.failed_count,
            "duration_seconds": round(self.duration_seconds, 3),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "errors": self.errors.get_summary(),
        }


class OrderSyncService:
    """
    Fetch, preview and import Ticimax orders for a shop.

    The orchestrator's Shopify client must belong to the shops passed in.
    """

    def __init__(
        self,
        remote_client: RemoteOrderClient,
        config_repository: ConnectionConfigRepository,
        ledger: SyncLedger,
        orchestrator: OrderTransferOrchestrator,
        customer_resolver: CustomerResolver,
        normalizer: Optional[OrderNormalizer] = None,
        max_concurrent_lookups: Optional[int] = None,
    ):
        self.remote_client = remote_client
        self.config_repository = config_repository
        self.ledger = ledger
        self.orchestrator = orchestrator
        self.customer_resolver = customer_resolver
        self.normalizer = normalizer or OrderNormalizer()
        self.guard = DuplicateGuard(ledger)
        self.max_concurrent_lookups = max_concurrent_lookups or get_settings().SYNC_MAX_CONCURRENT_LOOKUPS

    async def test_connection(self, shop: str) -> ConnectionTestResult:
        """Checks the shop's Ticimax settings with a one-record fetch."""
        try:
            config = await self.config_repository.get(shop)
        except ConfigMissingError as e:
            return ConnectionTestResult(success=False, message=e.message)
        return await self.remote_client.test_connection(config)

    async def fetch_orders(
        self, shop: str, order_filter: Optional[OrderFilter] = None, page_size: Optional[int] = None
    ) -> List[RemoteOrder]:
        """
        Fetches orders for preview, without importing anything.

        Raises:
            ConfigMissingError: If the shop has no Ticimax settings
            RemoteConnectionError: If the service cannot be reached
        """
        config = await self.config_repository.get(shop)
        orders = await fetch_all_orders(self.remote_client, config, order_filter, page_size)
        log_sync_operation("fetch", "ticimax", shop=shop, count=len(orders))
        return orders

    async def sync_orders(
        self, shop: str, order_filter: Optional[OrderFilter] = None, page_size: Optional[int] = None
    ) -> SyncReport:
        """
        Imports every fetched order that is not in Shopify yet.

        Customer lookups run concurrently; the transfers themselves run one
        at a time so an order can reuse a customer created for an earlier one.

        Raises:
            ConfigMissingError: If the shop has no Ticimax settings
            RemoteConnectionError: If fetching fails (nothing is imported)
        """
        report = SyncReport(shop=shop)
        remote_orders = await self.fetch_orders(shop, order_filter, page_size)
        report.fetched_count = len(remote_orders)

        orders = [self.normalizer.normalize(order) for order in remote_orders]
        prefetched = await self._prefetch_customers(shop, orders)

        for order in orders:
            outcome = await self._transfer_one(shop, order, prefetched.get(order.order_number), report.errors)
            report.outcomes.append(outcome)
            report.errors.increment_processed()

        report.finished_at = datetime.now(UTC)
        log_sync_operation(
            "sync_batch",
            "orchestrator",
            shop=shop,
            fetched=report.fetched_count,
            synced=report.synced_count,
            duplicates=report.duplicate_count,
            failed=report.failed_count,
            duration_seconds=report.duration_seconds,
        )
        logger.info(
            f"Ticimax sync for {shop} finished: {report.synced_count} imported, "
            f"{report.duplicate_count} already imported, {report.failed_count} failed"
        )
        return report

    async def sync_order(self, shop: str, remote_order: RemoteOrder) -> OrderOutcome:
        """Imports a single order picked by an operator."""
        order = self.normalizer.normalize(remote_order)
        return await self._transfer_one(shop, order, None, ErrorAggregator())

    async def recent_transfers(
        self, shop: str, limit: int = 50, status: Optional[SyncStatus] = None
    ) -> List[LedgerEntry]:
        return await self.ledger.list(shop, limit=limit, status=status)

    async def delete_ledger_entry(self, entry_id: int) -> bool:
        """Removes a ledger row; deleting a `synced` row allows a re-import."""
        return await self.ledger.delete(entry_id)

    async def _prefetch_customers(self, shop: str, orders: List[NormalizedOrder]) -> Dict[str, CustomerMatch]:
        """Concurrent customer lookups for orders not yet imported. Misses and errors are left out."""
        semaphore = asyncio.Semaphore(self.max_concurrent_lookups)

        async def lookup(order: NormalizedOrder) -> Optional[CustomerMatch]:
            async with semaphore:
                try:
                    if await self.guard.already_synced(shop, order.order_number):
                        return None
                    return await self.customer_resolver.lookup(order)
                except AppException as e:
                    logger.warning(f"Customer prefetch failed for order #{order.order_number}: {e.message}")
                except Exception as e:
                    logger.warning(
                        f"Customer prefetch failed for order #{order.order_number}: {type(e).__name__}: {e}"
                    )
                return None

        candidates = [order for order in orders if order.has_contact]
        matches = await asyncio.gather(*(lookup(order) for order in candidates))
        return {order.order_number: match for order, match in zip(candidates, matches) if match is not None}

    async def _transfer_one(
        self,
        shop: str,
        order: NormalizedOrder,
        prefetched: Optional[CustomerMatch],
        errors: ErrorAggregator,
    ) -> OrderOutcome:
        base = {
            "order_number": order.order_number,
            "customer_name": order.customer_name,
            "total": order.total.amount,
        }
        try:
            result = await self.orchestrator.transfer(shop, order, prefetched_match=prefetched)
        except DuplicateError as e:
            return OrderOutcome(
                status=OutcomeStatus.DUPLICATE,
                host_order_id=e.host_order_id,
                host_order_name=e.host_order_name,
                reason=e.message,
                **base,
            )
        except AppException as e:
            errors.add_error(e, {"shop": shop, "order_number": order.order_number})
            return OrderOutcome(status=OutcomeStatus.FAILED, reason=e.message, **base)
        except Exception as e:
            failure = convert_to_app_exception(e, {"shop": shop, "order_number": order.order_number})
            log_error(e, {"shop": shop, "order_number": order.order_number})
            errors.add_error(failure)
            return OrderOutcome(status=OutcomeStatus.FAILED, reason=failure.message, **base)

        return OrderOutcome(
            status=OutcomeStatus.SYNCED,
            host_order_id=result.host_order_id,
            host_order_name=result.host_order_name,
            customer_created=bool(result.customer and result.customer.is_new),
            **base,
        )


def create_order_sync_service(
    shopify_client: ShopifyOrderImportClient,
    database: LedgerDatabase,
    pool: RemoteClientPool,
) -> OrderSyncService:
    """
    Wires the service for one shop.

    Args:
        shopify_client: Initialized Shopify client of the shop
        database: Ledger database
        pool: SOAP client pool, shared across shops if desired

    Returns:
        OrderSyncService: Ready to use service
    """
    ledger = SyncLedger(database)
    resolver = CustomerResolver(shopify_client)
    orchestrator = OrderTransferOrchestrator(
        customer_resolver=resolver,
        host=shopify_client,
        ledger=ledger,
    )
    return OrderSyncService(
        remote_client=RemoteOrderClient(pool),
        config_repository=ConnectionConfigRepository(database),
        ledger=ledger,
        orchestrator=orchestrator,
        customer_resolver=resolver,
    )

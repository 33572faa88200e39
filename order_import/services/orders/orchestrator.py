"""
OrderTransferOrchestrator - imports one Ticimax order into Shopify.

Flow per order:
1. Duplicate guard (abort without writing anything on a hit)
2. Resolve the customer
3. Build the draft order input
4. Duplicate guard again, right before the host call
5. Create the draft order, optionally complete it
6. Record a `synced` ledger row, or a `failed` row on any error after step 1
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from order_import.core.config import get_settings
from order_import.core.logging_config import log_sync_operation
from order_import.db.base import with_retry
from order_import.db.shopify_clients.draft_order_client import CreatedOrder
from order_import.domain.models import CustomerMatch, LedgerEntry, NormalizedOrder, SyncStatus
from order_import.services.orders.builders import DraftOrderBuilder
from order_import.services.orders.guards import DuplicateGuard
from order_import.services.orders.interfaces import ICustomerResolver, IDraftOrderGateway, ISyncLedger
from order_import.utils.error_handler import (
    AppException,
    DuplicateError,
    LedgerException,
    ResolutionFailure,
    ShopifyAPIException,
    TransferFailure,
    log_error,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    """
    Attributes:
        host_order_id: GID of the created draft order (or order once completed)
        host_order_name: Shopify name, e.g. "#D12"
        customer: Customer attached to the order, if any
        completed: Whether the draft was completed into an order
        ledger_entry: The `synced` ledger row
    """

    host_order_id: str
    host_order_name: str
    customer: CustomerMatch | None
    completed: bool
    ledger_entry: LedgerEntry


class OrderTransferOrchestrator:
    """
    Coordinates the transfer of a normalized order.

    The host gateway must belong to the shop passed to `transfer`.
    """

    def __init__(
        self,
        customer_resolver: ICustomerResolver,
        host: IDraftOrderGateway,
        ledger: ISyncLedger,
        guard: DuplicateGuard | None = None,
        builder: DraftOrderBuilder | None = None,
        complete_draft_orders: bool | None = None,
    ):
        """
        Args:
            customer_resolver: Finds or creates the customer
            host: Shopify draft order API
            ledger: Sync ledger
            guard: Duplicate guard over the same ledger
            builder: Draft order input builder
            complete_draft_orders: Complete drafts into orders (defaults to COMPLETE_DRAFT_ORDERS)
        """
        self.customer_resolver = customer_resolver
        self.host = host
        self.ledger = ledger
        self.guard = guard or DuplicateGuard(ledger)
        self.builder = builder or DraftOrderBuilder()
        self.complete_draft_orders = (
            get_settings().COMPLETE_DRAFT_ORDERS if complete_draft_orders is None else complete_draft_orders
        )

    async def transfer(
        self, shop: str, order: NormalizedOrder, prefetched_match: CustomerMatch | None = None
    ) -> TransferResult:
        """
        Imports an order into Shopify.

        Args:
            shop: Shop domain, the ledger key
            order: Order to import
            prefetched_match: Customer found by an earlier concurrent lookup

        Returns:
            TransferResult: Created host order and ledger row

        Raises:
            DuplicateError: If the order was already imported
            ResolutionFailure: If the customer could not be resolved
            TransferFailure: If the host rejected the order
        """
        order_number = order.order_number
        await self.guard.ensure_not_synced(shop, order_number)

        logger.info(f"Starting transfer of Ticimax order #{order_number} into {shop}")
        customer: CustomerMatch | None = None

        try:
            customer = await self.customer_resolver.resolve(order, prefetched=prefetched_match)
            draft_input = self.builder.build(order, customer)

            # Shrinks the window against a concurrent import of the same order
            await self.guard.ensure_not_synced(shop, order_number)

            created = await self.host.create_draft_order(draft_input)
        except DuplicateError:
            raise
        except ResolutionFailure as e:
            await self._record_failure(shop, order, customer, e.host_error)
            raise
        except ShopifyAPIException as e:
            await self._record_failure(shop, order, customer, e.message)
            raise TransferFailure(
                f"Shopify rejected order #{order_number}: {e.message}",
                order_number=order_number,
                host_error=e.message,
            ) from e
        except AppException as e:
            await self._record_failure(shop, order, customer, e.message)
            raise TransferFailure(
                f"Transfer of order #{order_number} failed: {e.message}", order_number=order_number
            ) from e
        except Exception as e:
            await self._record_failure(shop, order, customer, str(e))
            raise TransferFailure(f"Transfer of order #{order_number} failed: {e}", order_number=order_number) from e

        final_order, completed = await self._maybe_complete(order_number, created)

        entry = await self._record_success(
            shop,
            LedgerEntry(
                shop=shop,
                order_number=order_number,
                status=SyncStatus.SYNCED,
                total_amount=order.total.amount,
                customer_name=customer.display_name if customer and customer.display_name else order.customer_name,
                customer_email=order.email,
                customer_phone=order.phone,
                host_customer_id=created.customer_id or (customer.customer_id if customer else None),
                host_order_id=final_order.order_id,
                host_order_name=final_order.name,
                order_snapshot=order.remote.to_snapshot(),
                synced_at=datetime.now(UTC),
            ),
        )

        log_sync_operation(
            "transfer",
            "orchestrator",
            shop=shop,
            order_number=order_number,
            host_order_id=final_order.order_id,
            host_order_name=final_order.name,
            customer_created=bool(customer and customer.is_new),
            total=str(order.total.amount),
        )
        logger.info(f"Ticimax order #{order_number} imported as {final_order.name} ({final_order.order_id})")

        return TransferResult(
            host_order_id=final_order.order_id,
            host_order_name=final_order.name,
            customer=customer,
            completed=completed,
            ledger_entry=entry,
        )

    async def _record_success(self, shop: str, entry: LedgerEntry) -> LedgerEntry:
        """
        Appends the `synced` row, retrying ledger errors.

        The host order already exists at this point, so a row that cannot be
        written means the next run would import the order again. The partial
        unique index keeps a retried append from recording it twice.

        Raises:
            DuplicateError: If another run recorded the order first
            TransferFailure: If the row could not be written after retries
        """
        try:
            return await self._append_synced(entry)
        except DuplicateError:
            raise
        except LedgerException as e:
            logger.critical(
                f"Ticimax order #{entry.order_number} was imported into {shop} as {entry.host_order_name} "
                f"({entry.host_order_id}) but the synced row could not be written: {e.message}. "
                f"Record it manually or remove the host order before the next run.",
                extra={
                    "shop": shop,
                    "order_number": entry.order_number,
                    "host_order_id": entry.host_order_id,
                    "host_order_name": entry.host_order_name,
                },
            )
            raise TransferFailure(
                f"Order #{entry.order_number} imported as {entry.host_order_name} but not recorded: {e.message}",
                order_number=entry.order_number,
                host_error=e.message,
            ) from e

    @with_retry(exceptions=(LedgerException,))
    async def _append_synced(self, entry: LedgerEntry) -> LedgerEntry:
        return await self.ledger.append(entry)

    async def _maybe_complete(self, order_number: str, created: CreatedOrder) -> tuple[CreatedOrder, bool]:
        """
        Completes the draft when enabled.

        A completion failure keeps the draft as the imported order: it already
        exists in Shopify, so recording a failure would invite a second import.
        """
        if not self.complete_draft_orders:
            return created, False

        try:
            completed = await self.host.complete_draft_order(created.order_id)
        except Exception as e:
            message = e.message if isinstance(e, AppException) else str(e)
            logger.error(
                f"Draft order {created.name} for Ticimax order #{order_number} could not be completed, "
                f"keeping the draft: {message}"
            )
            return created, False

        return CreatedOrder(completed.order_id, completed.name, created.customer_id), True

    async def _record_failure(
        self, shop: str, order: NormalizedOrder, customer: CustomerMatch | None, error_message: str
    ) -> None:
        """Appends a `failed` row; a ledger error here never hides the original failure."""
        entry = LedgerEntry(
            shop=shop,
            order_number=order.order_number,
            status=SyncStatus.FAILED,
            total_amount=order.total.amount,
            customer_name=order.customer_name,
            customer_email=order.email,
            customer_phone=order.phone,
            host_customer_id=customer.customer_id if customer else None,
            error_message=error_message,
            order_snapshot=order.remote.to_snapshot(),
        )
        try:
            await self.ledger.append(entry)
        except AppException as e:
            log_error(e, {"shop": shop, "order_number": order.order_number, "operation": "record_failure"})

        logger.warning(f"Transfer of Ticimax order #{order.order_number} failed: {error_message}")

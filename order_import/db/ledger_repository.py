"""
SyncLedger: persisted audit trail of order transfer attempts.

Append-only: every attempt inserts a new row and the latest row of a
(shop, order number) pair is its current state. A partial unique index
guarantees that at most one `synced` row exists per source order.
"""

import logging
from datetime import UTC, datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from order_import.db.base import log_operation, with_retry
from order_import.db.connection import LedgerDatabase
from order_import.db.models import SyncLedgerRow
from order_import.domain.models.ledger import LedgerEntry, SyncStatus
from order_import.utils.error_handler import DuplicateError, LedgerException

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back without tzinfo
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_entry(row: SyncLedgerRow) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        shop=row.shop,
        order_number=row.source_order_number,
        status=SyncStatus(row.status),
        total_amount=row.total_amount,
        customer_name=row.customer_name,
        customer_email=row.customer_email,
        customer_phone=row.customer_phone,
        host_customer_id=row.host_customer_id,
        host_order_id=row.host_order_id,
        host_order_name=row.host_order_name,
        error_message=row.error_message,
        order_snapshot=row.order_snapshot,
        created_at=_aware(row.created_at),
        synced_at=_aware(row.synced_at),
    )


def _to_row(entry: LedgerEntry) -> SyncLedgerRow:
    return SyncLedgerRow(
        shop=entry.shop,
        source_order_number=entry.order_number,
        status=entry.status.value,
        total_amount=entry.total_amount,
        customer_name=entry.customer_name,
        customer_email=entry.customer_email,
        customer_phone=entry.customer_phone,
        host_customer_id=entry.host_customer_id,
        host_order_id=entry.host_order_id,
        host_order_name=entry.host_order_name,
        error_message=entry.error_message,
        order_snapshot=entry.order_snapshot,
        created_at=entry.created_at,
        synced_at=entry.synced_at,
    )


class SyncLedger:
    """Repository for the `order_sync_ledger` table."""

    def __init__(self, database: LedgerDatabase):
        self.database = database

    @log_operation()
    async def append(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Inserts a new attempt row.

        Args:
            entry: Attempt to record; its `id` is filled in

        Returns:
            LedgerEntry: The persisted entry

        Raises:
            DuplicateError: If a `synced` row already exists for the order
            LedgerException: On any other storage failure
        """
        row = _to_row(entry)
        try:
            async with self.database.session_scope() as session:
                session.add(row)
                await session.flush()
                entry.id = row.id
        except IntegrityError as e:
            if entry.status != SyncStatus.SYNCED:
                raise LedgerException(f"Ledger insert rejected: {e}", operation="append") from e

            existing = await self.find_synced(entry.shop, entry.order_number)
            logger.critical(
                f"Order #{entry.order_number} imported twice into {entry.shop}: "
                f"{entry.host_order_name or entry.host_order_id} duplicates "
                f"{existing.host_order_label if existing else 'an existing order'}; manual cleanup required",
                extra={
                    "shop": entry.shop,
                    "order_number": entry.order_number,
                    "duplicate_host_order_id": entry.host_order_id,
                    "existing_host_order_id": existing.host_order_id if existing else None,
                },
            )
            raise DuplicateError(
                shop=entry.shop,
                order_number=entry.order_number,
                host_order_name=existing.host_order_name if existing else None,
                host_order_id=existing.host_order_id if existing else None,
            ) from e
        except SQLAlchemyError as e:
            raise LedgerException(f"Failed to append ledger entry: {e}", operation="append") from e

        return entry

    @with_retry()
    @log_operation()
    async def find(self, shop: str, order_number: str) -> Optional[LedgerEntry]:
        """Latest attempt for an order, or None when it was never attempted."""
        stmt = (
            select(SyncLedgerRow)
            .where(SyncLedgerRow.shop == shop, SyncLedgerRow.source_order_number == order_number)
            .order_by(SyncLedgerRow.created_at.desc(), SyncLedgerRow.id.desc())
            .limit(1)
        )
        return await self._fetch_one(stmt, "find")

    @with_retry()
    @log_operation()
    async def find_synced(self, shop: str, order_number: str) -> Optional[LedgerEntry]:
        """The `synced` row of an order, if any."""
        stmt = (
            select(SyncLedgerRow)
            .where(
                SyncLedgerRow.shop == shop,
                SyncLedgerRow.source_order_number == order_number,
                SyncLedgerRow.status == SyncStatus.SYNCED.value,
            )
            .order_by(SyncLedgerRow.id.desc())
            .limit(1)
        )
        return await self._fetch_one(stmt, "find_synced")

    @with_retry()
    @log_operation()
    async def list(
        self, shop: str, limit: int = DEFAULT_LIST_LIMIT, status: Optional[SyncStatus] = None
    ) -> List[LedgerEntry]:
        """
        Attempts of a shop, newest first.

        Args:
            shop: Shopify shop domain
            limit: Maximum number of rows
            status: Only rows with this status
        """
        stmt = select(SyncLedgerRow).where(SyncLedgerRow.shop == shop)
        if status is not None:
            stmt = stmt.where(SyncLedgerRow.status == SyncStatus(status).value)
        stmt = stmt.order_by(SyncLedgerRow.created_at.desc(), SyncLedgerRow.id.desc()).limit(limit)

        try:
            async with self.database.session_scope() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise LedgerException(f"Failed to list ledger entries: {e}", operation="list") from e
        return [_to_entry(row) for row in rows]

    @log_operation()
    async def delete(self, entry_id: int) -> bool:
        """
        Removes one row (operator cleanup).

        Deleting the `synced` row of an order makes it importable again.

        Returns:
            bool: True if a row was deleted
        """
        try:
            async with self.database.session_scope() as session:
                result = await session.execute(delete(SyncLedgerRow).where(SyncLedgerRow.id == entry_id))
                deleted = result.rowcount > 0
        except SQLAlchemyError as e:
            raise LedgerException(f"Failed to delete ledger entry {entry_id}: {e}", operation="delete") from e

        if deleted:
            logger.info(f"Ledger entry {entry_id} deleted")
        return deleted

    async def _fetch_one(self, stmt, operation: str) -> Optional[LedgerEntry]:
        try:
            async with self.database.session_scope() as session:
                row = (await session.execute(stmt)).scalars().first()
        except SQLAlchemyError as e:
            raise LedgerException(f"Ledger query failed: {e}", operation=operation) from e
        return _to_entry(row) if row is not None else None

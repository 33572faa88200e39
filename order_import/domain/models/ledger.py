"""
Sync ledger entry domain model.

One entry per transfer attempt of a source order. The latest entry for a
(shop, order number) pair is its current state.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class SyncStatus(str, Enum):
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"


@dataclass
class LedgerEntry:
    """
    Audit record of a transfer attempt.

    Attributes:
        shop: Shopify shop domain
        order_number: Source order number
        status: Attempt outcome
        total_amount: Computed order total
        customer_name: Buyer display name
        customer_email: Buyer email
        customer_phone: Canonical buyer phone
        host_customer_id: Shopify customer GID
        host_order_id: Shopify order or draft order GID
        host_order_name: Shopify order name (e.g. "#D12")
        error_message: Failure text for `failed` entries
        order_snapshot: JSON snapshot of the source order
        created_at: When the attempt was recorded
        synced_at: When the order landed in Shopify
        id: Row id (None until persisted)
    """

    shop: str
    order_number: str
    status: SyncStatus
    total_amount: Decimal = Decimal("0")
    customer_name: str = ""
    customer_email: str | None = None
    customer_phone: str | None = None
    host_customer_id: str | None = None
    host_order_id: str | None = None
    host_order_name: str | None = None
    error_message: str | None = None
    order_snapshot: str = "{}"
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    synced_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.shop:
            raise ValueError("Shop is required")
        if not self.order_number:
            raise ValueError("Order number is required")

        self.status = SyncStatus(self.status)

        if self.status == SyncStatus.SYNCED and not self.host_order_id:
            raise ValueError("Synced entries must reference a host order")

    @property
    def is_synced(self) -> bool:
        return self.status == SyncStatus.SYNCED

    @property
    def host_order_label(self) -> str:
        return self.host_order_name or self.host_order_id or ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shop": self.shop,
            "order_number": self.order_number,
            "status": self.status.value,
            "total_amount": str(self.total_amount),
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "host_customer_id": self.host_customer_id,
            "host_order_id": self.host_order_id,
            "host_order_name": self.host_order_name,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "synced_at": self.synced_at.isoformat() if self.synced_at else None,
        }

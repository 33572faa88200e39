"""
Normalized order domain model.

Wraps a `RemoteOrder` with the values the transfer actually uses: the
canonical phone and a total recomputed from the line items.
"""

from dataclasses import dataclass
from typing import Any

from order_import.domain.value_objects.money import Money

from .remote_order import RemoteOrder


@dataclass(frozen=True)
class NormalizedOrder:
    """
    Remote order ready for transfer.

    The total is always recomputed as the sum of (base + tax) x quantity over
    the line items; the upstream declared total is never trusted.

    Attributes:
        remote: Source order
        phone: Canonical international phone, None when unusable
    """

    remote: RemoteOrder
    phone: str | None = None

    @property
    def order_number(self) -> str:
        return self.remote.order_number

    @property
    def email(self) -> str | None:
        email = self.remote.email.strip()
        return email or None

    @property
    def total(self) -> Money:
        total = Money.zero(self.remote.currency)
        for item in self.remote.line_items:
            total = total + item.line_total
        return total

    @property
    def customer_name(self) -> str:
        return self.remote.customer_name

    @property
    def has_contact(self) -> bool:
        """Whether the order carries any key a host customer can be matched on."""
        return bool(self.email or self.phone)

    def to_dict(self) -> dict[str, Any]:
        data = self.remote.to_dict()
        data["normalized_phone"] = self.phone
        data["total"] = str(self.total.amount)
        return data

"""
Remote order domain model.

A `RemoteOrder` is an order exactly as the Ticimax service reported it, after
the SOAP payload has been flattened into Python types. It is immutable and
lives only for the duration of one sync run.
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import IntEnum
from typing import Any

from order_import.domain.value_objects.money import Money


class OrderStatus(IntEnum):
    """
    Ticimax `SiparisDurumu` codes.

    Codes outside the known range map to `UNRECOGNIZED`; the raw integer is
    kept on the order so nothing is lost.
    """

    UNRECOGNIZED = -1
    PENDING_APPROVAL = 0
    APPROVED = 1
    AWAITING_PAYMENT = 2
    PACKAGING = 3
    SUPPLYING = 4
    SHIPPED = 5
    DELIVERED = 6
    CANCELLED = 7
    RETURNED = 8
    DELETED = 9
    RETURN_REQUESTED = 10
    RETURN_RECEIVED = 11
    REFUNDED = 12
    EXCHANGE_REQUESTED = 13
    EXCHANGE_COMPLETED = 14
    UNDELIVERABLE = 15
    PARTIALLY_SHIPPED = 16
    PARTIALLY_RETURNED = 17

    @classmethod
    def from_code(cls, code: Any) -> "OrderStatus":
        """Map a raw status code to a member, `UNRECOGNIZED` when unknown."""
        try:
            value = int(code)
        except (TypeError, ValueError):
            return cls.UNRECOGNIZED

        # -1 is the wire value for "any status" and never a real order state
        if value < 0:
            return cls.UNRECOGNIZED
        try:
            return cls(value)
        except ValueError:
            return cls.UNRECOGNIZED


@dataclass(frozen=True)
class ShippingAddress:
    """
    Delivery address of a remote order (`TeslimatAdresi`).

    Attributes:
        address1: Street address (`Adres`)
        city: Province (`Il`)
        district: District (`Ilce`)
        postal_code: Postal code (`PostaKodu`)
        phone: Recipient phone as typed (`AliciTelefon`)
    """

    address1: str = ""
    city: str = ""
    district: str = ""
    postal_code: str = ""
    phone: str = ""


@dataclass(frozen=True)
class LineItem:
    """
    One product line of a remote order (`WebSiparisUrun`).

    `base_amount` is the tax-exclusive unit price (`Tutar`) and `tax_amount`
    the unit VAT (`KdvTutari`).

    Attributes:
        title: Product name with variant descriptors, e.g. "Shirt (Red, M)"
        quantity: Ordered units, never below 1
        base_amount: Unit price without tax
        tax_amount: Unit tax
        sku: Stock code (`StokKodu`)
        barcode: Barcode (`Barkod`)
        supplier_id: Supplier (`TedarikciID`), None when not reported
    """

    title: str
    quantity: int
    base_amount: Money
    tax_amount: Money
    sku: str = ""
    barcode: str = ""
    supplier_id: int | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            object.__setattr__(self, "quantity", 1)

        if self.base_amount.currency != self.tax_amount.currency:
            raise ValueError("Base and tax amounts must have the same currency")

    @property
    def unit_price(self) -> Money:
        """Tax-inclusive unit price."""
        return self.base_amount + self.tax_amount

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "quantity": self.quantity,
            "base_amount": str(self.base_amount.amount),
            "tax_amount": str(self.tax_amount.amount),
            "sku": self.sku,
            "barcode": self.barcode,
            "supplier_id": self.supplier_id,
        }


@dataclass(frozen=True)
class RemoteOrder:
    """
    Order as returned by the Ticimax `SelectSiparis` operation.

    Attributes:
        order_number: Source order number (`SiparisNo`), unique per shop
        remote_id: Numeric Ticimax id (`ID`)
        order_date: Order date as reported (`SiparisTarihi`)
        first_name: Buyer first name (`UyeAdi`)
        last_name: Buyer surname (`UyeSoyadi`)
        email: Buyer email (`Mail`)
        phone: Raw buyer phone
        shipping_address: Delivery address
        status_code: Raw `SiparisDurumu` integer, None when absent
        line_items: Product lines
        declared_total: Total reported upstream, only used for mismatch checks
        currency: Currency of all amounts
    """

    order_number: str
    remote_id: int = 0
    order_date: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    shipping_address: ShippingAddress = field(default_factory=ShippingAddress)
    status_code: int | None = None
    line_items: tuple[LineItem, ...] = ()
    declared_total: Decimal | None = None
    currency: str = "TRY"

    def __post_init__(self) -> None:
        if not self.order_number:
            raise ValueError("Order number is required")

        # Lists are accepted for convenience but stored as tuples
        if not isinstance(self.line_items, tuple):
            object.__setattr__(self, "line_items", tuple(self.line_items))

    @property
    def status(self) -> OrderStatus:
        return OrderStatus.from_code(self.status_code)

    @property
    def customer_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        """Convert order to a JSON-compatible dictionary."""
        return {
            "order_number": self.order_number,
            "remote_id": self.remote_id,
            "order_date": self.order_date,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "shipping_address": {
                "address1": self.shipping_address.address1,
                "city": self.shipping_address.city,
                "district": self.shipping_address.district,
                "postal_code": self.shipping_address.postal_code,
                "phone": self.shipping_address.phone,
            },
            "status_code": self.status_code,
            "status": self.status.name,
            "line_items": [item.to_dict() for item in self.line_items],
            "declared_total": str(self.declared_total) if self.declared_total is not None else None,
            "currency": self.currency,
        }

    def to_snapshot(self) -> str:
        """JSON snapshot stored in the sync ledger for audit and replay."""
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(frozen=True)
class RemoteOrderPage:
    """
    One page of a `SelectSiparis` response.

    `record_count` counts every record the service returned, including the
    ones that could not be parsed into `orders`; pagination decides on it.
    """

    orders: list[RemoteOrder] = field(default_factory=list)
    record_count: int = 0

    def __iter__(self):
        return iter(self.orders)

    def __len__(self) -> int:
        return len(self.orders)

    @property
    def skipped_count(self) -> int:
        return self.record_count - len(self.orders)

"""
Order filter and pagination value objects for the remote `SelectSiparis` call.

Every integer selector is either a concrete value or `UNRESTRICTED`. Only
`to_wire()` knows that the service spells "no restriction" as -1.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum
from typing import Any

WIRE_UNRESTRICTED = -1


class Unrestricted(Enum):
    """Marker for a filter field that does not restrict the result."""

    ANY = "any"

    def __repr__(self) -> str:
        return "UNRESTRICTED"


UNRESTRICTED = Unrestricted.ANY

Selector = int | Unrestricted

# Python field name -> WebSiparisFiltre element
_WIRE_FIELDS = {
    "integration_transferred": "EntegrasyonAktarildi",
    "payment_status": "OdemeDurumu",
    "payment_completed": "OdemeTamamlandi",
    "payment_type": "OdemeTipi",
    "packaging_status": "PaketlemeDurumu",
    "order_status": "SiparisDurumu",
    "order_id": "SiparisID",
    "carrier_id": "KargoFirmaID",
    "supplier_id": "TedarikciID",
    "member_id": "UyeID",
}


@dataclass(frozen=True)
class OrderFilter:
    """
    Remote order selection criteria (`WebSiparisFiltre`).

    Example:
        >>> OrderFilter(order_status=1).to_wire()["SiparisDurumu"]
        1
        >>> OrderFilter().to_wire()["UyeID"]
        -1
    """

    integration_transferred: Selector = UNRESTRICTED
    payment_status: Selector = UNRESTRICTED
    payment_completed: Selector = UNRESTRICTED
    payment_type: Selector = UNRESTRICTED
    packaging_status: Selector = UNRESTRICTED
    order_status: Selector = UNRESTRICTED
    order_id: Selector = UNRESTRICTED
    carrier_id: Selector = UNRESTRICTED
    supplier_id: Selector = UNRESTRICTED
    member_id: Selector = UNRESTRICTED
    date_from: date | datetime | None = None
    date_to: date | datetime | None = None

    def __post_init__(self) -> None:
        for name in _WIRE_FIELDS:
            value = getattr(self, name)
            if value is UNRESTRICTED:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int or UNRESTRICTED, got {value!r}")
            # Callers must say UNRESTRICTED explicitly instead of passing the wire value
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if self.date_from and self.date_to and _as_datetime(self.date_from) > _as_datetime(self.date_to):
            raise ValueError("date_from must not be after date_to")

    @property
    def is_unrestricted(self) -> bool:
        return (
            all(getattr(self, name) is UNRESTRICTED for name in _WIRE_FIELDS)
            and self.date_from is None
            and self.date_to is None
        )

    def to_wire(self) -> dict[str, Any]:
        """Encode as the `WebSiparisFiltre` SOAP structure."""
        wire: dict[str, Any] = {}
        for name, wire_name in _WIRE_FIELDS.items():
            value = getattr(self, name)
            wire[wire_name] = WIRE_UNRESTRICTED if value is UNRESTRICTED else value

        if self.date_from is not None:
            wire["SiparisTarihiBas"] = _as_datetime(self.date_from)
        if self.date_to is not None:
            wire["SiparisTarihiSon"] = _as_datetime(self.date_to)
        return wire

    def describe(self) -> dict[str, Any]:
        """Restricted fields only, for logging."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNRESTRICTED and getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class Pagination:
    """
    Page request (`WebSiparisSayfalama`), 1-based page numbers.
    """

    page_number: int = 1
    page_size: int = 100
    sort_field: str = "ID"
    sort_direction: str = "DESC"

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1, got {self.page_number}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        if self.sort_direction not in ("ASC", "DESC"):
            raise ValueError(f"Invalid sort direction: {self.sort_direction}")

    @property
    def start_index(self) -> int:
        return (self.page_number - 1) * self.page_size

    def to_wire(self) -> dict[str, Any]:
        return {
            "BaslangicIndex": self.start_index,
            "KayitSayisi": self.page_size,
            "SiralamaDeger": self.sort_field,
            "SiralamaYonu": self.sort_direction,
        }


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)

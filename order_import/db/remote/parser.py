"""
Conversion of `SelectSiparis` responses into `RemoteOrder` objects.

The input is the zeep result after `serialize_object`: nested dicts and
lists. SOAP arrays arrive either as a list or, when they hold one element,
as that element alone; every nested collection is read through
`_as_list` for that reason.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from order_import.domain.models.remote_order import LineItem, RemoteOrder, RemoteOrderPage, ShippingAddress
from order_import.domain.value_objects.money import Money
from order_import.utils.error_handler import RemoteConnectionError

logger = logging.getLogger(__name__)

RESULT_KEY = "SelectSiparisResult"
ORDER_KEY = "WebSiparis"
LINE_ITEM_KEY = "WebSiparisUrun"
EXTRA_OPTION_KEY = "WebSiparisUrunEkSecenekOzellik"
DECLARED_TOTAL_KEYS = ("SiparisToplamTutari", "ToplamTutar")


def _as_list(value: Any, key: Optional[str] = None) -> List[Any]:
    if value is None:
        return []
    if key is not None and isinstance(value, Mapping) and key in value:
        value = value[key]
        if value is None:
            return []
    if isinstance(value, (list, tuple)):
        return [item for item in value if item is not None]
    return [value]


def _text(value: Any) -> str:
    if value is None or isinstance(value, Mapping):
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, (Mapping, bool)):
        return None
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        return None


def _quantity(value: Any) -> int:
    quantity = _int(value)
    return quantity if quantity and quantity > 0 else 1


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, (Mapping, bool)):
        return None
    try:
        result = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def _title(product: Mapping) -> str:
    """Product name with its extra option descriptors, e.g. "Shirt (Red, M)"."""
    title = _text(product.get("UrunAdi"))
    options = [
        _text(option.get("Tanim"))
        for option in _as_list(product.get("EkSecenekList"), EXTRA_OPTION_KEY)
        if isinstance(option, Mapping)
    ]
    options = [option for option in options if option]
    if options:
        title = f"{title} ({', '.join(options)})"
    return title


def _parse_line_item(product: Mapping, currency: str) -> LineItem:
    return LineItem(
        title=_title(product),
        quantity=_quantity(product.get("Adet")),
        base_amount=Money.parse(product.get("Tutar"), currency),
        tax_amount=Money.parse(product.get("KdvTutari"), currency),
        sku=_text(product.get("StokKodu")),
        barcode=_text(product.get("Barkod")),
        supplier_id=_int(product.get("TedarikciID")),
    )


def _parse_order(record: Mapping, currency: str) -> Optional[RemoteOrder]:
    order_number = _text(record.get("SiparisNo")) or _text(record.get("ID"))
    if not order_number:
        logger.warning("Skipping remote order without SiparisNo or ID")
        return None

    delivery = record.get("TeslimatAdresi")
    if not isinstance(delivery, Mapping):
        delivery = {}

    declared_total = None
    for key in DECLARED_TOTAL_KEYS:
        declared_total = _decimal(record.get(key))
        if declared_total is not None:
            break

    return RemoteOrder(
        order_number=order_number,
        remote_id=_int(record.get("ID")) or 0,
        order_date=_text(record.get("SiparisTarihi")),
        first_name=_text(record.get("UyeAdi")),
        last_name=_text(record.get("UyeSoyadi")),
        email=_text(record.get("Mail")),
        phone=_text(delivery.get("AliciTelefon")),
        shipping_address=ShippingAddress(
            address1=_text(delivery.get("Adres")),
            city=_text(delivery.get("Il")),
            district=_text(delivery.get("Ilce")),
            postal_code=_text(delivery.get("PostaKodu")),
            phone=_text(delivery.get("AliciTelefon")),
        ),
        status_code=_int(record.get("SiparisDurumu")),
        line_items=tuple(
            _parse_line_item(product, currency)
            for product in _as_list(record.get("Urunler"), LINE_ITEM_KEY)
            if isinstance(product, Mapping)
        ),
        declared_total=declared_total,
        currency=currency,
    )


def parse_order_page(result: Any, currency: str = "TRY") -> RemoteOrderPage:
    """
    Parses a serialized `SelectSiparis` result.

    Records without an order number are skipped but still counted in
    `record_count`.

    Args:
        result: Serialized response, wrapped in `SelectSiparisResult` or not
        currency: Currency of the shop's amounts

    Returns:
        RemoteOrderPage: Orders in response order and the raw record count

    Raises:
        RemoteConnectionError: If the payload is not structured data
    """
    if result is None:
        return RemoteOrderPage()

    if isinstance(result, (str, bytes)):
        snippet = result[:80] if isinstance(result, str) else result[:80].decode("utf-8", "replace")
        raise RemoteConnectionError(f"Unexpected text response from Ticimax: {snippet!r}")

    if isinstance(result, Mapping) and RESULT_KEY in result:
        result = result[RESULT_KEY]
        if result is None:
            return RemoteOrderPage()

    if isinstance(result, Mapping):
        if ORDER_KEY in result:
            records = _as_list(result[ORDER_KEY])
        elif "SiparisNo" in result:
            records = [result]
        else:
            records = []
    elif isinstance(result, (list, tuple)):
        records = [record for record in result if record is not None]
    else:
        raise RemoteConnectionError(f"Unexpected response type from Ticimax: {type(result).__name__}")

    orders = []
    for record in records:
        if not isinstance(record, Mapping):
            raise RemoteConnectionError(f"Unexpected order record type: {type(record).__name__}")
        order = _parse_order(record, currency)
        if order is not None:
            orders.append(order)
    return RemoteOrderPage(orders=orders, record_count=len(records))


def parse_order_response(result: Any, currency: str = "TRY") -> List[RemoteOrder]:
    """Orders of a serialized `SelectSiparis` result, see `parse_order_page`."""
    return parse_order_page(result, currency).orders

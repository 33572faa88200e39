"""Unit tests for domain models and value objects."""

import json
from datetime import date
from decimal import Decimal

import pytest

from order_import.domain.models import (
    UNRESTRICTED,
    LedgerEntry,
    LineItem,
    NormalizedOrder,
    OrderFilter,
    OrderStatus,
    Pagination,
    RemoteConnectionConfig,
    RemoteOrder,
    SyncStatus,
)
from order_import.domain.value_objects import Money


class TestMoney:
    def test_quantizes_to_cents(self):
        assert Money(Decimal("10.005")).amount == Decimal("10.01")

    def test_arithmetic(self):
        total = (Money(Decimal("100")) + Money(Decimal("18"))) * 2
        assert total == Money(Decimal("236"))

    def test_rejects_mixed_currencies(self):
        with pytest.raises(ValueError):
            Money(Decimal("1"), "TRY") + Money(Decimal("1"), "EUR")

    @pytest.mark.parametrize(
        "value, expected",
        [("12,50", "12.50"), (7.1, "7.10"), (None, "0.00"), ("n/a", "0.00"), ("NaN", "0.00")],
    )
    def test_parse_is_lenient(self, value, expected):
        assert Money.parse(value).amount == Decimal(expected)

    def test_api_string(self):
        assert Money(Decimal("118")).to_api_string() == "118.00"


class TestLineItem:
    @pytest.mark.parametrize("quantity", [0, -3])
    def test_quantity_never_below_one(self, quantity):
        item = LineItem("Shirt", quantity, Money(Decimal("10")), Money(Decimal("2")))
        assert item.quantity == 1

    def test_line_total_includes_tax(self):
        item = LineItem("Shirt", 3, Money(Decimal("10")), Money(Decimal("1.80")))
        assert item.unit_price.amount == Decimal("11.80")
        assert item.line_total.amount == Decimal("35.40")


class TestOrderStatus:
    def test_known_code(self):
        assert OrderStatus.from_code(5) == OrderStatus.SHIPPED
        assert OrderStatus.from_code("7") == OrderStatus.CANCELLED

    @pytest.mark.parametrize("code", [18, 99, -1, None, "x"])
    def test_unknown_code_is_unrecognized(self, code):
        assert OrderStatus.from_code(code) == OrderStatus.UNRECOGNIZED

    def test_raw_code_is_kept_on_order(self, remote_order_factory):
        order = remote_order_factory(status_code=42)
        assert order.status == OrderStatus.UNRECOGNIZED
        assert order.status_code == 42


class TestNormalizedOrderTotal:
    def test_total_is_sum_of_line_totals(self, remote_order_factory):
        order = NormalizedOrder(remote_order_factory())
        assert order.total.amount == Decimal("286")

    def test_declared_total_is_ignored(self, remote_order_factory):
        order = NormalizedOrder(remote_order_factory(declared_total=Decimal("999")))
        assert order.total.amount == Decimal("286")

    def test_empty_order_total_is_zero(self, remote_order_factory):
        assert NormalizedOrder(remote_order_factory(items=[])).total.is_zero


class TestRemoteOrder:
    def test_requires_order_number(self):
        with pytest.raises(ValueError):
            RemoteOrder(order_number="")

    def test_snapshot_is_json(self, remote_order_factory):
        snapshot = json.loads(remote_order_factory().to_snapshot())

        assert snapshot["order_number"] == "1001"
        assert snapshot["line_items"][0]["base_amount"] == "100.00"
        assert snapshot["shipping_address"]["city"] == "İstanbul"

    def test_list_of_items_is_stored_as_tuple(self):
        order = RemoteOrder(
            order_number="5",
            line_items=[LineItem("A", 1, Money(Decimal("1")), Money(Decimal("0")))],
        )
        assert isinstance(order.line_items, tuple)


class TestOrderFilter:
    def test_unrestricted_encodes_as_minus_one(self):
        wire = OrderFilter().to_wire()

        assert wire["SiparisDurumu"] == -1
        assert wire["EntegrasyonAktarildi"] == -1
        assert wire["UyeID"] == -1
        assert "SiparisTarihiBas" not in wire

    def test_concrete_selector_and_dates(self):
        order_filter = OrderFilter(order_status=1, date_from=date(2025, 1, 1), date_to=date(2025, 1, 31))
        wire = order_filter.to_wire()

        assert wire["SiparisDurumu"] == 1
        assert wire["SiparisTarihiBas"].year == 2025
        assert order_filter.describe()["order_status"] == 1
        assert not order_filter.is_unrestricted

    def test_default_is_unrestricted(self):
        assert OrderFilter().is_unrestricted
        assert OrderFilter().order_status is UNRESTRICTED

    def test_wire_sentinel_is_rejected(self):
        with pytest.raises(ValueError):
            OrderFilter(order_status=-1)

    def test_reversed_date_range_is_rejected(self):
        with pytest.raises(ValueError):
            OrderFilter(date_from=date(2025, 2, 1), date_to=date(2025, 1, 1))


class TestPagination:
    def test_start_index(self):
        assert Pagination(page_number=3, page_size=100).start_index == 200

    def test_wire(self):
        assert Pagination(page_number=1, page_size=1).to_wire() == {
            "BaslangicIndex": 0,
            "KayitSayisi": 1,
            "SiralamaDeger": "ID",
            "SiralamaYonu": "DESC",
        }

    def test_page_number_starts_at_one(self):
        with pytest.raises(ValueError):
            Pagination(page_number=0)


class TestLedgerEntry:
    def test_synced_entry_needs_host_order(self):
        with pytest.raises(ValueError):
            LedgerEntry(shop="s", order_number="1", status=SyncStatus.SYNCED)

    def test_status_string_is_coerced(self):
        entry = LedgerEntry(shop="s", order_number="1", status="failed", error_message="boom")
        assert entry.status is SyncStatus.FAILED


class TestRemoteConnectionConfig:
    def test_repr_hides_member_code(self):
        config = RemoteConnectionConfig(shop="s", wsdl_url="https://x/Servis.svc", member_code="SECRET")
        assert "SECRET" not in repr(config)

"""Shared fixtures: in-memory Shopify and Ticimax fakes and a SQLite-backed ledger."""

from decimal import Decimal
from typing import Any

import pytest

from order_import.db.connection import LedgerDatabase
from order_import.db.ledger_repository import SyncLedger
from order_import.db.shopify_clients.draft_order_client import CreatedOrder
from order_import.domain.models import (
    CustomerDraft,
    CustomerMatch,
    LineItem,
    RemoteConnectionConfig,
    RemoteOrder,
    RemoteOrderPage,
    ShippingAddress,
)
from order_import.domain.value_objects import Money

SHOP = "test-shop.myshopify.com"


class FakeShopify:
    """In-memory stand-in for the Shopify customer and draft order API."""

    def __init__(self):
        self.customers: list[dict[str, Any]] = []
        self.created_customers: list[CustomerDraft] = []
        self.draft_inputs: list[dict[str, Any]] = []
        self.completed: list[str] = []
        self.email_lookups: list[str] = []
        self.phone_lookups: list[str] = []
        self.draft_error: Exception | None = None
        self.customer_error: Exception | None = None
        self.complete_error: Exception | None = None
        self._next_id = 1

    def add_customer(self, customer_id: str, display_name: str, email: str | None = None, phone: str | None = None):
        self.customers.append({"id": customer_id, "displayName": display_name, "email": email, "phone": phone})

    @property
    def api_calls(self) -> int:
        return (
            len(self.email_lookups)
            + len(self.phone_lookups)
            + len(self.created_customers)
            + len(self.draft_inputs)
            + len(self.completed)
        )

    async def find_customer_by_email(self, email: str) -> CustomerMatch | None:
        self.email_lookups.append(email)
        for customer in self.customers:
            if customer["email"] == email:
                return CustomerMatch(customer["id"], customer["displayName"])
        return None

    async def find_customer_by_phone(self, phone: str) -> CustomerMatch | None:
        self.phone_lookups.append(phone)
        for customer in self.customers:
            if customer["phone"] == phone:
                return CustomerMatch(customer["id"], customer["displayName"])
        return None

    async def create_customer(self, draft: CustomerDraft) -> CustomerMatch:
        if self.customer_error:
            raise self.customer_error
        self.created_customers.append(draft)
        customer_id = f"gid://shopify/Customer/{self._next_id}"
        self._next_id += 1
        display_name = f"{draft.first_name} {draft.last_name}".strip()
        self.add_customer(customer_id, display_name, draft.email, draft.phone)
        return CustomerMatch(customer_id, display_name, is_new=True)

    async def create_draft_order(self, draft_input: dict[str, Any]) -> CreatedOrder:
        if self.draft_error:
            raise self.draft_error
        self.draft_inputs.append(draft_input)
        number = len(self.draft_inputs)
        return CreatedOrder(
            order_id=f"gid://shopify/DraftOrder/{number}",
            name=f"#D{number}",
            customer_id=draft_input.get("customerId"),
        )

    async def complete_draft_order(self, draft_order_id: str) -> CreatedOrder:
        if self.complete_error:
            raise self.complete_error
        self.completed.append(draft_order_id)
        number = len(self.completed)
        return CreatedOrder(order_id=f"gid://shopify/Order/{1000 + number}", name=f"#{1000 + number}")


class FakeRemoteSource:
    """Serves pre-built pages of remote orders and records every request."""

    def __init__(
        self, pages: list[list[RemoteOrder] | RemoteOrderPage] | None = None, error: Exception | None = None
    ):
        self.pages = pages or []
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def fetch_page(self, config, order_filter=None, page_size=None, page_number=1):
        self.calls.append({"page_size": page_size, "page_number": page_number, "filter": order_filter})
        if self.error:
            raise self.error
        if page_number > len(self.pages):
            return RemoteOrderPage()
        page = self.pages[page_number - 1]
        if isinstance(page, RemoteOrderPage):
            return page
        return RemoteOrderPage(orders=list(page), record_count=len(page))


def build_remote_order(
    order_number: str = "1001",
    email: str = "a@b.com",
    phone: str = "05321234567",
    items: list[tuple[str, str, int]] | None = None,
    **kwargs,
) -> RemoteOrder:
    """Remote order with (base, tax, quantity) line items."""
    items = items if items is not None else [("100", "18", 2), ("50", "0", 1)]
    line_items = tuple(
        LineItem(
            title=f"Product {index}",
            quantity=quantity,
            base_amount=Money(Decimal(base)),
            tax_amount=Money(Decimal(tax)),
            sku=f"SKU-{index}",
        )
        for index, (base, tax, quantity) in enumerate(items, start=1)
    )
    defaults = {
        "remote_id": int(order_number) if order_number.isdigit() else 0,
        "order_date": "2025-03-01T10:15:00",
        "first_name": "Ayşe",
        "last_name": "Yılmaz",
        "shipping_address": ShippingAddress(
            address1="Bağdat Cad. No: 10",
            city="İstanbul",
            district="Kadıköy",
            postal_code="34710",
            phone=phone,
        ),
    }
    defaults.update(kwargs)
    return RemoteOrder(order_number=order_number, email=email, phone=phone, line_items=line_items, **defaults)


@pytest.fixture
def shop() -> str:
    return SHOP


@pytest.fixture
def fake_shopify() -> FakeShopify:
    return FakeShopify()


@pytest.fixture
def remote_order_factory():
    return build_remote_order


@pytest.fixture
def remote_config() -> RemoteConnectionConfig:
    return RemoteConnectionConfig(
        shop=SHOP,
        wsdl_url="https://www.example-shop.com/Servis/SiparisServis.svc",
        member_code="TEST-UYE-KODU",
    )


@pytest.fixture
def ledger_factory(tmp_path):
    """Returns an async callable building a ledger on a fresh SQLite file."""

    async def make() -> SyncLedger:
        database = LedgerDatabase(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False)
        await database.create_tables()
        return SyncLedger(database)

    return make


@pytest.fixture
def remote_source_factory():
    return FakeRemoteSource

"""Tests for the single-order transfer flow."""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from order_import.domain.models import SyncStatus
from order_import.services.orders.guards import DuplicateGuard
from order_import.services.orders.normalizer import OrderNormalizer
from order_import.services.orders.orchestrator import OrderTransferOrchestrator
from order_import.services.orders.resolvers import CustomerResolver
from order_import.utils.error_handler import (
    DuplicateError,
    LedgerException,
    ResolutionFailure,
    ShopifyAPIException,
    TransferFailure,
)


def _orchestrator(fake_shopify, ledger, complete_draft_orders=False, guard=None):
    return OrderTransferOrchestrator(
        customer_resolver=CustomerResolver(fake_shopify, country_code="TR"),
        host=fake_shopify,
        ledger=ledger,
        guard=guard,
        complete_draft_orders=complete_draft_orders,
    )


@pytest.fixture
def normalized_order(remote_order_factory):
    return OrderNormalizer().normalize(remote_order_factory())


class TestSuccessfulTransfer:
    @pytest.mark.asyncio
    async def test_new_customer_and_draft_order(self, fake_shopify, ledger_factory, shop, normalized_order):
        ledger = await ledger_factory()

        result = await _orchestrator(fake_shopify, ledger).transfer(shop, normalized_order)

        assert result.host_order_id == "gid://shopify/DraftOrder/1"
        assert result.host_order_name == "#D1"
        assert result.customer.is_new
        assert not result.completed

        draft_input = fake_shopify.draft_inputs[0]
        assert draft_input["customerId"] == "gid://shopify/Customer/1"
        assert [item["originalUnitPrice"] for item in draft_input["lineItems"]] == ["118.00", "50.00"]
        assert fake_shopify.created_customers[0].phone == "+905321234567"

        entry = await ledger.find_synced(shop, "1001")
        assert entry.total_amount == Decimal("286.00")
        assert entry.customer_phone == "+905321234567"
        assert entry.host_customer_id == "gid://shopify/Customer/1"
        assert entry.synced_at is not None
        assert '"order_number": "1001"' in entry.order_snapshot

    @pytest.mark.asyncio
    async def test_rerun_is_rejected_without_host_calls(self, fake_shopify, ledger_factory, shop, normalized_order):
        ledger = await ledger_factory()
        orchestrator = _orchestrator(fake_shopify, ledger)
        await orchestrator.transfer(shop, normalized_order)
        calls_after_first_run = fake_shopify.api_calls

        with pytest.raises(DuplicateError) as exc_info:
            await orchestrator.transfer(shop, normalized_order)

        assert "#D1" in exc_info.value.message
        assert fake_shopify.api_calls == calls_after_first_run
        assert len(await ledger.list(shop)) == 1

    @pytest.mark.asyncio
    async def test_existing_customer_is_reused(self, fake_shopify, ledger_factory, shop, normalized_order):
        fake_shopify.add_customer("gid://shopify/Customer/42", "Ayşe Y.", email="a@b.com")
        ledger = await ledger_factory()

        result = await _orchestrator(fake_shopify, ledger).transfer(shop, normalized_order)

        assert result.customer.customer_id == "gid://shopify/Customer/42"
        assert fake_shopify.created_customers == []
        assert result.ledger_entry.customer_name == "Ayşe Y."


class TestCompletion:
    @pytest.mark.asyncio
    async def test_draft_is_completed_when_enabled(self, fake_shopify, ledger_factory, shop, normalized_order):
        ledger = await ledger_factory()

        result = await _orchestrator(fake_shopify, ledger, complete_draft_orders=True).transfer(shop, normalized_order)

        assert result.completed
        assert result.host_order_id == "gid://shopify/Order/1001"
        assert result.host_order_name == "#1001"
        assert fake_shopify.completed == ["gid://shopify/DraftOrder/1"]
        assert (await ledger.find_synced(shop, "1001")).host_order_id == "gid://shopify/Order/1001"

    @pytest.mark.asyncio
    async def test_completion_failure_keeps_draft(self, fake_shopify, ledger_factory, shop, normalized_order):
        fake_shopify.complete_error = ShopifyAPIException("draftOrderComplete failed: payment gateway missing")
        ledger = await ledger_factory()

        result = await _orchestrator(fake_shopify, ledger, complete_draft_orders=True).transfer(shop, normalized_order)

        assert not result.completed
        assert result.host_order_id == "gid://shopify/DraftOrder/1"
        assert (await ledger.find(shop, "1001")).status == SyncStatus.SYNCED

    @pytest.mark.asyncio
    async def test_unreadable_completion_response_keeps_draft_recorded(
        self, fake_shopify, ledger_factory, shop, normalized_order
    ):
        fake_shopify.complete_error = json.JSONDecodeError("Expecting value", "", 0)
        ledger = await ledger_factory()
        orchestrator = _orchestrator(fake_shopify, ledger, complete_draft_orders=True)

        result = await orchestrator.transfer(shop, normalized_order)

        assert not result.completed
        entry = await ledger.find_synced(shop, "1001")
        assert entry.host_order_id == "gid://shopify/DraftOrder/1"

        with pytest.raises(DuplicateError):
            await orchestrator.transfer(shop, normalized_order)
        assert len(fake_shopify.draft_inputs) == 1


class TestFailures:
    @pytest.mark.asyncio
    async def test_host_rejection_is_recorded_and_retry_succeeds(
        self, fake_shopify, ledger_factory, shop, normalized_order
    ):
        ledger = await ledger_factory()
        orchestrator = _orchestrator(fake_shopify, ledger)
        fake_shopify.draft_error = ShopifyAPIException("HTTP 502: Bad Gateway", api_response_code=502)

        with pytest.raises(TransferFailure) as exc_info:
            await orchestrator.transfer(shop, normalized_order)

        assert exc_info.value.host_error == "HTTP 502: Bad Gateway"
        failed = await ledger.find(shop, "1001")
        assert failed.status == SyncStatus.FAILED
        assert failed.error_message == "HTTP 502: Bad Gateway"
        assert failed.host_customer_id == "gid://shopify/Customer/1"

        fake_shopify.draft_error = None
        result = await orchestrator.transfer(shop, normalized_order)

        assert result.host_order_name == "#D1"
        assert len(fake_shopify.created_customers) == 1
        entries = await ledger.list(shop)
        assert [entry.status for entry in entries].count(SyncStatus.SYNCED) == 1
        assert [entry.status for entry in entries].count(SyncStatus.FAILED) == 1

    @pytest.mark.asyncio
    async def test_resolution_failure_is_recorded(self, fake_shopify, ledger_factory, shop, normalized_order):
        fake_shopify.customer_error = ShopifyAPIException("HTTP 500: oops", api_response_code=500)
        ledger = await ledger_factory()

        with pytest.raises(ResolutionFailure):
            await _orchestrator(fake_shopify, ledger).transfer(shop, normalized_order)

        failed = await ledger.find(shop, "1001")
        assert failed.status == SyncStatus.FAILED
        assert failed.error_message == "HTTP 500: oops"
        assert fake_shopify.draft_inputs == []

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_transfer_failure(
        self, fake_shopify, ledger_factory, shop, normalized_order
    ):
        fake_shopify.draft_error = RuntimeError("serializer exploded")
        ledger = await ledger_factory()

        with pytest.raises(TransferFailure):
            await _orchestrator(fake_shopify, ledger).transfer(shop, normalized_order)

        assert (await ledger.find(shop, "1001")).error_message == "serializer exploded"

    @pytest.mark.asyncio
    async def test_import_detected_right_before_host_call(
        self, fake_shopify, ledger_factory, shop, normalized_order
    ):
        ledger = await ledger_factory()
        guard = DuplicateGuard(ledger)
        guard.ensure_not_synced = AsyncMock(
            side_effect=[None, DuplicateError(shop, "1001", host_order_name="#D9")]
        )

        with pytest.raises(DuplicateError):
            await _orchestrator(fake_shopify, ledger, guard=guard).transfer(shop, normalized_order)

        assert fake_shopify.draft_inputs == []
        assert await ledger.list(shop) == []


class TestSyncedRowWrite:
    @staticmethod
    def _flaky_append(ledger, failures):
        """Makes the first `failures` synced appends raise a ledger error."""
        real_append = ledger.append
        remaining = {"failures": failures}

        async def append(entry):
            if entry.status == SyncStatus.SYNCED and remaining["failures"] > 0:
                remaining["failures"] -= 1
                raise LedgerException("database is locked", operation="append")
            return await real_append(entry)

        ledger.append = append

    @pytest.mark.asyncio
    async def test_ledger_error_after_draft_creation_is_retried(
        self, fake_shopify, ledger_factory, shop, normalized_order
    ):
        ledger = await ledger_factory()
        self._flaky_append(ledger, failures=1)

        with patch("order_import.db.base.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await _orchestrator(fake_shopify, ledger).transfer(shop, normalized_order)

        assert sleep.await_count == 1
        assert result.ledger_entry.status == SyncStatus.SYNCED
        assert (await ledger.find_synced(shop, "1001")).host_order_id == "gid://shopify/DraftOrder/1"
        assert len(fake_shopify.draft_inputs) == 1

    @pytest.mark.asyncio
    async def test_persistent_ledger_error_names_the_host_order(
        self, fake_shopify, ledger_factory, shop, normalized_order, caplog
    ):
        ledger = await ledger_factory()
        self._flaky_append(ledger, failures=10)

        with patch("order_import.db.base.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(TransferFailure) as exc_info:
                await _orchestrator(fake_shopify, ledger).transfer(shop, normalized_order)

        assert "#D1" in exc_info.value.message
        assert exc_info.value.host_error == "database is locked"
        critical = [record for record in caplog.records if record.levelname == "CRITICAL"]
        assert critical
        assert critical[-1].host_order_id == "gid://shopify/DraftOrder/1"
        assert await ledger.list(shop) == []

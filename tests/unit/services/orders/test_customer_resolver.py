"""Tests for customer resolution."""

import pytest

from order_import.domain.models import CustomerMatch, NormalizedOrder
from order_import.services.orders.resolvers import CustomerResolver
from order_import.utils.error_handler import ResolutionFailure, ShopifyAPIException


def _order(factory, **kwargs):
    remote = factory(**kwargs)
    phone = "+905321234567" if remote.phone else None
    return NormalizedOrder(remote=remote, phone=phone)


class TestLookup:
    @pytest.mark.asyncio
    async def test_email_match_wins(self, fake_shopify, remote_order_factory):
        fake_shopify.add_customer("gid://shopify/Customer/1", "By Email", email="a@b.com")
        fake_shopify.add_customer("gid://shopify/Customer/2", "By Phone", phone="+905321234567")
        resolver = CustomerResolver(fake_shopify, country_code="TR")

        match = await resolver.resolve(_order(remote_order_factory))

        assert match.customer_id == "gid://shopify/Customer/1"
        assert fake_shopify.phone_lookups == []

    @pytest.mark.asyncio
    async def test_phone_fallback(self, fake_shopify, remote_order_factory):
        fake_shopify.add_customer("gid://shopify/Customer/2", "By Phone", phone="+905321234567")
        resolver = CustomerResolver(fake_shopify, country_code="TR")

        match = await resolver.resolve(_order(remote_order_factory))

        assert match.customer_id == "gid://shopify/Customer/2"
        assert not match.is_new
        assert fake_shopify.created_customers == []

    @pytest.mark.asyncio
    async def test_lookup_without_email_skips_email_search(self, fake_shopify, remote_order_factory):
        resolver = CustomerResolver(fake_shopify, country_code="TR")

        assert await resolver.lookup(_order(remote_order_factory, email="")) is None
        assert fake_shopify.email_lookups == []
        assert fake_shopify.phone_lookups == ["+905321234567"]

    @pytest.mark.asyncio
    async def test_lookup_error(self, fake_shopify, remote_order_factory):
        async def broken(email):
            raise ShopifyAPIException("HTTP 503: unavailable", api_response_code=503)

        fake_shopify.find_customer_by_email = broken
        resolver = CustomerResolver(fake_shopify, country_code="TR")

        with pytest.raises(ResolutionFailure) as exc_info:
            await resolver.lookup(_order(remote_order_factory))

        assert exc_info.value.host_error == "HTTP 503: unavailable"
        assert exc_info.value.order_number == "1001"


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_customer_with_address(self, fake_shopify, remote_order_factory):
        resolver = CustomerResolver(fake_shopify, country_code="TR")

        match = await resolver.resolve(_order(remote_order_factory))

        assert match.is_new
        draft = fake_shopify.created_customers[0]
        assert (draft.first_name, draft.last_name) == ("Ayşe", "Yılmaz")
        assert draft.email == "a@b.com"
        assert draft.phone == "+905321234567"
        assert draft.address == {
            "address1": "Bağdat Cad. No: 10",
            "city": "İstanbul",
            "province": "Kadıköy",
            "zip": "34710",
            "countryCode": "TR",
        }

    @pytest.mark.asyncio
    async def test_creation_error(self, fake_shopify, remote_order_factory):
        fake_shopify.customer_error = ShopifyAPIException(
            "customerCreate failed: email: has already been taken",
            user_errors=[{"field": ["email"], "message": "has already been taken"}],
        )
        resolver = CustomerResolver(fake_shopify, country_code="TR")

        with pytest.raises(ResolutionFailure) as exc_info:
            await resolver.resolve(_order(remote_order_factory))

        assert "has already been taken" in exc_info.value.host_error

    @pytest.mark.asyncio
    async def test_anonymous_order_gets_no_customer(self, fake_shopify, remote_order_factory):
        resolver = CustomerResolver(fake_shopify, country_code="TR")
        order = _order(remote_order_factory, email="", phone="", first_name="", last_name="")

        assert await resolver.resolve(order) is None
        assert fake_shopify.api_calls == 0


class TestPrefetched:
    @pytest.mark.asyncio
    async def test_prefetched_match_is_used_as_is(self, fake_shopify, remote_order_factory):
        resolver = CustomerResolver(fake_shopify, country_code="TR")
        prefetched = CustomerMatch("gid://shopify/Customer/77", "Prefetched")

        assert await resolver.resolve(_order(remote_order_factory), prefetched=prefetched) is prefetched
        assert fake_shopify.api_calls == 0

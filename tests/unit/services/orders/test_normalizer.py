"""Tests for order normalization."""

from decimal import Decimal

from order_import.services.orders.normalizer import OrderNormalizer


class TestOrderNormalizer:
    def test_turkish_mobile_is_canonicalized(self, remote_order_factory):
        order = OrderNormalizer().normalize(remote_order_factory(phone="0532 123 45 67"))

        assert order.phone == "+905321234567"
        assert order.remote.phone == "0532 123 45 67"

    def test_unusable_phone_is_dropped(self, remote_order_factory):
        order = OrderNormalizer().normalize(remote_order_factory(phone="12-34"))

        assert order.phone is None
        assert order.has_contact

    def test_no_contact(self, remote_order_factory):
        order = OrderNormalizer().normalize(remote_order_factory(email=" ", phone=""))

        assert order.email is None
        assert not order.has_contact

    def test_declared_total_mismatch_keeps_computed(self, remote_order_factory, caplog):
        order = OrderNormalizer().normalize(remote_order_factory(declared_total=Decimal("300")))

        assert order.total.amount == Decimal("286.00")
        assert "differs from declared total" in caplog.text

"""
DraftOrderBuilder - maps a normalized order to a Shopify `DraftOrderInput`.

Ticimax amounts are tax-exclusive; the tax is folded into the unit price
(`originalUnitPrice = base + tax`). This is not configurable.
"""

from typing import Any

from order_import.core.config import Settings, get_settings
from order_import.domain.models import CustomerMatch, NormalizedOrder


class DraftOrderBuilder:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def note(self, order: NormalizedOrder) -> str:
        return f"Ticimax order no: {order.order_number}\nOrder date: {order.remote.order_date}"

    def tags(self, order: NormalizedOrder) -> list[str]:
        return [self.settings.import_tag, self.settings.order_tag(order.order_number)]

    def line_items(self, order: NormalizedOrder) -> list[dict[str, Any]]:
        return [
            {
                "title": item.title,
                "quantity": item.quantity,
                "originalUnitPrice": item.unit_price.to_api_string(),
                "sku": item.sku,
            }
            for item in order.remote.line_items
        ]

    def shipping_address(self, order: NormalizedOrder) -> dict[str, Any] | None:
        address = order.remote.shipping_address
        if not address.address1:
            return None
        return {
            "address1": address.address1,
            "city": address.city,
            "province": address.district or "",
            "zip": address.postal_code or "",
            "countryCode": self.settings.DEFAULT_COUNTRY_CODE,
            "firstName": order.remote.first_name,
            "lastName": order.remote.last_name,
            "phone": order.phone or "",
        }

    def build(self, order: NormalizedOrder, customer: CustomerMatch | None) -> dict[str, Any]:
        """
        Builds the `draftOrderCreate` input.

        Without a customer the raw email and phone are attached instead.
        """
        draft_input: dict[str, Any] = {
            "note": self.note(order),
            "tags": self.tags(order),
            "lineItems": self.line_items(order),
        }

        if customer is not None:
            draft_input["customerId"] = customer.customer_id
        else:
            if order.email:
                draft_input["email"] = order.email
            if order.phone:
                draft_input["phone"] = order.phone

        shipping_address = self.shipping_address(order)
        if shipping_address:
            draft_input["shippingAddress"] = shipping_address

        return draft_input

"""CustomerResolver service - finds or creates the Shopify customer of an order."""

import logging
from typing import Any

from order_import.core.config import get_settings
from order_import.domain.models import CustomerDraft, CustomerMatch, NormalizedOrder
from order_import.services.orders.interfaces import ICustomerDirectory
from order_import.utils.error_handler import ResolutionFailure, ShopifyAPIException

logger = logging.getLogger(__name__)


class CustomerResolver:
    """
    Resolves a customer by email, then by phone, and creates one otherwise.

    Created customers are never deleted, even when the order transfer that
    needed them fails afterwards.
    """

    def __init__(self, directory: ICustomerDirectory, country_code: str | None = None):
        """
        Args:
            directory: Host customer API
            country_code: Country used for created addresses (defaults to DEFAULT_COUNTRY_CODE)
        """
        self.directory = directory
        self.country_code = country_code or get_settings().DEFAULT_COUNTRY_CODE

    async def lookup(self, order: NormalizedOrder) -> CustomerMatch | None:
        """
        Read-only half of `resolve`: email match first, then phone match.

        Raises:
            ResolutionFailure: If the host API fails
        """
        try:
            if order.email:
                match = await self.directory.find_customer_by_email(order.email)
                if match:
                    logger.debug(f"Order #{order.order_number}: customer {match.customer_id} matched by email")
                    return match

            if order.phone:
                match = await self.directory.find_customer_by_phone(order.phone)
                if match:
                    logger.debug(f"Order #{order.order_number}: customer {match.customer_id} matched by phone")
                    return match
        except ShopifyAPIException as e:
            raise ResolutionFailure(
                f"Customer lookup failed for order #{order.order_number}: {e.message}",
                order_number=order.order_number,
                host_error=e.message,
            ) from e

        return None

    async def resolve(self, order: NormalizedOrder, prefetched: CustomerMatch | None = None) -> CustomerMatch | None:
        """
        Returns the customer to attach to the order.

        Args:
            order: Order being transferred
            prefetched: Result of an earlier `lookup`, used as is

        Returns:
            CustomerMatch | None: None only when the order has no name, email or phone

        Raises:
            ResolutionFailure: If a lookup or the creation is rejected
        """
        if prefetched is not None:
            return prefetched

        match = await self.lookup(order)
        if match:
            return match

        draft = self._build_draft(order)
        if not (draft.email or draft.phone or draft.first_name or draft.last_name):
            logger.warning(f"Order #{order.order_number} has no customer details, importing without a customer")
            return None

        try:
            created = await self.directory.create_customer(draft)
        except ShopifyAPIException as e:
            raise ResolutionFailure(
                f"Customer creation failed for order #{order.order_number}: {e.message}",
                order_number=order.order_number,
                host_error=e.message,
            ) from e

        logger.info(f"Order #{order.order_number}: created customer {created.customer_id}")
        return created

    def _build_draft(self, order: NormalizedOrder) -> CustomerDraft:
        remote = order.remote
        return CustomerDraft(
            first_name=remote.first_name,
            last_name=remote.last_name,
            email=order.email,
            phone=order.phone,
            address=self._build_address(order),
        )

    def _build_address(self, order: NormalizedOrder) -> dict[str, Any] | None:
        address = order.remote.shipping_address
        if not address.address1:
            return None
        return {
            "address1": address.address1,
            "city": address.city,
            "province": address.district or "",
            "zip": address.postal_code or "",
            "countryCode": self.country_code,
        }

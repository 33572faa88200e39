"""
Customer domain models.

`CustomerMatch` is the outcome of resolving a Shopify customer for an order;
`CustomerDraft` is the input used when one has to be created.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CustomerMatch:
    """
    Shopify customer linked to an order.

    Attributes:
        customer_id: Shopify GID (gid://shopify/Customer/...)
        display_name: Name shown in Shopify
        is_new: Whether the customer was created during this resolution
    """

    customer_id: str
    display_name: str = ""
    is_new: bool = False

    def __post_init__(self) -> None:
        if not self.customer_id:
            raise ValueError("Customer id is required")


@dataclass
class CustomerDraft:
    """
    Data needed to create a Shopify customer.

    Attributes:
        first_name: First name
        last_name: Last name
        email: Email, optional
        phone: Canonical phone, optional
        address: Shopify `MailingAddressInput` dict, optional
    """

    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    address: dict[str, Any] | None = field(default=None)

    def to_input(self) -> dict[str, Any]:
        """Build the `CustomerInput` payload for `customerCreate`."""
        payload: dict[str, Any] = {
            "firstName": self.first_name,
            "lastName": self.last_name,
        }
        if self.email:
            payload["email"] = self.email
        if self.phone:
            payload["phone"] = self.phone
        if self.address:
            payload["addresses"] = [self.address]
        return payload

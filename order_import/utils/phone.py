"""
Phone number normalization for Turkish storefront data.

Ticimax stores whatever the buyer typed ("0532 123 45 67", "+90 (532) ...",
"5321234567"). Shopify expects E.164, so we canonicalize before any customer
lookup or creation.
"""

import re
from typing import Any, Optional

from order_import.utils.error_handler import InvalidPhoneError

DOMESTIC_COUNTRY_CODE = "90"
DOMESTIC_NUMBER_LENGTH = 10
MOBILE_PREFIX = "5"

_NON_DIGITS = re.compile(r"\D")


def parse_phone(raw: Any) -> str:
    """
    Converts a freeform phone into `+<country><digits>`.

    Args:
        raw: Phone as typed by the buyer

    Returns:
        str: Canonical international number

    Raises:
        InvalidPhoneError: If fewer than 10 digits remain
    """
    digits = _NON_DIGITS.sub("", raw if isinstance(raw, str) else str(raw or ""))

    if digits.startswith("0"):
        digits = digits[1:]

    # 5XX XXX XX XX
    if len(digits) == DOMESTIC_NUMBER_LENGTH and digits.startswith(MOBILE_PREFIX):
        return f"+{DOMESTIC_COUNTRY_CODE}{digits}"

    # 90 5XX XXX XX XX
    if len(digits) == len(DOMESTIC_COUNTRY_CODE) + DOMESTIC_NUMBER_LENGTH and digits.startswith(DOMESTIC_COUNTRY_CODE):
        return f"+{digits}"

    # Best effort for foreign numbers
    if len(digits) >= DOMESTIC_NUMBER_LENGTH:
        return f"+{digits}"

    raise InvalidPhoneError(raw)


def normalize_phone(raw: Any) -> Optional[str]:
    """
    Total variant of `parse_phone`: returns None instead of raising.

    Examples:
        >>> normalize_phone("0532 123 45 67")
        '+905321234567'
        >>> normalize_phone("123") is None
        True
    """
    try:
        return parse_phone(raw)
    except InvalidPhoneError:
        return None

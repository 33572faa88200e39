"""
Money value object for handling monetary amounts with currency.

Ticimax reports amounts as floats or numeric strings; everything is
converted to Decimal and kept at two decimal places (kuruş precision).
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary amount with currency.

    Attributes:
        amount: Amount as Decimal, quantized to two decimals
        currency: ISO 4217 code (e.g., "TRY")

    Example:
        >>> base = Money(amount=Decimal("100"), currency="TRY")
        >>> tax = Money(amount=Decimal("18"), currency="TRY")
        >>> print((base + tax) * 2)
        TRY 236.00
    """

    amount: Decimal
    currency: str = "TRY"

    def __post_init__(self) -> None:
        """Validate money object after initialization."""
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        object.__setattr__(self, "amount", self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

        if not self.currency or len(self.currency) != 3:
            raise ValueError(f"Invalid currency code: {self.currency}")

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects with the same currency."""
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money with {type(other)}")

        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")

        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract two Money objects with the same currency."""
        if not isinstance(other, Money):
            raise TypeError(f"Cannot subtract Money with {type(other)}")

        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")

        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __mul__(self, multiplier: int | Decimal) -> "Money":
        """Multiply money by a quantity."""
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, Decimal)):
            raise TypeError(f"Cannot multiply Money by {type(multiplier)}")

        return Money(amount=self.amount * Decimal(multiplier), currency=self.currency)

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"

    def __repr__(self) -> str:
        return f"Money(amount=Decimal('{self.amount}'), currency='{self.currency}')"

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    def to_api_string(self) -> str:
        """Amount formatted for the Shopify `Money` scalar (e.g. "118.00")."""
        return f"{self.amount:.2f}"

    @classmethod
    def zero(cls, currency: str = "TRY") -> "Money":
        """Create a zero Money object."""
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def parse(cls, value: object, currency: str = "TRY") -> "Money":
        """
        Lenient constructor for upstream payload values.

        Accepts numbers, numeric strings (comma or dot decimal separator)
        and None. Anything unparseable becomes zero.
        """
        if value is None or isinstance(value, bool):
            return cls.zero(currency)

        text = str(value).strip().replace(",", ".")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return cls.zero(currency)

        if not amount.is_finite():
            return cls.zero(currency)
        return cls(amount=amount, currency=currency)

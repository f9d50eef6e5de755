"""
Money helpers shared by the ledger services.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
# Balances within this many currency units of zero count as settled
DUST_THRESHOLD = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str/Decimal to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a monetary amount")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise TypeError(f"Not a monetary amount: {value!r}") from e


def is_positive_amount(value: Any) -> bool:
    """True for finite amounts strictly greater than zero."""
    try:
        amount = to_decimal(value)
    except TypeError:
        return False
    return amount.is_finite() and amount > 0


def quantize_money(value: Any) -> Decimal:
    """Round to two decimal places, half up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    """Convert an amount in currency units to integer minor units."""
    return int(quantize_money(value) * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer minor units back to a two-decimal amount."""
    return (Decimal(cents) / 100).quantize(CENT)

"""Helpers for Decimal normalization of money amounts."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from app.core.errors import InvalidAmount

CENT = Decimal("0.01")
ZERO = Decimal("0")
# Money columns are Numeric(12, 2)
MAX_AMOUNT = Decimal("1e10")


def coerce_decimal(value: Any) -> Decimal:
    """Normalize numeric values coming from SQL aggregates to Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def validate_positive_amount(raw: Any) -> Decimal:
    """Parse an untrusted amount into a positive, cent-rounded Decimal.

    Raises:
        InvalidAmount: when the value is not a finite number above zero
            after rounding to cents, or does not fit a money column.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmount(raw)
    try:
        amount = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
        if not amount.is_finite():
            raise InvalidAmount(raw)
        amount = quantize_money(amount)
    except (InvalidOperation, ValueError):
        raise InvalidAmount(raw, message=f"Amount is not a number: {raw!r}")
    if amount <= ZERO:
        raise InvalidAmount(raw)
    if amount >= MAX_AMOUNT:
        raise InvalidAmount(raw, message=f"Amount must be below {MAX_AMOUNT:,.0f}")
    return amount


__all__ = ["CENT", "ZERO", "MAX_AMOUNT", "coerce_decimal", "quantize_money", "validate_positive_amount"]

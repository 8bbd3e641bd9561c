"""Currency helpers shared by the grouping, settlement and reporting code."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from .errors import ValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a Numeric(10, 2) column holds.
MAX_AMOUNT = Decimal("99999999.99")


def to_decimal(value: Any) -> Decimal:
    """Best-effort conversion of stored values to Decimal for aggregation."""

    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return Decimal("0")
        cleaned = cleaned.replace("$", "").replace("₹", "").replace(",", "")
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return Decimal("0")
    return Decimal("0")


def parse_amount(value: Any, field: str) -> Decimal:
    """Strict conversion for operator input; raises ``ValidationError`` on junk."""

    if isinstance(value, bool) or value is None:
        raise ValidationError(field, "must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValidationError(field, "must be a number") from exc
    else:
        raise ValidationError(field, "must be a number")
    if not amount.is_finite():
        raise ValidationError(field, "must be a finite number")
    return amount


def quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP) if value else ZERO


__all__ = ["MAX_AMOUNT", "TWOPLACES", "ZERO", "parse_amount", "quantize_currency", "to_decimal"]

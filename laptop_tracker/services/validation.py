from __future__ import annotations

from typing import Any

from ..core.conditions import CONDITION_CHOICES, normalize_condition
from ..core.errors import ValidationError
from ..core.money import MAX_AMOUNT, parse_amount


def _require_text(unit: Any, field: str) -> None:
    value = getattr(unit, field, None)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "is required")


def _require_amount(value: Any, field: str) -> None:
    amount = parse_amount(value, field)
    if amount <= 0:
        raise ValidationError(field, "must be a positive number")
    if amount > MAX_AMOUNT:
        raise ValidationError(field, f"must not exceed {MAX_AMOUNT}")


def validate_unit(unit: Any) -> None:
    """Reject a stock unit whose fields could not be grouped or valued."""

    _require_text(unit, "id")
    _require_text(unit, "brand")
    _require_text(unit, "model")
    _require_text(unit, "storage")

    ram = getattr(unit, "ram", None)
    if isinstance(ram, bool) or not isinstance(ram, int) or ram <= 0:
        raise ValidationError("ram", "must be a positive whole number of GB")

    if normalize_condition(getattr(unit, "condition", None)) is None:
        raise ValidationError("condition", f"must be one of {', '.join(CONDITION_CHOICES)}")

    _require_amount(getattr(unit, "buying_cost", None), "buying_cost")

    target = getattr(unit, "target_selling_price", None)
    if target is not None:
        _require_amount(target, "target_selling_price")

    if getattr(unit, "date_added", None) is None:
        raise ValidationError("date_added", "is required")

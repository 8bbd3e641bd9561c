"""Sell units out of a stock group.

``settle_sale`` is pure: it decides which units leave stock and builds the sale
row without touching the database. ``sell_from_stock`` wraps it in a single
store transaction (read stock, regroup, settle, remove + append).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, ValidationError
from ..core.money import MAX_AMOUNT, parse_amount, quantize_currency, to_decimal
from ..core.timeutil import utcnow
from ..crud.sales import commit_sale
from ..crud.stock import list_stock
from ..models.laptop import SoldLaptop
from .grouping import LaptopGroup, find_group, group_units, oldest_first

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleSettlement:
    record: SoldLaptop
    removed_ids: frozenset[str]
    sold_units: tuple[Any, ...]
    remaining_units: tuple[Any, ...]


@dataclass(frozen=True)
class SaleOutcome:
    sale: SoldLaptop
    removed_unit_ids: list[str]
    remaining_group: LaptopGroup | None


def new_sale_id() -> str:
    return f"sale-{uuid4().hex}"


def _validate_quantity(quantity: Any, available: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity", "must be a whole number")
    if quantity < 1:
        raise ValidationError("quantity", "must be at least 1")
    if quantity > available:
        raise ValidationError("quantity", f"cannot sell more than available quantity ({available})")
    return quantity


def _validate_price(unit_price: Any) -> Decimal:
    # Rounded here so the stored price and the profit derived from it agree.
    price = quantize_currency(parse_amount(unit_price, "unit_price"))
    if price <= 0:
        raise ValidationError("unit_price", "must be greater than zero")
    if price > MAX_AMOUNT:
        raise ValidationError("unit_price", f"must not exceed {MAX_AMOUNT}")
    return price


def settle_sale(
    group: LaptopGroup,
    quantity: int,
    unit_price: Decimal | float | int | str,
    *,
    sold_at: datetime | None = None,
) -> SaleSettlement:
    """Pick the oldest ``quantity`` units of ``group`` and build their sale record."""

    quantity = _validate_quantity(quantity, group.quantity)
    price = _validate_price(unit_price)

    # Members normally arrive oldest-first already; re-sort in case a caller built the group by hand.
    ordered = oldest_first(group.members)
    sold = tuple(ordered[:quantity])
    remaining = tuple(ordered[quantity:])

    rep = group.representative
    cost = quantize_currency(to_decimal(rep.buying_cost))
    profit = quantize_currency((price - cost) * quantity)
    if abs(profit) > MAX_AMOUNT:
        raise ValidationError("unit_price", "total profit is too large to record")
    record = SoldLaptop(
        sale_id=new_sale_id(),
        brand=rep.brand,
        model=rep.model,
        processor=rep.processor,
        ram=rep.ram,
        storage=rep.storage,
        graphics_card=rep.graphics_card,
        condition=str(getattr(rep.condition, "value", rep.condition)),
        buying_cost_per_unit=cost,
        final_selling_price_per_unit=price,
        quantity_sold=quantity,
        total_profit=profit,
        date_sold=sold_at or utcnow(),
        date_added_original=rep.date_added,
        image_url=rep.image_url,
    )
    return SaleSettlement(
        record=record,
        removed_ids=frozenset(unit.id for unit in sold),
        sold_units=sold,
        remaining_units=remaining,
    )


def sell_from_stock(
    db: Session,
    *,
    unit_id: str,
    quantity: int,
    unit_price: Decimal | float | int | str,
) -> SaleOutcome:
    """Sell ``quantity`` units from the group that currently holds ``unit_id``."""

    groups = group_units(list_stock(db, for_update=True))
    group = find_group(groups, unit_id)
    if group is None:
        # Release the row locks taken by the read.
        db.rollback()
        raise NotFoundError(f"Laptop {unit_id} is not in stock", details={"unit_id": unit_id})

    try:
        settlement = settle_sale(group, quantity, unit_price)
    except ValidationError:
        db.rollback()
        raise

    removed_ids = [unit.id for unit in settlement.sold_units]
    remaining = list(settlement.remaining_units)
    sale = commit_sale(db, settlement.removed_ids, settlement.record)
    logger.info(
        "sale.committed",
        extra={
            "extra_data": {
                "sale_id": sale.sale_id,
                "quantity": sale.quantity_sold,
                "total_profit": str(sale.total_profit),
                "removed_unit_ids": removed_ids,
            }
        },
    )

    remaining_group = None
    if remaining:
        remaining_group = LaptopGroup(key=group.key, representative=remaining[0], members=remaining)
    return SaleOutcome(sale=sale, removed_unit_ids=removed_ids, remaining_group=remaining_group)


__all__ = [
    "SaleOutcome",
    "SaleSettlement",
    "new_sale_id",
    "sell_from_stock",
    "settle_sale",
]

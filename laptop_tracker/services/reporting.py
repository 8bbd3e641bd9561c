from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Sequence

from ..core.conditions import CONDITION_CHOICES, normalize_condition
from ..core.money import ZERO, quantize_currency, to_decimal
from .grouping import group_units

HUNDRED = Decimal(100)
RECENT_LIMIT = 5
PERCENT_PLACES = Decimal("0.01")


def _condition_label(value: Any) -> str:
    return normalize_condition(value) or str(getattr(value, "value", value))


def _ranked_amounts(totals: Dict[str, Decimal]) -> list[dict[str, Any]]:
    rows = [{"label": label, "amount": quantize_currency(amount)} for label, amount in totals.items()]
    # list.sort is stable with reverse=True, so ties keep first-seen order.
    rows.sort(key=lambda row: row["amount"], reverse=True)
    return rows


def _ranked_counts(totals: Dict[str, int]) -> list[dict[str, Any]]:
    rows = [{"label": label, "count": count} for label, count in totals.items()]
    rows.sort(key=lambda row: row["count"], reverse=True)
    return rows


def _sale_value(sale: Any) -> Decimal:
    return to_decimal(sale.final_selling_price_per_unit) * Decimal(sale.quantity_sold or 0)


def _ratio(numerator: Decimal, denominator: Decimal | int) -> Decimal:
    if not denominator:
        return ZERO
    return quantize_currency(numerator / Decimal(denominator))


def calculate_dashboard(stock: Sequence[Any], sales: Iterable[Any]) -> Dict[str, Any]:
    """Headline numbers for the dashboard cards plus the latest activity.

    ``stock`` and ``sales`` are expected newest first, the order the store
    returns them in; ``recent_stock`` and ``recent_sales`` are the first
    ``RECENT_LIMIT`` of each.
    """

    sales = list(sales)
    stock_value = sum((to_decimal(unit.buying_cost) for unit in stock), Decimal("0"))
    sales_value = sum((_sale_value(sale) for sale in sales), Decimal("0"))
    total_profit = sum((to_decimal(sale.total_profit) for sale in sales), Decimal("0"))
    return {
        "stock_count": len(stock),
        "group_count": len(group_units(stock)),
        "stock_value": quantize_currency(stock_value),
        "sales_value": quantize_currency(sales_value),
        "total_profit": quantize_currency(total_profit),
        "recent_stock": list(stock[:RECENT_LIMIT]),
        "recent_sales": sales[:RECENT_LIMIT],
    }


def stock_summary(stock: Sequence[Any]) -> Dict[str, Any]:
    by_brand: Dict[str, int] = {}
    by_condition: Dict[str, int] = {condition: 0 for condition in CONDITION_CHOICES}
    for unit in stock:
        by_brand[unit.brand] = by_brand.get(unit.brand, 0) + 1
        label = _condition_label(unit.condition)
        by_condition[label] = by_condition.get(label, 0) + 1
    return {
        "total_stock": len(stock),
        "by_brand": _ranked_counts(by_brand),
        "by_condition": _ranked_counts(by_condition),
    }


def stock_value_summary(stock: Sequence[Any]) -> Dict[str, Any]:
    total = Decimal("0")
    by_brand: Dict[str, Decimal] = {}
    by_condition: Dict[str, Decimal] = {condition: Decimal("0") for condition in CONDITION_CHOICES}
    for unit in stock:
        cost = to_decimal(unit.buying_cost)
        total += cost
        by_brand[unit.brand] = by_brand.get(unit.brand, Decimal("0")) + cost
        label = _condition_label(unit.condition)
        by_condition[label] = by_condition.get(label, Decimal("0")) + cost
    return {
        "total_stock_value": quantize_currency(total),
        "total_stock_count": len(stock),
        "average_buying_cost": _ratio(total, len(stock)),
        "value_by_brand": _ranked_amounts(by_brand),
        "value_by_condition": _ranked_amounts(by_condition),
    }


def sales_value_summary(sales: Sequence[Any]) -> Dict[str, Any]:
    total = Decimal("0")
    units_sold = 0
    by_brand: Dict[str, Decimal] = {}
    for sale in sales:
        value = _sale_value(sale)
        total += value
        units_sold += sale.quantity_sold or 0
        by_brand[sale.brand] = by_brand.get(sale.brand, Decimal("0")) + value
    return {
        "total_sales_value": quantize_currency(total),
        "number_of_transactions": len(sales),
        "total_units_sold": units_sold,
        "average_selling_price": _ratio(total, units_sold),
        "sales_by_brand": _ranked_amounts(by_brand),
    }


def profit_summary(sales: Sequence[Any]) -> Dict[str, Any]:
    total_profit = Decimal("0")
    cost_basis = Decimal("0")
    units_sold = 0
    profitable = 0
    losses = 0
    by_brand: Dict[str, Decimal] = {}

    for sale in sales:
        profit = to_decimal(sale.total_profit)
        quantity = sale.quantity_sold or 0
        total_profit += profit
        cost_basis += to_decimal(sale.buying_cost_per_unit) * Decimal(quantity)
        units_sold += quantity
        if profit > 0:
            profitable += 1
        elif profit < 0:
            losses += 1
        by_brand[sale.brand] = by_brand.get(sale.brand, Decimal("0")) + profit

    margin = ZERO
    if cost_basis:
        margin = (total_profit / cost_basis * HUNDRED).quantize(PERCENT_PLACES, rounding=ROUND_HALF_UP)

    return {
        "total_profit": quantize_currency(total_profit),
        "number_of_transactions": len(sales),
        "total_units_sold": units_sold,
        "profitable_sales_count": profitable,
        "loss_sales_count": losses,
        "average_profit_per_unit": _ratio(total_profit, units_sold),
        "overall_profit_margin": margin,
        "profit_by_brand": _ranked_amounts(by_brand),
    }


__all__ = [
    "calculate_dashboard",
    "profit_summary",
    "sales_value_summary",
    "stock_summary",
    "stock_value_summary",
]

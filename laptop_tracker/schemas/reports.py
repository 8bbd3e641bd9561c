from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from .laptop import LaptopOut
from .sale import SaleRecordOut


class CountRow(BaseModel):
    label: str
    count: int


class AmountRow(BaseModel):
    label: str
    amount: Decimal


class DashboardOut(BaseModel):
    stock_count: int
    group_count: int
    stock_value: Decimal
    sales_value: Decimal
    total_profit: Decimal
    currency_symbol: str
    recent_stock: list[LaptopOut]
    recent_sales: list[SaleRecordOut]


class StockSummaryOut(BaseModel):
    total_stock: int
    by_brand: list[CountRow]
    by_condition: list[CountRow]


class StockValueSummaryOut(BaseModel):
    total_stock_value: Decimal
    total_stock_count: int
    average_buying_cost: Decimal
    value_by_brand: list[AmountRow]
    value_by_condition: list[AmountRow]


class SalesValueSummaryOut(BaseModel):
    total_sales_value: Decimal
    number_of_transactions: int
    total_units_sold: int
    average_selling_price: Decimal
    sales_by_brand: list[AmountRow]


class ProfitSummaryOut(BaseModel):
    total_profit: Decimal
    number_of_transactions: int
    total_units_sold: int
    profitable_sales_count: int
    loss_sales_count: int
    average_profit_per_unit: Decimal
    overall_profit_margin: Decimal
    profit_by_brand: list[AmountRow]

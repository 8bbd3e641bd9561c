from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.sales import list_sales
from ..crud.stock import list_stock
from ..db.session import get_db
from ..schemas.reports import (
    DashboardOut,
    ProfitSummaryOut,
    SalesValueSummaryOut,
    StockSummaryOut,
    StockValueSummaryOut,
)
from ..services.reporting import (
    calculate_dashboard,
    profit_summary,
    sales_value_summary,
    stock_summary,
    stock_value_summary,
)

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/dashboard", response_model=DashboardOut)
def api_dashboard(db: Session = Depends(get_db)):
    stats = calculate_dashboard(list_stock(db), list_sales(db))
    stats["currency_symbol"] = settings.CURRENCY_SYMBOL
    return stats


@router.get("/stock", response_model=StockSummaryOut)
def api_stock_summary(db: Session = Depends(get_db)):
    return stock_summary(list_stock(db))


@router.get("/stock-value", response_model=StockValueSummaryOut)
def api_stock_value_summary(db: Session = Depends(get_db)):
    return stock_value_summary(list_stock(db))


@router.get("/sales-value", response_model=SalesValueSummaryOut)
def api_sales_value_summary(db: Session = Depends(get_db)):
    return sales_value_summary(list_sales(db))


@router.get("/profit", response_model=ProfitSummaryOut)
def api_profit_summary(db: Session = Depends(get_db)):
    return profit_summary(list_sales(db))

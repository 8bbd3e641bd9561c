from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud.sales import list_sales
from ..db.session import get_db
from ..schemas.sale import SaleOutcomeOut, SaleRecordOut, SaleRequest
from ..services.settlement import sell_from_stock

router = APIRouter(prefix="/api/v1/sales", tags=["sales"])


@router.get("", response_model=list[SaleRecordOut])
def api_list_sales(db: Session = Depends(get_db)):
    return list_sales(db)


@router.post("", response_model=SaleOutcomeOut, status_code=201)
def api_record_sale(payload: SaleRequest, db: Session = Depends(get_db)):
    outcome = sell_from_stock(
        db,
        unit_id=payload.unit_id,
        quantity=payload.quantity,
        unit_price=payload.unit_price,
    )
    return SaleOutcomeOut.from_outcome(outcome)

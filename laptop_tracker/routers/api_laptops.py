from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError
from ..crud.stock import get_unit, list_stock
from ..db.session import get_db
from ..schemas.laptop import LaptopCreate, LaptopGroupOut, LaptopOut
from ..services.grouping import group_units
from ..services.stock import add_laptops

router = APIRouter(prefix="/api/v1/laptops", tags=["laptops"])


@router.get("", response_model=list[LaptopOut])
def api_list_laptops(db: Session = Depends(get_db)):
    return list_stock(db)


@router.post("", response_model=list[LaptopOut], status_code=201)
def api_add_laptops(payload: LaptopCreate, db: Session = Depends(get_db)):
    return add_laptops(db, payload)


@router.get("/groups", response_model=list[LaptopGroupOut])
def api_laptop_groups(db: Session = Depends(get_db)):
    return [LaptopGroupOut.from_group(group) for group in group_units(list_stock(db))]


@router.get("/{unit_id}", response_model=LaptopOut)
def api_get_laptop(unit_id: str, db: Session = Depends(get_db)):
    unit = get_unit(db, unit_id)
    if unit is None:
        raise NotFoundError(f"Laptop {unit_id} is not in stock", details={"unit_id": unit_id})
    return unit

"""Turn an "add N laptops" request into individual stock units."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from urllib.parse import quote
from uuid import uuid4

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.money import quantize_currency
from ..core.timeutil import as_naive_utc, utcnow
from ..crud.stock import add_units
from ..models.laptop import LaptopUnit
from ..schemas.laptop import LaptopCreate

logger = logging.getLogger(__name__)


def new_unit_id() -> str:
    return f"laptop-{uuid4().hex}"


def build_image_url(brand: str, unit_id: str) -> str:
    slug = quote("-".join(brand.lower().split()))
    return settings.IMAGE_URL_TEMPLATE.format(brand=slug, unit_id=unit_id)


def build_stock_batch(payload: LaptopCreate, *, now: datetime | None = None) -> list[LaptopUnit]:
    """Create ``payload.quantity`` unsaved units sharing the payload's attributes.

    Every unit gets its own id; ``date_added`` steps forward one microsecond
    per unit so the batch keeps its add order when sorted by date.
    """

    start = as_naive_utc(now) if now else utcnow()
    units: list[LaptopUnit] = []
    for offset in range(payload.quantity):
        unit_id = new_unit_id()
        units.append(
            LaptopUnit(
                id=unit_id,
                brand=payload.brand,
                model=payload.model,
                processor=payload.processor,
                ram=payload.ram,
                storage=payload.storage,
                graphics_card=payload.graphics_card,
                condition=payload.condition,
                buying_cost=quantize_currency(payload.buying_cost),
                target_selling_price=(
                    quantize_currency(payload.target_selling_price)
                    if payload.target_selling_price is not None
                    else None
                ),
                date_added=start + timedelta(microseconds=offset),
                image_url=build_image_url(payload.brand, unit_id),
            )
        )
    return units


def add_laptops(db: Session, payload: LaptopCreate) -> list[LaptopUnit]:
    """Build and store a batch of units; returns the stored rows."""

    units = add_units(db, build_stock_batch(payload))
    logger.info(
        "stock.added",
        extra={
            "extra_data": {
                "brand": payload.brand,
                "model": payload.model,
                "quantity": len(units),
            }
        },
    )
    return units

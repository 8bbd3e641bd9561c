from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .laptop import LaptopGroupOut


class SaleRequest(BaseModel):
    # Range checks happen in the settlement service so they report the same way everywhere.
    unit_id: str
    quantity: int = 1
    unit_price: Decimal


class SaleRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sale_id: str
    brand: str
    model: str
    processor: Optional[str]
    ram: int
    storage: str
    graphics_card: Optional[str]
    condition: str
    buying_cost_per_unit: Decimal
    final_selling_price_per_unit: Decimal
    quantity_sold: int
    total_profit: Decimal
    date_sold: datetime
    date_added_original: Optional[datetime] = None
    image_url: Optional[str] = None


class SaleOutcomeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sale: SaleRecordOut
    removed_unit_ids: list[str]
    remaining_group: Optional[LaptopGroupOut] = None

    @classmethod
    def from_outcome(cls, outcome) -> "SaleOutcomeOut":
        remaining = outcome.remaining_group
        return cls(
            sale=SaleRecordOut.model_validate(outcome.sale),
            removed_unit_ids=list(outcome.removed_unit_ids),
            remaining_group=LaptopGroupOut.from_group(remaining) if remaining is not None else None,
        )

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.conditions import CONDITION_CHOICES, normalize_condition
from ..core.money import MAX_AMOUNT


class LaptopBase(BaseModel):
    brand: str = Field(min_length=1)
    model: str = Field(min_length=1)
    processor: str = ""
    ram: int = Field(gt=0, description="Memory in GB")
    storage: Optional[str] = None
    graphics_card: Optional[str] = None
    condition: str = "New"
    buying_cost: Decimal = Field(gt=0, le=MAX_AMOUNT)
    target_selling_price: Optional[Decimal] = Field(default=None, gt=0, le=MAX_AMOUNT)

    @field_validator("brand", "model", "processor", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("graphics_card", mode="before")
    @classmethod
    def blank_graphics_is_none(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("condition", mode="before")
    @classmethod
    def canonical_condition(cls, value: object) -> str:
        condition = normalize_condition(value)
        if condition is None:
            raise ValueError(f"condition must be one of {', '.join(CONDITION_CHOICES)}")
        return condition


class LaptopCreate(LaptopBase):
    """An "add N laptops" request; the server creates one unit per laptop."""

    quantity: int = Field(default=1, gt=0, le=500)
    storage_size_gb: Optional[int] = Field(default=None, gt=0)
    storage_type: Optional[str] = None

    @model_validator(mode="after")
    def resolve_storage(self) -> "LaptopCreate":
        if self.storage and self.storage.strip():
            self.storage = self.storage.strip()
        elif self.storage_size_gb:
            kind = (self.storage_type or "SSD").strip()
            self.storage = f"{self.storage_size_gb}GB {kind}"
        else:
            raise ValueError("storage or storage_size_gb is required")
        return self


class LaptopOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    brand: str
    model: str
    processor: Optional[str]
    ram: int
    storage: str
    graphics_card: Optional[str]
    condition: str
    buying_cost: Decimal
    target_selling_price: Optional[Decimal] = None
    date_added: datetime
    image_url: Optional[str] = None
    sequence: int


class LaptopGroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    quantity: int
    representative: LaptopOut
    members: list[LaptopOut]

    @classmethod
    def from_group(cls, group) -> "LaptopGroupOut":
        return cls(
            label=group.label,
            quantity=group.quantity,
            representative=LaptopOut.model_validate(group.representative),
            members=[LaptopOut.model_validate(unit) for unit in group.members],
        )

"""Stock and sale tables.

``laptops_stock`` holds one row per physical laptop currently in stock.
``laptops_sold`` is an append-only ledger of finalised sales; each row
snapshots the descriptive fields of the group it was sold from.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, Numeric, Text

from ..db.session import Base


class LaptopUnit(Base):
    __tablename__ = "laptops_stock"

    id = Column(Text, primary_key=True)
    brand = Column(Text, nullable=False, index=True)
    model = Column(Text, nullable=False)
    processor = Column(Text, nullable=True)
    ram = Column(Integer, nullable=False)
    storage = Column(Text, nullable=False)
    graphics_card = Column(Text, nullable=True)
    condition = Column(Text, nullable=False)
    buying_cost = Column(Numeric(10, 2), nullable=False)
    target_selling_price = Column(Numeric(10, 2), nullable=True)
    date_added = Column(DateTime, nullable=False, index=True)
    image_url = Column(Text, nullable=True)
    # Strictly increasing add order; breaks ties between identical ``date_added`` values.
    sequence = Column(Integer, nullable=False, default=0, index=True)

    def __repr__(self) -> str:
        return f"<LaptopUnit {self.id} {self.brand} {self.model}>"


class SoldLaptop(Base):
    __tablename__ = "laptops_sold"

    sale_id = Column(Text, primary_key=True)
    brand = Column(Text, nullable=False, index=True)
    model = Column(Text, nullable=False)
    processor = Column(Text, nullable=True)
    ram = Column(Integer, nullable=False)
    storage = Column(Text, nullable=False)
    graphics_card = Column(Text, nullable=True)
    condition = Column(Text, nullable=False)
    buying_cost_per_unit = Column(Numeric(10, 2), nullable=False)
    final_selling_price_per_unit = Column(Numeric(10, 2), nullable=False)
    quantity_sold = Column(Integer, nullable=False)
    total_profit = Column(Numeric(10, 2), nullable=False)
    date_sold = Column(DateTime, nullable=False, index=True)
    date_added_original = Column(DateTime, nullable=True)
    image_url = Column(Text, nullable=True)

    @property
    def sales_value(self):
        return self.final_selling_price_per_unit * self.quantity_sold

    def __repr__(self) -> str:
        return f"<SoldLaptop {self.sale_id} x{self.quantity_sold}>"

"""Group identical stock units for display and FIFO selling.

Every laptop in stock is its own row. The inventory screen and the sale flow
instead work with groups of units that share every descriptive attribute and
the same buying cost. Groups are derived on each read and never stored, so they
cannot drift from the stock table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Sequence

from ..core.conditions import normalize_condition
from ..core.money import quantize_currency, to_decimal
from ..core.timeutil import as_naive_utc

NO_GRAPHICS = "N/A"

GroupKey = tuple[str, str, str, int, str, str, str, Decimal]


@dataclass
class LaptopGroup:
    """Units sharing one key; ``representative`` is the earliest added."""

    key: GroupKey
    representative: Any
    members: list[Any] = field(default_factory=list)

    @property
    def quantity(self) -> int:
        return len(self.members)

    @property
    def label(self) -> str:
        return "|".join(str(part) for part in self.key)

    @property
    def member_ids(self) -> list[str]:
        return [unit.id for unit in self.members]


def group_key(unit: Any) -> GroupKey:
    condition = normalize_condition(unit.condition) or str(getattr(unit.condition, "value", unit.condition))
    return (
        unit.brand,
        unit.model,
        unit.processor or "",
        int(unit.ram),
        unit.storage,
        unit.graphics_card or NO_GRAPHICS,
        condition,
        quantize_currency(to_decimal(unit.buying_cost)),
    )


def added_order(unit: Any) -> tuple[datetime, int]:
    """Sort key putting units in the order they were added to stock."""

    return (as_naive_utc(unit.date_added), getattr(unit, "sequence", None) or 0)


def oldest_first(units: Iterable[Any]) -> list[Any]:
    # ``sorted`` is stable, so units without a sequence keep their input order on ties.
    return sorted(units, key=added_order)


def group_units(units: Sequence[Any]) -> list[LaptopGroup]:
    """Fold stock units into groups sorted by brand, model and age."""

    groups: dict[GroupKey, LaptopGroup] = {}
    for unit in oldest_first(units):
        key = group_key(unit)
        group = groups.get(key)
        if group is None:
            groups[key] = LaptopGroup(key=key, representative=unit, members=[unit])
        else:
            group.members.append(unit)

    return sorted(
        groups.values(),
        key=lambda g: (g.representative.brand, g.representative.model, added_order(g.representative)),
    )


def find_group(groups: Iterable[LaptopGroup], unit_id: str) -> LaptopGroup | None:
    for group in groups:
        if any(unit.id == unit_id for unit in group.members):
            return group
    return None


__all__ = [
    "GroupKey",
    "LaptopGroup",
    "NO_GRAPHICS",
    "added_order",
    "find_group",
    "group_key",
    "group_units",
    "oldest_first",
]

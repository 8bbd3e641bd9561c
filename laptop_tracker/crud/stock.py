"""Stock table access: list units and bulk-insert new ones."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import CollaboratorUnavailable
from ..models.laptop import LaptopUnit
from ..services.validation import validate_unit

logger = logging.getLogger(__name__)


def list_stock(db: Session, *, for_update: bool = False) -> list[LaptopUnit]:
    """Return every unit in stock, newest first.

    ``for_update`` locks the rows on databases that support it so a sale can
    read and remove units inside one transaction.
    """

    stmt = select(LaptopUnit).order_by(desc(LaptopUnit.date_added), desc(LaptopUnit.sequence))
    if for_update:
        stmt = stmt.with_for_update()
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as exc:
        db.rollback()
        raise CollaboratorUnavailable("Failed to fetch stock") from exc


def get_unit(db: Session, unit_id: str) -> LaptopUnit | None:
    try:
        return db.get(LaptopUnit, unit_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise CollaboratorUnavailable("Failed to fetch laptop") from exc


def add_units(db: Session, units: Sequence[LaptopUnit]) -> list[LaptopUnit]:
    """Insert ``units`` in one transaction and return the rows actually added.

    Units whose id already exists (in the table or earlier in the batch) are
    skipped rather than overwritten. Each inserted unit gets the next sequence
    number so add order survives identical ``date_added`` values.
    """

    if not units:
        return []
    for unit in units:
        validate_unit(unit)

    ids = [unit.id for unit in units]
    inserted: list[LaptopUnit] = []
    try:
        existing = set(db.execute(select(LaptopUnit.id).where(LaptopUnit.id.in_(ids))).scalars().all())
        next_sequence = (db.execute(select(func.max(LaptopUnit.sequence))).scalar() or 0) + 1
        for unit in units:
            if unit.id in existing:
                logger.warning("stock.duplicate_id", extra={"extra_data": {"unit_id": unit.id}})
                continue
            existing.add(unit.id)
            unit.sequence = next_sequence
            next_sequence += 1
            db.add(unit)
            inserted.append(unit)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise CollaboratorUnavailable("Failed to add laptop(s)") from exc

    for unit in inserted:
        db.refresh(unit)
    return inserted

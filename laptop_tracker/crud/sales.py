"""Sales ledger access: list records and commit a sale atomically."""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import CollaboratorUnavailable, ConsistencyError, ValidationError
from ..models.laptop import LaptopUnit, SoldLaptop

logger = logging.getLogger(__name__)


def list_sales(db: Session) -> list[SoldLaptop]:
    """Return every sale record, most recent first."""

    stmt = select(SoldLaptop).order_by(desc(SoldLaptop.date_sold))
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as exc:
        db.rollback()
        raise CollaboratorUnavailable("Failed to fetch sales records") from exc


def commit_sale(db: Session, removed_ids: Iterable[str], record: SoldLaptop) -> SoldLaptop:
    """Remove the sold units from stock and append ``record`` in one transaction.

    If the delete touches fewer rows than ``removed_ids`` holds, nothing is
    applied and ``ConsistencyError`` is raised.
    """

    ids = sorted(set(removed_ids))
    if not ids:
        raise ValidationError("removed_ids", "at least one laptop id is required")

    try:
        result = db.execute(delete(LaptopUnit).where(LaptopUnit.id.in_(ids)))
        if result.rowcount != len(ids):
            db.rollback()
            logger.error(
                "sale.consistency_error",
                extra={
                    "extra_data": {
                        "sale_id": record.sale_id,
                        "requested": len(ids),
                        "removed": result.rowcount,
                    }
                },
            )
            raise ConsistencyError(
                f"Attempted to remove {len(ids)} laptop(s) but {result.rowcount} were found in stock",
                details={"requested": len(ids), "removed": result.rowcount},
            )
        db.add(record)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConsistencyError(f"Sale {record.sale_id} is already recorded") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise CollaboratorUnavailable("Failed to process sale") from exc

    db.refresh(record)
    return record

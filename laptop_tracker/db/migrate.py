"""Small idempotent SQLite migrations for databases created by older releases."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine

# Additive only: columns and indexes are added, never dropped.


def _table_columns(engine: Engine, table: str) -> list[dict[str, object]]:
    with engine.connect() as conn:
        return [dict(row) for row in conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()]


def _column_names(engine: Engine, table: str) -> set[str]:
    return {str(record["name"]) for record in _table_columns(engine, table)}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def _backfill_sequence(engine: Engine) -> None:
    """Number legacy stock rows by date added, falling back to insertion (rowid) order."""

    with engine.begin() as conn:
        rows = conn.execute(
            text("SELECT id FROM laptops_stock WHERE sequence IS NULL OR sequence = 0 ORDER BY date_added, rowid")
        ).scalars().all()
        if not rows:
            return
        start = conn.execute(text("SELECT COALESCE(MAX(sequence), 0) FROM laptops_stock")).scalar() or 0
        for offset, unit_id in enumerate(rows, start=1):
            conn.execute(
                text("UPDATE laptops_stock SET sequence = :seq WHERE id = :id"),
                {"seq": start + offset, "id": unit_id},
            )


def run_migrations(engine: Engine) -> None:
    """Bring an existing SQLite schema up to date with the models."""

    if engine.dialect.name != "sqlite":
        return

    stock_cols = _column_names(engine, "laptops_stock")
    if not stock_cols:
        # Fresh database; ``Base.metadata.create_all`` builds the current schema.
        return

    optional_cols = {
        "target_selling_price": "NUMERIC(10, 2)",
        "image_url": "TEXT",
        "sequence": "INTEGER DEFAULT 0 NOT NULL",
    }
    for name, dtype in optional_cols.items():
        if name not in stock_cols:
            _add_column_sqlite(engine, "laptops_stock", f"{name} {dtype}")

    _backfill_sequence(engine)
    _create_index_if_not_exists(engine, "laptops_stock", "idx_laptops_stock_date_added", ["date_added"])
    _create_index_if_not_exists(engine, "laptops_stock", "idx_laptops_stock_sequence", ["sequence"])

    sold_cols = _column_names(engine, "laptops_sold")
    if sold_cols:
        for name, dtype in {"date_added_original": "DATETIME", "image_url": "TEXT"}.items():
            if name not in sold_cols:
                _add_column_sqlite(engine, "laptops_sold", f"{name} {dtype}")
        _create_index_if_not_exists(engine, "laptops_sold", "idx_laptops_sold_date_sold", ["date_sold"])

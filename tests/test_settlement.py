import os
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")

from laptop_tracker.core.errors import ConsistencyError, NotFoundError, ValidationError
from laptop_tracker.crud.sales import commit_sale, list_sales
from laptop_tracker.crud.stock import add_units, list_stock
from laptop_tracker.db.session import Base
from laptop_tracker.models.laptop import LaptopUnit, SoldLaptop
from laptop_tracker.services.grouping import LaptopGroup, group_units
from laptop_tracker.services.settlement import sell_from_stock, settle_sale

# Ensure models are imported so metadata is populated
from laptop_tracker.models import laptop as laptop_model  # noqa: F401

T0 = datetime(2024, 1, 10, 9, 0, 0)


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_unit(unit_id, *, minutes=0, cost="100.00", brand="X", ram=16, **extra):
    data = {
        "id": unit_id,
        "brand": brand,
        "model": "Book",
        "processor": "i7",
        "ram": ram,
        "storage": "512GB SSD",
        "graphics_card": None,
        "condition": "New",
        "buying_cost": Decimal(cost),
        "date_added": T0 + timedelta(minutes=minutes),
        "image_url": f"https://img.example/{unit_id}",
    }
    data.update(extra)
    return LaptopUnit(**data)


def _stock_count(db):
    return db.execute(select(func.count()).select_from(LaptopUnit)).scalar()


def _sales_count(db):
    return db.execute(select(func.count()).select_from(SoldLaptop)).scalar()


def test_settle_sale_sells_oldest_and_computes_profit():
    a = make_unit("A", minutes=0)
    b = make_unit("B", minutes=5)
    group = group_units([b, a])[0]

    settlement = settle_sale(group, 1, Decimal("150"))

    assert settlement.removed_ids == frozenset({"A"})
    assert [u.id for u in settlement.remaining_units] == ["B"]
    record = settlement.record
    assert record.quantity_sold == 1
    assert record.total_profit == Decimal("50.00")
    assert record.buying_cost_per_unit == Decimal("100.00")
    assert record.final_selling_price_per_unit == Decimal("150")
    assert record.date_added_original == a.date_added
    assert record.image_url == a.image_url
    assert record.sale_id.startswith("sale-")


def test_settle_sale_resorts_unsorted_members():
    old = make_unit("old", minutes=1)
    mid = make_unit("mid", minutes=2)
    new = make_unit("new", minutes=3)
    group = LaptopGroup(key=("k",), representative=old, members=[new, old, mid])

    settlement = settle_sale(group, 2, "120.50")

    assert [u.id for u in settlement.sold_units] == ["old", "mid"]
    assert settlement.remaining_units == (new,)


def test_settle_sale_allows_a_loss():
    group = group_units([make_unit("A"), make_unit("B", minutes=1), make_unit("C", minutes=2)])[0]

    settlement = settle_sale(group, 3, Decimal("80"))

    assert settlement.record.total_profit == Decimal("-60.00")
    assert settlement.remaining_units == ()


def test_settle_sale_works_with_plain_objects():
    unit = SimpleNamespace(
        id="u1",
        brand="Acer",
        model="Swift",
        processor="",
        ram=8,
        storage="256GB SSD",
        graphics_card=None,
        condition="Used",
        buying_cost=Decimal("200"),
        date_added=T0,
        image_url=None,
    )
    group = group_units([unit])[0]

    settlement = settle_sale(group, 1, 260)

    assert settlement.record.total_profit == Decimal("60.00")
    assert settlement.record.condition == "Used"


@pytest.mark.parametrize(
    "quantity, price, field",
    [
        (0, "150", "quantity"),
        (-1, "150", "quantity"),
        (3, "150", "quantity"),
        (1.5, "150", "quantity"),
        (True, "150", "quantity"),
        (1, "0", "unit_price"),
        (1, "-5", "unit_price"),
        (1, "abc", "unit_price"),
        (1, "NaN", "unit_price"),
    ],
)
def test_settle_sale_rejects_bad_input(quantity, price, field):
    group = group_units([make_unit("A"), make_unit("B", minutes=1)])[0]

    with pytest.raises(ValidationError) as excinfo:
        settle_sale(group, quantity, price)

    assert excinfo.value.field == field


def test_sell_from_stock_commits_sale_and_returns_remaining_group(db_session):
    add_units(db_session, [make_unit("A", minutes=0), make_unit("B", minutes=10), make_unit("other", ram=8)])

    outcome = sell_from_stock(db_session, unit_id="B", quantity=1, unit_price=Decimal("150"))

    assert outcome.removed_unit_ids == ["A"]
    assert outcome.sale.quantity_sold == 1
    assert outcome.sale.total_profit == Decimal("50.00")
    assert outcome.remaining_group is not None
    assert outcome.remaining_group.quantity == 1
    assert outcome.remaining_group.member_ids == ["B"]

    stock_ids = sorted(u.id for u in list_stock(db_session))
    assert stock_ids == ["B", "other"]
    sales = list_sales(db_session)
    assert [s.sale_id for s in sales] == [outcome.sale.sale_id]


def test_selling_whole_group_empties_it(db_session):
    add_units(db_session, [make_unit("A"), make_unit("B", minutes=1)])

    outcome = sell_from_stock(db_session, unit_id="A", quantity=2, unit_price="125")

    assert sorted(outcome.removed_unit_ids) == ["A", "B"]
    assert outcome.remaining_group is None
    assert _stock_count(db_session) == 0
    assert outcome.sale.total_profit == Decimal("50.00")


def test_sale_original_date_matches_oldest_sold_unit(db_session):
    add_units(
        db_session,
        [make_unit("late", minutes=30), make_unit("early", minutes=1), make_unit("mid", minutes=15)],
    )

    outcome = sell_from_stock(db_session, unit_id="late", quantity=2, unit_price="110")

    assert outcome.removed_unit_ids == ["early", "mid"]
    assert outcome.sale.date_added_original == T0 + timedelta(minutes=1)


def test_invalid_sale_leaves_store_untouched(db_session):
    add_units(db_session, [make_unit("A"), make_unit("B", minutes=1)])

    with pytest.raises(ValidationError):
        sell_from_stock(db_session, unit_id="A", quantity=3, unit_price="150")
    with pytest.raises(ValidationError):
        sell_from_stock(db_session, unit_id="A", quantity=1, unit_price="0")

    assert _stock_count(db_session) == 2
    assert _sales_count(db_session) == 0


def test_selling_unknown_unit_is_not_found(db_session):
    add_units(db_session, [make_unit("A")])

    with pytest.raises(NotFoundError):
        sell_from_stock(db_session, unit_id="missing", quantity=1, unit_price="150")

    assert _stock_count(db_session) == 1


def test_commit_sale_rolls_back_when_units_are_missing(db_session):
    add_units(db_session, [make_unit("A"), make_unit("B", minutes=1)])
    group = group_units(list_stock(db_session))[0]
    settlement = settle_sale(group, 2, "150")

    # Another sale got to B first.
    commit_sale(db_session, {"B"}, settle_sale(group_units([group.members[1]])[0], 1, "140").record)

    with pytest.raises(ConsistencyError):
        commit_sale(db_session, settlement.removed_ids, settlement.record)

    assert [u.id for u in list_stock(db_session)] == ["A"]
    assert _sales_count(db_session) == 1


def test_commit_sale_requires_unit_ids(db_session):
    record = settle_sale(group_units([make_unit("A")])[0], 1, "150").record

    with pytest.raises(ValidationError):
        commit_sale(db_session, set(), record)


def test_settle_sale_rounds_price_before_computing_profit():
    group = group_units([make_unit("A"), make_unit("B", minutes=1)])[0]

    record = settle_sale(group, 2, "100.005").record

    assert record.final_selling_price_per_unit == Decimal("100.01")
    assert record.total_profit == Decimal("0.02")


def test_stored_sale_profit_matches_stored_prices(db_session):
    add_units(db_session, [make_unit(f"U{i}", minutes=i) for i in range(40)])

    sell_from_stock(db_session, unit_id="U0", quantity=40, unit_price="100.005")

    stored = list_sales(db_session)[0]
    expected = (stored.final_selling_price_per_unit - stored.buying_cost_per_unit) * stored.quantity_sold
    assert stored.total_profit == expected
    assert stored.total_profit == Decimal("0.40")


@pytest.mark.parametrize("price", ["0.004", "100000000", "99999999.995"])
def test_settle_sale_rejects_prices_outside_the_stored_range(price):
    group = group_units([make_unit("A")])[0]

    with pytest.raises(ValidationError) as excinfo:
        settle_sale(group, 1, price)

    assert excinfo.value.field == "unit_price"


def test_settle_sale_rejects_profit_too_large_to_record():
    units = [make_unit(f"U{i}", minutes=i, cost="1.00") for i in range(3)]
    group = group_units(units)[0]

    with pytest.raises(ValidationError) as excinfo:
        settle_sale(group, 3, "99999999.00")

    assert excinfo.value.field == "unit_price"

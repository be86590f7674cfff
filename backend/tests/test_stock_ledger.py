from datetime import date, datetime

import pytest

from models.goods import Goods
from models.stock import StockLogEntry
from services.errors import NotFound, ValidationError


def test_prefix_sum_invariant(inventory, db):
    goods = inventory.create_goods("Mouse", initial_stock=50)
    deltas = [10, -5, 3, -20, 7]
    for delta in deltas:
        inventory.adjust_stock(goods.id, delta)

    entries = inventory.stock_history(goods.id)
    running = 0
    for entry in entries:
        running += entry.delta
        assert entry.stock_after == running

    assert [e.delta for e in entries] == [50] + deltas
    assert db.get(Goods, goods.id).stock == 50 + sum(deltas)
    assert entries[-1].stock_after == db.get(Goods, goods.id).stock


def test_entries_with_same_timestamp_keep_commit_order(inventory, clock):
    # Clock never moves, so only the id orders these
    goods = inventory.create_goods("Kabel", initial_stock=1)
    for delta in (1, 2, 3):
        inventory.adjust_stock(goods.id, delta)

    entries = inventory.stock_history(goods.id)
    assert len({e.created_at for e in entries}) == 1
    assert [e.stock_after for e in entries] == [1, 2, 4, 7]


def test_negative_stock_is_allowed(inventory):
    goods = inventory.create_goods("Baterai", initial_stock=2)
    assert inventory.adjust_stock(goods.id, -5) == -3


def test_string_delta_is_parsed(inventory):
    goods = inventory.create_goods("Baterai", initial_stock=2)
    assert inventory.adjust_stock(goods.id, "+4") == 6


@pytest.mark.parametrize("bad", ["abc", "1.5", "", None, True, 2.5])
def test_non_numeric_delta_is_rejected_without_writing(inventory, db, bad):
    goods = inventory.create_goods("Mouse", initial_stock=5)

    with pytest.raises(ValidationError):
        inventory.adjust_stock(goods.id, bad)

    assert db.query(StockLogEntry).count() == 1
    assert db.get(Goods, goods.id).stock == 5


def test_unknown_goods_is_not_found(inventory):
    with pytest.raises(NotFound):
        inventory.adjust_stock("does-not-exist", 1)


def test_opening_entry_cannot_be_recorded_twice(inventory):
    goods = inventory.create_goods("Mouse", initial_stock=5)

    with pytest.raises(ValidationError):
        inventory.stock_ledger.initial_stock(goods.id, 5)


def test_stock_as_of_date_excludes_later_entries(inventory, clock):
    goods = inventory.create_goods("Mouse", initial_stock=50)
    clock.set(datetime(2025, 10, 22, 8, 0))
    inventory.adjust_stock(goods.id, 10)
    clock.set(datetime(2025, 10, 22, 23, 59, 59))
    inventory.adjust_stock(goods.id, -5)

    assert inventory.stock_snapshot(date(2025, 10, 19)) == [{"name": "Mouse", "total_stock": 0}]
    assert inventory.stock_snapshot(date(2025, 10, 21)) == [{"name": "Mouse", "total_stock": 50}]
    assert inventory.stock_snapshot("2025-10-22") == [{"name": "Mouse", "total_stock": 55}]


def test_stock_as_of_today_matches_live_stock(inventory, db, clock):
    a = inventory.create_goods("Mouse", initial_stock=50)
    b = inventory.create_goods("Keyboard", initial_stock=30)
    inventory.adjust_stock(a.id, -12)
    inventory.adjust_stock(b.id, 4)

    snapshot = {row["name"]: row["total_stock"] for row in inventory.stock_snapshot(clock.today())}
    live = {g.name: g.stock for g in db.query(Goods).all()}
    assert snapshot == live


def test_goods_sharing_a_name_are_merged(inventory, clock):
    inventory.create_goods("Mouse", initial_stock=5)
    inventory.create_goods("Mouse", initial_stock=7)

    assert inventory.stock_snapshot(clock.today()) == [{"name": "Mouse", "total_stock": 12}]


def test_malformed_snapshot_date_is_rejected(inventory):
    for bad in ("2025/10/20", "20-10-2025", "2025-13-01", "kemarin", None):
        with pytest.raises(ValidationError):
            inventory.stock_snapshot(bad)


def test_snapshot_on_last_representable_date(inventory, clock):
    goods = inventory.create_goods("Mouse", initial_stock=50)
    inventory.adjust_stock(goods.id, -8)

    assert inventory.stock_snapshot("9999-12-31") == [{"name": "Mouse", "total_stock": 42}]


def test_entry_at_last_instant_of_day_is_included(inventory, clock):
    clock.set(datetime(2025, 10, 20, 23, 59, 59, 999999))
    inventory.create_goods("Mouse", initial_stock=3)

    assert inventory.stock_snapshot("2025-10-20") == [{"name": "Mouse", "total_stock": 3}]
    assert inventory.stock_snapshot("2025-10-19") == [{"name": "Mouse", "total_stock": 0}]


@pytest.mark.parametrize("delta", [10 ** 20, -(10 ** 20), str(2 ** 63)])
def test_delta_beyond_integer_column_is_rejected(inventory, db, delta):
    goods = inventory.create_goods("Mouse", initial_stock=5)

    with pytest.raises(ValidationError):
        inventory.adjust_stock(goods.id, delta)

    assert db.query(StockLogEntry).count() == 1
    assert db.get(Goods, goods.id).stock == 5


def test_resulting_stock_beyond_integer_column_is_rejected(inventory, db):
    goods = inventory.create_goods("Mouse", initial_stock=2 ** 63 - 10)

    with pytest.raises(ValidationError):
        inventory.adjust_stock(goods.id, 20)

    assert db.get(Goods, goods.id).stock == 2 ** 63 - 10
    assert db.query(StockLogEntry).count() == 1

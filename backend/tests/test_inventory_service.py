from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError

from models.goods import Goods
from models.price import PriceEntry
from models.stock import StockLogEntry
from services.errors import NotFound, StorageFailure, UniquenessConflict, ValidationError
from services.inventory import InventoryService


def test_mouse_scenario(inventory, db, clock):
    mouse = inventory.create_goods("Mouse", initial_stock=50)

    assert mouse.code == "BRG/25/10/00001"
    assert mouse.stock == 50
    entries = inventory.stock_history(mouse.id)
    assert [(e.delta, e.stock_after) for e in entries] == [(50, 50)]

    assert inventory.adjust_stock(mouse.id, 10) == 60
    assert [(e.delta, e.stock_after) for e in inventory.stock_history(mouse.id)][-1] == (10, 60)

    assert inventory.adjust_stock(mouse.id, -5) == 55
    assert inventory.get_goods(mouse.id).stock == 55

    assert inventory.stock_snapshot("2025-01-01") == [{"name": "Mouse", "total_stock": 0}]
    assert inventory.stock_snapshot(clock.today()) == [{"name": "Mouse", "total_stock": 55}]


def test_create_defaults(inventory):
    goods = inventory.create_goods("  Flashdisk  ")

    assert goods.name == "Flashdisk"
    assert goods.stock == 0
    assert goods.price_label is None
    assert goods.photo_path is None
    assert [(e.delta, e.stock_after) for e in inventory.stock_history(goods.id)] == [(0, 0)]


def test_create_requires_name(inventory, db):
    with pytest.raises(ValidationError):
        inventory.create_goods("")
    assert db.query(Goods).count() == 0


def test_list_goods_is_ordered_by_code(inventory):
    for name in ("C", "A", "B"):
        inventory.create_goods(name)

    assert [g.name for g in inventory.list_goods()] == ["C", "A", "B"]
    assert [g.code for g in inventory.list_goods()] == [
        "BRG/25/10/00001", "BRG/25/10/00002", "BRG/25/10/00003",
    ]


def test_get_unknown_goods(inventory):
    with pytest.raises(NotFound) as excinfo:
        inventory.get_goods("nope")
    assert excinfo.value.code == "NOT_FOUND"


def test_update_patches_only_given_fields(inventory):
    goods = inventory.create_goods("Mouse", initial_stock=3, price_label="850000")

    updated = inventory.update_goods(goods.id, {"name": "Mouse Wireless", "price_label": None})

    assert updated.name == "Mouse Wireless"
    assert updated.price_label == "850000"
    assert updated.stock == 3


def test_update_stock_bypasses_ledger(inventory, db):
    goods = inventory.create_goods("Mouse", initial_stock=3)

    updated = inventory.update_goods(goods.id, {"stock": 40})

    assert updated.stock == 40
    assert db.query(StockLogEntry).filter(StockLogEntry.goods_id == goods.id).count() == 1


def test_update_rejects_unknown_fields(inventory):
    goods = inventory.create_goods("Mouse")
    with pytest.raises(ValidationError):
        inventory.update_goods(goods.id, {"code": "BRG/99/99/00001"})


def test_update_unknown_goods(inventory):
    with pytest.raises(NotFound):
        inventory.update_goods("nope", {"name": "x"})


def test_delete_cascades_to_ledgers(inventory, db):
    goods = inventory.create_goods("Mouse", initial_stock=5)
    other = inventory.create_goods("Keyboard", initial_stock=1)
    inventory.adjust_stock(goods.id, 2)
    inventory.add_price(goods.id, "1000", "2025-10-01")
    inventory.add_price(other.id, "2000", "2025-10-01")
    goods_id = goods.id

    inventory.delete_goods(goods_id)

    assert db.query(StockLogEntry).filter(StockLogEntry.goods_id == goods_id).count() == 0
    assert db.query(PriceEntry).filter(PriceEntry.goods_id == goods_id).count() == 0
    assert db.query(StockLogEntry).count() == 1
    assert db.query(PriceEntry).count() == 1
    with pytest.raises(NotFound):
        inventory.get_goods(goods_id)
    with pytest.raises(NotFound):
        inventory.adjust_stock(goods_id, 1)
    with pytest.raises(NotFound):
        inventory.delete_goods(goods_id)


def test_code_collision_regenerates(inventory, monkeypatch):
    first_code = inventory.create_goods("Mouse").code
    real_next_code = inventory.sequencer.next_code
    calls = []

    def racing_next_code():
        # A concurrent writer already took the code we are about to use
        calls.append(1)
        return first_code if len(calls) == 1 else real_next_code()

    monkeypatch.setattr(inventory.sequencer, "next_code", racing_next_code)
    second = inventory.create_goods("Keyboard", initial_stock=4)

    assert len(calls) == 2
    assert second.code == "BRG/25/10/00002"
    assert [(e.delta, e.stock_after) for e in inventory.stock_history(second.id)] == [(4, 4)]


def test_code_collision_gives_up_after_retries(db, clock, monkeypatch):
    inventory = InventoryService(db, clock=clock, max_code_retries=3)
    taken = inventory.create_goods("Mouse").code
    calls = []

    def always_taken():
        calls.append(1)
        return taken

    monkeypatch.setattr(inventory.sequencer, "next_code", always_taken)
    with pytest.raises(UniquenessConflict):
        inventory.create_goods("Keyboard")

    assert len(calls) == 3
    assert db.query(Goods).count() == 1


def test_failed_opening_entry_leaves_no_goods(inventory, db, monkeypatch):
    def broken(goods_id, quantity):
        raise OperationalError("INSERT INTO stock_logs", {}, Exception("disk I/O error"))

    monkeypatch.setattr(inventory.stock_ledger, "initial_stock", broken)
    with pytest.raises(StorageFailure) as excinfo:
        inventory.create_goods("Mouse", initial_stock=10)

    assert "disk" not in excinfo.value.message
    assert db.query(Goods).count() == 0
    assert db.query(StockLogEntry).count() == 0


def test_failed_append_keeps_stock_unchanged(inventory, db, monkeypatch):
    goods = inventory.create_goods("Mouse", initial_stock=10)
    goods_id = goods.id

    def broken_flush(*args, **kwargs):
        raise OperationalError("INSERT INTO stock_logs", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "flush", broken_flush)
    with pytest.raises(StorageFailure):
        inventory.adjust_stock(goods_id, 5)
    monkeypatch.undo()

    assert db.get(Goods, goods_id).stock == 10
    assert db.query(StockLogEntry).count() == 1


def test_price_snapshot_scenario(inventory):
    goods = inventory.create_goods("Mouse")
    inventory.add_price(goods.id, "1000", "2025-10-01")
    inventory.add_price(goods.id, "1100", "2025-10-02")

    assert inventory.price_snapshot(date(2025, 10, 1)) == [{"name": "Mouse", "price": "1000"}]
    assert inventory.price_snapshot(date(2025, 10, 3)) == []


def test_goods_created_in_new_month_get_new_partition(inventory, clock):
    inventory.create_goods("Mouse")
    clock.set(datetime(2025, 11, 3, 10, 0))

    assert inventory.create_goods("Keyboard").code == "BRG/25/11/00001"


def test_zero_code_retries_is_honoured(db, clock, monkeypatch):
    inventory = InventoryService(db, clock=clock, max_code_retries=0)
    calls = []
    monkeypatch.setattr(inventory.sequencer, "next_code", lambda: calls.append(1))

    with pytest.raises(UniquenessConflict):
        inventory.create_goods("Mouse")

    assert calls == []
    assert db.query(Goods).count() == 0


def test_oversized_opening_stock_is_rejected(inventory, db):
    with pytest.raises(ValidationError):
        inventory.create_goods("Mouse", initial_stock=str(10 ** 20))
    assert db.query(Goods).count() == 0

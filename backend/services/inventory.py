# backend/services/inventory.py
"""
InventoryService -- goods lifecycle on top of the sequencer and both ledgers.

Each public operation is one transaction: it commits once at the end, and on
any failure rolls back so no partial goods row or ledger entry survives.
Datastore errors surface as ``StorageFailure``; the core never retries them.
The one retried failure is a goods code collision, which regenerates the code
up to ``settings.CODE_MAX_RETRIES`` times.
"""
import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from models.goods import Goods
from models.price import PriceEntry
from models.stock import StockLogEntry
from services.clock import Clock, SystemClock
from services.errors import NotFound, StorageFailure, UniquenessConflict, ValidationError
from services.price_ledger import PriceLedger
from services.sequencer import CodeSequencer
from services.stock_ledger import StockLedger
from services.validation import parse_date, parse_int, require_name
from utils.uploads import remove_upload

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "price_label", "photo_path", "stock"}


class InventoryService:
    def __init__(self, db: Session, clock: Optional[Clock] = None, max_code_retries: Optional[int] = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.sequencer = CodeSequencer(db, self.clock)
        self.stock_ledger = StockLedger(db, self.clock)
        self.price_ledger = PriceLedger(db)
        self.max_code_retries = settings.CODE_MAX_RETRIES if max_code_retries is None else max_code_retries

    @contextmanager
    def _transaction(self, operation: str):
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Storage failure during %s", operation)
            raise StorageFailure(operation) from exc
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def _reading(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Storage failure during %s", operation)
            raise StorageFailure(operation) from exc

    def _get(self, goods_id: str) -> Goods:
        goods = self.db.query(Goods).filter(Goods.id == goods_id).first()
        if goods is None:
            raise NotFound("Goods", goods_id)
        return goods

    # ---- queries ----

    def get_goods(self, goods_id: str) -> Goods:
        with self._reading("get_goods"):
            return self._get(goods_id)

    def list_goods(self) -> List[Goods]:
        with self._reading("list_goods"):
            return self.db.query(Goods).order_by(Goods.code.asc()).all()

    def stock_history(self, goods_id: str) -> List[StockLogEntry]:
        with self._reading("stock_history"):
            return self.stock_ledger.history(goods_id)

    def price_history(self, goods_id: str) -> List[PriceEntry]:
        with self._reading("price_history"):
            return self.price_ledger.history(goods_id)

    def stock_snapshot(self, as_of) -> List[dict]:
        as_of = parse_date(as_of)
        with self._reading("stock_snapshot"):
            return self.stock_ledger.stock_as_of_date(as_of)

    def price_snapshot(self, as_of) -> List[dict]:
        as_of = parse_date(as_of)
        with self._reading("price_snapshot"):
            return self.price_ledger.price_as_of_date(as_of)

    # ---- lifecycle ----

    def _insert_with_fresh_code(self, name: str, stock: int, price_label, photo_path) -> Goods:
        # Must be the first write of the transaction: a collision rolls
        # everything back and sequencing starts over from a fresh read.
        for attempt in range(1, self.max_code_retries + 1):
            code = self.sequencer.next_code()
            goods = Goods(
                name=name,
                code=code,
                stock=stock,
                price_label=price_label,
                photo_path=photo_path,
            )
            self.db.add(goods)
            try:
                self.db.flush()
                return goods
            except IntegrityError:
                self.db.rollback()
                logger.warning(
                    "Goods code %s already taken (attempt %d/%d), regenerating",
                    code, attempt, self.max_code_retries,
                )
        raise UniquenessConflict(
            "Could not allocate a unique goods code",
            attempts=self.max_code_retries,
        )

    def create_goods(self, name, initial_stock=None, price_label=None, photo_path=None) -> Goods:
        name = require_name(name)
        quantity = 0 if initial_stock is None else parse_int(initial_stock, "stock")

        with self._transaction("create_goods"):
            goods = self._insert_with_fresh_code(name, quantity, price_label, photo_path)
            self.stock_ledger.initial_stock(goods.id, quantity)
        logger.info("Created goods %s (%s) with stock %d", goods.code, goods.name, quantity)
        return goods

    def overwrite_stock(self, goods: Goods, quantity: int) -> None:
        """
        Set ``goods.stock`` directly without a ledger entry.

        Only ``update_goods`` calls this. After it runs the ledger's prefix sum
        no longer matches the live stock for this goods.
        """
        logger.warning(
            "Stock of %s overwritten %d -> %d without a ledger entry",
            goods.code, goods.stock, quantity,
        )
        goods.stock = quantity

    def update_goods(self, goods_id: str, patch: dict) -> Goods:
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}", field=sorted(unknown)[0])

        # Fields sent as None are left untouched
        changes = {k: v for k, v in patch.items() if v is not None}
        if "name" in changes:
            changes["name"] = require_name(changes["name"])
        if "stock" in changes:
            changes["stock"] = parse_int(changes["stock"], "stock")

        old_photo = None
        with self._transaction("update_goods"):
            goods = self._get(goods_id)
            if "name" in changes:
                goods.name = changes["name"]
            if "price_label" in changes:
                goods.price_label = changes["price_label"]
            if "photo_path" in changes and changes["photo_path"] != goods.photo_path:
                old_photo = goods.photo_path
                goods.photo_path = changes["photo_path"]
            if "stock" in changes:
                self.overwrite_stock(goods, changes["stock"])
            self.db.flush()

        if old_photo:
            remove_upload(old_photo)
        return goods

    def delete_goods(self, goods_id: str) -> None:
        with self._transaction("delete_goods"):
            goods = self._get(goods_id)
            photo, code = goods.photo_path, goods.code
            # Ledger rows go with it (ORM cascade + ON DELETE CASCADE)
            self.db.delete(goods)
            self.db.flush()

        if photo:
            remove_upload(photo)
        logger.info("Deleted goods %s", code)

    def adjust_stock(self, goods_id: str, delta) -> int:
        delta = parse_int(delta, "delta")
        with self._transaction("adjust_stock"):
            new_level = self.stock_ledger.record_delta(goods_id, delta)
        return new_level

    def add_price(self, goods_id: str, price, effective_date) -> PriceEntry:
        with self._transaction("add_price"):
            entry = self.price_ledger.add_price(goods_id, price, effective_date)
        return entry

# backend/services/stock_ledger.py
"""
StockLedger -- append-only log of stock deltas per goods.

Invariant: for one goods, entries ordered by (created_at, id) form a prefix
sum; each entry's ``stock_after`` is the running total and the newest entry's
``stock_after`` equals ``Goods.stock``.

The ledger only flushes. The caller owns the transaction, so the goods row
update and the appended entry commit or roll back together.
"""
import logging
from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from models.goods import Goods
from models.stock import StockLogEntry
from services.clock import Clock, SystemClock
from services.errors import NotFound, ValidationError
from services.validation import check_int_range, parse_int

logger = logging.getLogger(__name__)


class StockLedger:
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or SystemClock()

    def _locked_goods(self, goods_id: str) -> Goods:
        # Row lock serializes concurrent appends for one goods (no-op on SQLite)
        goods = (
            self.db.query(Goods)
            .filter(Goods.id == goods_id)
            .with_for_update()
            .first()
        )
        if goods is None:
            raise NotFound("Goods", goods_id)
        return goods

    def _append(self, goods: Goods, delta: int, stock_after: int) -> StockLogEntry:
        entry = StockLogEntry(
            goods_id=goods.id,
            delta=delta,
            stock_after=stock_after,
            created_at=self.clock.now(),
        )
        goods.stock = stock_after
        self.db.add(entry)
        self.db.flush()
        logger.debug("Stock %s: delta=%d stock_after=%d", goods.code, delta, stock_after)
        return entry

    def record_delta(self, goods_id: str, delta) -> int:
        """Append ``delta`` and return the new stock level. Negative results are allowed."""
        delta = parse_int(delta, "delta")
        goods = self._locked_goods(goods_id)
        new_level = check_int_range(goods.stock + delta, "delta")
        entry = self._append(goods, delta, new_level)
        return entry.stock_after

    def initial_stock(self, goods_id: str, quantity) -> StockLogEntry:
        """Write the opening entry of a freshly created goods."""
        quantity = parse_int(quantity, "stock")
        goods = self._locked_goods(goods_id)
        has_entries = (
            self.db.query(StockLogEntry.id)
            .filter(StockLogEntry.goods_id == goods.id)
            .first()
        )
        if has_entries is not None:
            raise ValidationError("Opening stock entry already recorded", field="stock")
        return self._append(goods, quantity, quantity)

    def history(self, goods_id: str) -> List[StockLogEntry]:
        if self.db.query(Goods.id).filter(Goods.id == goods_id).first() is None:
            raise NotFound("Goods", goods_id)
        return (
            self.db.query(StockLogEntry)
            .filter(StockLogEntry.goods_id == goods_id)
            .order_by(StockLogEntry.created_at.asc(), StockLogEntry.id.asc())
            .all()
        )

    def stock_as_of_date(self, as_of: date) -> List[dict]:
        """
        Total stock per goods name from every entry created on or before ``as_of``.

        Goods without entries in range report 0. Goods sharing a name are
        merged into one row.
        """
        # Through the last instant of the day; no date arithmetic, so 9999-12-31 is fine
        cutoff = datetime.combine(as_of, time.max)
        rows = (
            self.db.query(
                Goods.name,
                func.coalesce(func.sum(StockLogEntry.delta), 0).label("total_stock"),
            )
            .outerjoin(
                StockLogEntry,
                and_(
                    StockLogEntry.goods_id == Goods.id,
                    StockLogEntry.created_at <= cutoff,
                ),
            )
            .group_by(Goods.name)
            .order_by(Goods.name.asc())
            .all()
        )
        return [{"name": name, "total_stock": int(total or 0)} for name, total in rows]

# backend/services/price_ledger.py
"""
PriceLedger -- append-only log of effective-dated prices per goods.

``price_as_of_date`` is an exact match on the effective date: a price that
took effect the day before is not reported. Entries are never validated
against earlier ones and never deactivate them.
"""
import logging
from datetime import date
from typing import List

from sqlalchemy.orm import Session

from models.goods import Goods
from models.price import PriceEntry
from services.errors import NotFound
from services.validation import parse_date, parse_price

logger = logging.getLogger(__name__)


class PriceLedger:
    def __init__(self, db: Session):
        self.db = db

    def _require_goods(self, goods_id: str) -> Goods:
        goods = self.db.query(Goods).filter(Goods.id == goods_id).first()
        if goods is None:
            raise NotFound("Goods", goods_id)
        return goods

    def add_price(self, goods_id: str, price, effective_date) -> PriceEntry:
        price = parse_price(price)
        effective_date = parse_date(effective_date, "effective_date")
        goods = self._require_goods(goods_id)

        entry = PriceEntry(goods_id=goods.id, price=price, effective_date=effective_date)
        self.db.add(entry)
        self.db.flush()
        logger.debug("Price %s: %s effective %s", goods.code, price, effective_date.isoformat())
        return entry

    def history(self, goods_id: str) -> List[PriceEntry]:
        self._require_goods(goods_id)
        return (
            self.db.query(PriceEntry)
            .filter(PriceEntry.goods_id == goods_id)
            .order_by(PriceEntry.effective_date.asc(), PriceEntry.id.asc())
            .all()
        )

    def price_as_of_date(self, as_of: date) -> List[dict]:
        # Every entry dated exactly `as_of`, duplicates included, in insertion order per goods
        rows = (
            self.db.query(Goods.name, PriceEntry.price)
            .join(PriceEntry, PriceEntry.goods_id == Goods.id)
            .filter(PriceEntry.effective_date == as_of)
            .order_by(Goods.name.asc(), PriceEntry.id.asc())
            .all()
        )
        return [{"name": name, "price": price} for name, price in rows]

# backend/models/goods.py
import uuid

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database import Base

# Model Goods
# A single inventory item ("barang"). `stock` is the live quantity and always
# matches the stock_after of the newest stock log entry, except after a direct
# overwrite through InventoryService.overwrite_stock.
# `price_label` is display text only; effective prices live in the prices table.
class Goods(Base):
    __tablename__ = "goods"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, index=True)
    code = Column(String, unique=True, nullable=False, index=True)  # BRG/YY/MM/00001

    # No floor: negative stock is allowed
    stock = Column(Integer, nullable=False, default=0)

    price_label = Column(String, nullable=True)
    photo_path = Column(String, nullable=True)

    stock_logs = relationship(
        "StockLogEntry",
        back_populates="goods",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[StockLogEntry.created_at, StockLogEntry.id]",
    )
    prices = relationship(
        "PriceEntry",
        back_populates="goods",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[PriceEntry.effective_date, PriceEntry.id]",
    )

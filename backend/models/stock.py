# backend/models/stock.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from database import Base

# Append-only stock ledger entry. The autoincrement id orders entries that
# share a created_at timestamp.
class StockLogEntry(Base):
    __tablename__ = "stock_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    goods_id = Column(String(36), ForeignKey("goods.id", ondelete="CASCADE"), nullable=False, index=True)

    # Positive for an increase, negative for a decrease
    delta = Column(Integer, nullable=False)
    stock_after = Column(Integer, nullable=False)

    # Stamped from the service clock, not the database server
    created_at = Column(DateTime, nullable=False, index=True)

    goods = relationship("Goods", back_populates="stock_logs")

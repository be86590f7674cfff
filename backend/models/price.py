# backend/models/price.py
from sqlalchemy import Column, Integer, String, ForeignKey, Date
from sqlalchemy.orm import relationship
from database import Base

# Effective-dated price entry. The price is kept as text so decimal values
# round-trip exactly.
class PriceEntry(Base):
    __tablename__ = "prices"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    goods_id = Column(String(36), ForeignKey("goods.id", ondelete="CASCADE"), nullable=False, index=True)

    price = Column(String, nullable=False)
    effective_date = Column(Date, nullable=False, index=True)

    goods = relationship("Goods", back_populates="prices")

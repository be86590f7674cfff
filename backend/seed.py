# backend/seed.py
"""Reset the database and load demo users, goods, stock and prices."""
import logging
from datetime import date

from database import SessionLocal, init_db
from models.goods import Goods
from models.log import Log
from models.price import PriceEntry
from models.stock import StockLogEntry
from models.users import User
from services.inventory import InventoryService
from utils.hashing import get_password_hash

logger = logging.getLogger("seed")

USERS = [
    ("admin", "admin123", "admin"),
    ("user1", "password123", "staff"),
    ("manager", "manager123", "staff"),
]

# name, opening stock, price label, [(effective date, price)]
GOODS = [
    ("Laptop Asus ROG Strix G15", 15, "18500000", [("2025-10-01", "18500000"), ("2025-11-01", "17999000")]),
    ("Mouse Logitech G502", 50, "850000", [("2025-10-01", "850000")]),
    ("Keyboard Mechanical Keychron K2", 30, "1250000", [("2025-10-01", "1250000")]),
    ("Monitor LG UltraGear 27 inch", 20, "4500000", [("2025-10-01", "4500000"), ("2025-10-15", "4350000")]),
    ("Headset HyperX Cloud II", 25, "1100000", [("2025-10-01", "1100000")]),
]


def clear(db):
    # Children first, then parents
    for model in (StockLogEntry, PriceEntry, Goods, Log, User):
        db.query(model).delete()
    db.commit()


def seed():
    init_db()
    db = SessionLocal()
    try:
        clear(db)
        logger.info("Data cleared")

        for username, password, role in USERS:
            db.add(User(username=username, password_hash=get_password_hash(password), role=role))
        db.commit()
        logger.info("%d users created", len(USERS))

        inventory = InventoryService(db)
        for name, stock, label, prices in GOODS:
            goods = inventory.create_goods(name, initial_stock=stock, price_label=label)
            for effective, price in prices:
                inventory.add_price(goods.id, price, date.fromisoformat(effective))
            logger.info("Created %s %s", goods.code, goods.name)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    seed()

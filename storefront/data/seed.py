# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy import select

from storefront.data.database import SessionLocal
from storefront.data.models.product import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    {"name": "Laptop Pro 14", "price": Decimal("999.99"), "category": "laptops", "stock_quantity": 5},
    {"name": "Laptop Air 13", "price": Decimal("749.00"), "category": "laptops", "stock_quantity": 8},
    {"name": "Wireless Mouse", "price": Decimal("49.50"), "category": "accessories", "stock_quantity": 40},
    {"name": "Mechanical Keyboard", "price": Decimal("199.99"), "category": "accessories", "stock_quantity": 15},
]


def seed(db=None) -> int:
    """Inserts the demo catalog into an empty products table. Returns how many rows were added."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        # only seed if empty
        if db.execute(select(ProductModel.id).limit(1)).first():
            return 0
        db.add_all([ProductModel(**p) for p in DEMO_PRODUCTS])
        db.commit()
        logger.info(f"Seeded {len(DEMO_PRODUCTS)} demo products")
        return len(DEMO_PRODUCTS)
    finally:
        if own_session:
            db.close()

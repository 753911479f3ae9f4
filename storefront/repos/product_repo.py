# storefront/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(self, search: str | None = None, category: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel)
        if search:
            stmt = stmt.where(ProductModel.name.ilike(f"%{search}%"))
        if category:
            stmt = stmt.where(ProductModel.category == category)
        return list(self.db.execute(stmt.order_by(ProductModel.name)).scalars().all())

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update_product(self, product_id: int, data: dict) -> ProductModel | None:
        product = self.get_product(product_id)
        if product:
            for key, value in data.items():
                setattr(product, key, value)
            self.db.commit()
            self.db.refresh(product)
        return product

    def delete_product(self, product_id: int) -> bool:
        product = self.get_product(product_id)
        if not product:
            return False
        self.db.delete(product)
        self.db.commit()
        return True

    def read_stock(self, product_id: int) -> int | None:
        # straight from the table, bypassing whatever the session has cached
        return self.db.execute(
            select(ProductModel.stock_quantity).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def write_stock(self, product_id: int, new_count: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock_quantity=new_count)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self._expire_stock(product_id)
        return result.rowcount

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        # UPDATE products SET stock = stock - n WHERE id = ? AND stock >= n
        # 0 rows -> not enough stock (or no such product)
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.stock_quantity >= quantity,
            )
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self._expire_stock(product_id)
        return result.rowcount

    def increment_stock(self, product_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock_quantity=ProductModel.stock_quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self._expire_stock(product_id)
        return result.rowcount

    def _expire_stock(self, product_id: int):
        # loaded rows would keep the pre-UPDATE count otherwise
        cached = self.db.identity_map.get(self.db.identity_key(ProductModel, product_id))
        if cached is not None:
            self.db.expire(cached, ["stock_quantity"])

    def rollback(self):
        self.db.rollback()

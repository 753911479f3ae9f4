# storefront/services/product_service.py
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import ProductIn
from storefront.repos.product_repo import ProductRepo
from storefront.services.stock_ledger import StockLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.ledger = StockLedger(db)

    def list_products(self, search: str | None = None, category: str | None = None) -> list[ProductModel]:
        return self.repo.list_products(search=search, category=category)

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def create_product(self, payload: ProductIn) -> ProductModel:
        created = self.repo.create_product(ProductModel(**payload.model_dump()))
        logger.info(f"Created product {created.id} ({created.name})")
        return created

    def update_product(self, product_id: int, payload: ProductIn) -> ProductModel:
        product = self.repo.update_product(product_id, payload.model_dump())
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        logger.info(f"Updated product {product_id}")
        return product

    def delete_product(self, product_id: int) -> None:
        if not self.repo.delete_product(product_id):
            raise NotFoundError(f"Product {product_id} not found")
        logger.info(f"Deleted product {product_id}")

    def set_stock(self, product_id: int, stock_quantity: int) -> ProductModel:
        self.ledger.write_stock(product_id, stock_quantity)
        return self.get_product(product_id)

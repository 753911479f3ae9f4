# storefront/services/stock_ledger.py
from sqlalchemy.orm import Session

from storefront.domain.errors import InsufficientStock, NotFoundError, ValidationError
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class StockLedger:
    """
    Authoritative stock counts.

    read_stock/write_stock are the plain read and overwrite pair (admin restock).
    Checkout must go through reserve(), a single conditional UPDATE, so two
    sessions buying the same product cannot both succeed on a stale read.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def read_stock(self, product_id: int) -> int:
        stock = self.repo.read_stock(product_id)
        if stock is None:
            raise NotFoundError(f"Product {product_id} not found")
        return stock

    def write_stock(self, product_id: int, new_count: int) -> int:
        if new_count < 0:
            raise ValidationError("Stock count cannot be negative")

        if self.repo.write_stock(product_id, new_count) == 0:
            raise NotFoundError(f"Product {product_id} not found")

        logger.info(f"Stock of product {product_id} set to {new_count}")
        return new_count

    def reserve(self, product_id: int, quantity: int) -> None:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        rowcount = self.repo.decrement_stock(product_id, quantity)
        if rowcount == 0:
            # tell "gone" apart from "not enough"
            self.read_stock(product_id)
            logger.warning(f"Reservation of {quantity} x product {product_id} rejected")
            raise InsufficientStock(product_id, quantity)

        logger.info(f"Reserved {quantity} x product {product_id}")

    def release(self, product_id: int, quantity: int) -> None:
        if self.repo.increment_stock(product_id, quantity) == 0:
            raise NotFoundError(f"Product {product_id} not found")
        logger.info(f"Released {quantity} x product {product_id}")

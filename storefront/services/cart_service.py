# storefront/services/cart_service.py
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from storefront.domain.cart import Cart, CartLine
from storefront.domain.errors import NotFoundError, TransientIOError
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_store import CartStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart use cases for one browsing session.
    Every command loads the stored cart, applies one mutation and writes it back.
    """

    def __init__(self, db: Session, cart_store: CartStore):
        self.products = ProductRepo(db)
        self.store = cart_store

    def _load(self, session_id: str) -> Cart:
        try:
            return self.store.load(session_id)
        except RedisError as e:
            raise TransientIOError("Cart storage unavailable") from e

    def _save(self, session_id: str, cart: Cart) -> None:
        try:
            self.store.save(session_id, cart)
        except RedisError as e:
            raise TransientIOError("Cart storage unavailable") from e

    # query
    def get_cart(self, session_id: str) -> Cart:
        return self._load(session_id)

    # commands
    def add_product(self, session_id: str, product_id: int, quantity: int = 1) -> Cart:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")

        cart = self._load(session_id)
        # StockExceeded propagates, stored cart stays as it was
        line = cart.add_line(product, quantity)
        self._save(session_id, cart)

        logger.info(f"Session {session_id}: product {product_id} now x{line.quantity} in cart")
        return cart

    def remove_line(self, session_id: str, index: int) -> Cart:
        cart = self._load(session_id)
        removed: CartLine | None = cart.remove_line(index)

        if removed is None:
            logger.info(f"Session {session_id}: no cart line at {index}")
            return cart

        self._save(session_id, cart)
        logger.info(f"Session {session_id}: removed product {removed.product_id} from cart")
        return cart

    def clear(self, session_id: str) -> Cart:
        try:
            self.store.delete(session_id)
        except RedisError as e:
            raise TransientIOError("Cart storage unavailable") from e
        return Cart()

# storefront/services/checkout_service.py
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.cart import Cart, CartLine
from storefront.domain.errors import (
    EmptyCartError,
    InsufficientStock,
    NotAuthenticatedError,
    NotFoundError,
    PartialCommitInconsistency,
    TransientIOError,
)
from storefront.repos.order_item_repo import OrderItemRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_store import CartStore
from storefront.services.identity_service import Identity, IdentityGate
from storefront.services.notification_service import NotificationService
from storefront.services.profile_service import ProfileService
from storefront.services.stock_ledger import StockLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PROFILE_ENSURING = "profile_ensuring"
    ORDER_CREATING = "order_creating"
    LINES_INSERTING = "lines_inserting"
    STOCK_SETTLING = "stock_settling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class CheckoutResult:
    order_id: str
    total: Decimal
    state: CheckoutState
    stock_levels: dict[int, int] = field(default_factory=dict)
    unsettled: List[int] = field(default_factory=list)
    inconsistencies: List[PartialCommitInconsistency] = field(default_factory=list)

    @property
    def short_id(self) -> str:
        return self.order_id[:8]


class CheckoutAttempt:
    """State of a single submission, logged on every transition."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.state = CheckoutState.IDLE
        self.order_id: str | None = None
        self.inconsistencies: List[PartialCommitInconsistency] = []

    def advance(self, state: CheckoutState):
        logger.info(f"Checkout {self.session_id}: {self.state.value} -> {state.value}")
        self.state = state

    def inconsistent(self, step: str, detail: str):
        problem = PartialCommitInconsistency(self.order_id or "-", step, detail)
        logger.error(str(problem))
        self.inconsistencies.append(problem)


class CheckoutService:
    """
    Turns the session's cart into an order.

    Steps run one after another, each its own commit:
    profile -> order -> order lines -> stock reservations.
    There is no transaction across them, so later failures are undone by hand:
    a failed line insert or a stock conflict releases what was reserved and
    cancels the order (orders are never deleted). A database error while
    settling one product is logged and the checkout carries on; anything
    unexpected is compensated like a conflict and re-raised.
    The cart is cleared only on success, keeping what another tab added.
    """

    def __init__(
        self,
        db: Session,
        cart_store: CartStore,
        identity_gate: IdentityGate,
        notifier: NotificationService | None = None,
    ):
        self.db = db
        self.cart_store = cart_store
        self.identity_gate = identity_gate
        self.notifier = notifier or NotificationService()

        self.profiles = ProfileService(db)
        self.orders = OrderRepo(db)
        self.order_items = OrderItemRepo(db)
        self.ledger = StockLedger(db)

    def submit(self, session_id: str, token: str | None) -> CheckoutResult:
        attempt = CheckoutAttempt(session_id)
        attempt.advance(CheckoutState.VALIDATING)

        # validation failures never reach FAILED: nothing was attempted
        raw, cart = self._load_cart(session_id)
        if not cart:
            raise EmptyCartError()

        identity = self.identity_gate.get_current_identity(token)
        if identity is None:
            raise NotAuthenticatedError()

        total = cart.total()
        purchased = list(cart.lines)

        try:
            attempt.advance(CheckoutState.PROFILE_ENSURING)
            self._ensure_profile(identity)

            attempt.advance(CheckoutState.ORDER_CREATING)
            order = self._create_order(identity, total)
            attempt.order_id = order.id

            attempt.advance(CheckoutState.LINES_INSERTING)
            self._insert_lines(attempt, order, purchased)

            attempt.advance(CheckoutState.STOCK_SETTLING)
            unsettled = self._settle(attempt, order, purchased)
        except Exception:
            attempt.advance(CheckoutState.FAILED)
            raise

        attempt.advance(CheckoutState.SUCCEEDED)
        self._clear_cart(attempt, session_id, cart, raw, purchased)
        self._notify(identity, order)

        return CheckoutResult(
            order_id=order.id,
            total=total,
            state=attempt.state,
            stock_levels=self._stock_levels(purchased),
            unsettled=unsettled,
            inconsistencies=attempt.inconsistencies,
        )

    # steps

    def _load_cart(self, session_id: str) -> tuple[str | None, Cart]:
        try:
            raw = self.cart_store.read_raw(session_id)
        except RedisError as e:
            raise TransientIOError("Cart storage unavailable") from e
        return raw, Cart.loads(raw)

    def _ensure_profile(self, identity: Identity):
        try:
            self.profiles.ensure_profile(identity)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise TransientIOError("Could not load profile") from e

    def _create_order(self, identity: Identity, total: Decimal) -> OrderModel:
        try:
            order = self.orders.create_order(
                OrderModel(user_id=identity.id, total_price=total, status="pending")
            )
        except SQLAlchemyError as e:
            # nothing written yet, nothing to undo
            self.db.rollback()
            raise TransientIOError("Could not create order") from e

        logger.info(f"Order {order.id} created for user {identity.id}, total {total}")
        return order

    def _insert_lines(self, attempt: CheckoutAttempt, order: OrderModel, lines: List[CartLine]):
        items = [
            OrderItemModel(
                order_id=order.id,
                product_id=line.product_id,
                quantity=line.quantity,
                price_at_purchase=line.unit_price,
            )
            for line in lines
        ]
        try:
            self.order_items.create_items(items)
        except SQLAlchemyError as e:
            self.db.rollback()
            self._compensate(attempt, order, [])
            raise TransientIOError("Could not save order lines") from e

    def _settle(self, attempt: CheckoutAttempt, order: OrderModel, lines: List[CartLine]) -> List[int]:
        settled: List[CartLine] = []
        unsettled: List[int] = []

        for line in lines:
            try:
                self.ledger.reserve(line.product_id, line.quantity)
            except InsufficientStock:
                self._compensate(attempt, order, settled)
                raise
            except NotFoundError as e:
                # product deleted since it went into the cart
                self._compensate(attempt, order, settled)
                raise InsufficientStock(line.product_id, line.quantity) from e
            except SQLAlchemyError as e:
                self.db.rollback()
                attempt.inconsistent("stock settlement", f"product {line.product_id} not decremented: {e}")
                unsettled.append(line.product_id)
                continue
            except Exception:
                # unexpected: undo what was taken, then let it surface
                self.db.rollback()
                self._compensate(attempt, order, settled)
                raise
            settled.append(line)

        return unsettled

    def _compensate(self, attempt: CheckoutAttempt, order: OrderModel, settled: List[CartLine]):
        logger.warning(f"Rolling back order {order.id}")

        for line in reversed(settled):
            try:
                self.ledger.release(line.product_id, line.quantity)
            except (SQLAlchemyError, NotFoundError) as e:
                self.db.rollback()
                attempt.inconsistent("compensation", f"product {line.product_id} not restocked: {e}")

        try:
            self.orders.update_order_status(order.id, "cancelled")
        except SQLAlchemyError as e:
            self.db.rollback()
            attempt.inconsistent("compensation", f"order left pending: {e}")

    # after success

    def _clear_cart(
        self,
        attempt: CheckoutAttempt,
        session_id: str,
        cart: Cart,
        raw: str | None,
        purchased: List[CartLine],
    ):
        cart.clear()
        try:
            if raw is not None and self.cart_store.delete_if_unchanged(session_id, raw):
                return
            # another tab wrote to the cart meanwhile, keep its additions
            current = self.cart_store.load(session_id)
            current.discard(purchased)
            if current:
                self.cart_store.save(session_id, current)
            else:
                self.cart_store.delete(session_id)
            logger.warning(f"Checkout {session_id}: cart changed during checkout, {len(current)} lines kept")
        except RedisError as e:
            # order is placed, a stale cart must not turn this into a failure
            attempt.inconsistent("cart clearing", f"stored cart kept: {e}")

    def _notify(self, identity: Identity, order: OrderModel):
        try:
            self.notifier.send_order_notification(identity.id, order.id)
        except Exception as e:
            logger.warning(f"Order {order.id}: notification not queued: {e}")

    def _stock_levels(self, lines: List[CartLine]) -> dict[int, int]:
        levels = {}
        for line in lines:
            try:
                levels[line.product_id] = self.ledger.read_stock(line.product_id)
            except (SQLAlchemyError, NotFoundError) as e:
                self.db.rollback()
                logger.warning(f"Could not refresh stock of product {line.product_id}: {e}")
        return levels

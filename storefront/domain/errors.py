# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base for every failure scoped to a single request or checkout attempt."""


class ValidationError(StorefrontError):
    """Request refused up front; nothing was written."""


class EmptyCartError(ValidationError):
    def __init__(self):
        super().__init__("Cart is empty")


class NotAuthenticatedError(ValidationError):
    def __init__(self):
        super().__init__("Sign in to continue")


class NotFoundError(StorefrontError):
    pass


class AccessDenied(StorefrontError):
    pass


class TransientIOError(StorefrontError):
    """An external call failed. Nothing is retried; the caller may resubmit."""


class StockExceeded(StorefrontError):
    """Cart pre-check: the requested quantity is above the last known stock."""

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Only {available} in stock for product {product_id}, requested {requested}"
        )


class InsufficientStock(StorefrontError):
    """Settlement conflict: the authoritative stock count is below the purchase."""

    def __init__(self, product_id: int, requested: int):
        self.product_id = product_id
        self.requested = requested
        super().__init__(f"Insufficient stock for product {product_id} (requested {requested})")


class PartialCommitInconsistency(StorefrontError):
    """
    Some writes of a checkout landed and some did not.
    Logged and reported in the checkout result, never raised to the user.
    """

    def __init__(self, order_id: str, step: str, detail: str):
        self.order_id = order_id
        self.step = step
        self.detail = detail
        super().__init__(f"Order {order_id} inconsistent after {step}: {detail}")

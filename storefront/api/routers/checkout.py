# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import (
    get_cart_store,
    get_identity_gate,
    get_notifier,
    get_session_id,
    get_token,
    to_http,
)
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CheckoutOut
from storefront.services.cart_store import CartStore
from storefront.services.checkout_service import CheckoutService
from storefront.services.identity_service import IdentityGate
from storefront.services.notification_service import NotificationService

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/", response_model=CheckoutOut, status_code=201)
def checkout(
    session_id: str = Depends(get_session_id),
    token: str | None = Depends(get_token),
    db: Session = Depends(get_db),
    cart_store: CartStore = Depends(get_cart_store),
    gate: IdentityGate = Depends(get_identity_gate),
    notifier: NotificationService = Depends(get_notifier),
):
    """
    Places an order from the session's cart.
    On success the cart is emptied and the order id comes back for the confirmation screen.
    """
    svc = CheckoutService(db, cart_store=cart_store, identity_gate=gate, notifier=notifier)
    try:
        result = svc.submit(session_id, token)
    except StorefrontError as e:
        raise to_http(e)

    return {
        "order_id": result.order_id,
        "short_id": result.short_id,
        "total": result.total,
        "state": result.state.value,
        "stock_levels": result.stock_levels,
        "unsettled": result.unsettled,
    }

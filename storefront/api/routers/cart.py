# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_cart_store, get_session_id, to_http
from storefront.data.database import get_db
from storefront.domain.cart import Cart
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CartOut, ItemIn
from storefront.services.cart_service import CartService
from storefront.services.cart_store import CartStore

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session, cart_store: CartStore):
    return CartService(db=db, cart_store=cart_store)


def cart_out(cart: Cart) -> dict:
    return {
        "items": [line.model_dump() for line in cart.lines],
        "total": cart.total(),
        "count": sum(line.quantity for line in cart.lines),
    }


@router.get("/", response_model=CartOut)
def get_cart(
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
    cart_store: CartStore = Depends(get_cart_store),
):
    svc = get_service(db, cart_store)
    try:
        return cart_out(svc.get_cart(session_id))
    except StorefrontError as e:
        raise to_http(e)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
    cart_store: CartStore = Depends(get_cart_store),
):
    svc = get_service(db, cart_store)
    try:
        return cart_out(svc.add_product(session_id, payload.product_id, payload.quantity))
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/items/{index}", response_model=CartOut)
def remove_item(
    index: int,
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
    cart_store: CartStore = Depends(get_cart_store),
):
    svc = get_service(db, cart_store)
    try:
        return cart_out(svc.remove_line(session_id, index))
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/", response_model=CartOut)
def clear_cart(
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
    cart_store: CartStore = Depends(get_cart_store),
):
    svc = get_service(db, cart_store)
    try:
        return cart_out(svc.clear(session_id))
    except StorefrontError as e:
        raise to_http(e)

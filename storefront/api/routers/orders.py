# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_identity, to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import OrderDetailOut, OrderOut
from storefront.services.identity_service import Identity
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/", response_model=List[OrderOut])
def my_orders(
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
):
    """Order history of the signed in user, newest first."""
    return OrderService(db).list_my_orders(identity)


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(
    order_id: str,
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
):
    try:
        return OrderService(db).get_order(order_id, identity)
    except StorefrontError as e:
        raise to_http(e)

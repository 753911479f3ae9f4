# storefront/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request

from storefront.domain.errors import (
    AccessDenied,
    InsufficientStock,
    NotAuthenticatedError,
    NotFoundError,
    StockExceeded,
    StorefrontError,
    TransientIOError,
    ValidationError,
)
from storefront.services.cart_store import CartStore
from storefront.services.identity_service import Identity, IdentityGate
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import ADMIN_EMAIL


def to_http(e: StorefrontError) -> HTTPException:
    if isinstance(e, NotAuthenticatedError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, (StockExceeded, InsufficientStock)):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, AccessDenied):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, TransientIOError):
        return HTTPException(status_code=503, detail="Something went wrong, please try again")
    return HTTPException(status_code=400, detail=str(e))


@lru_cache
def get_cart_store() -> CartStore:
    return CartStore()


def get_notifier() -> NotificationService:
    return NotificationService()


def get_identity_gate(request: Request) -> IdentityGate:
    return request.app.state.identity_gate


def get_session_id(x_session_id: str = Header(..., min_length=1, max_length=128)) -> str:
    return x_session_id


def get_token(authorization: str | None = Header(None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def current_identity(
    token: str | None = Depends(get_token),
    gate: IdentityGate = Depends(get_identity_gate),
) -> Identity:
    try:
        identity = gate.get_current_identity(token)
    except StorefrontError as e:
        raise to_http(e)
    if identity is None:
        raise to_http(NotAuthenticatedError())
    return identity


def require_admin(identity: Identity = Depends(current_identity)) -> Identity:
    if identity.email != ADMIN_EMAIL:
        raise HTTPException(status_code=403, detail="Admins only")
    return identity

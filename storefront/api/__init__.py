# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.routers import admin, auth, cart, checkout, health, orders, products
from storefront.services.identity_service import IdentityChanged, IdentityGate
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def log_identity_change(event: IdentityChanged):
    if event.identity is None:
        logger.info("Identity changed: signed out")
    else:
        logger.info(f"Identity changed: {event.identity.id}")


def create_app(identity_gate: IdentityGate | None = None, lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.identity_gate = identity_gate or IdentityGate()
    app.state.identity_gate.subscribe(log_identity_change)

    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(auth.router)
    app.include_router(admin.router)

    return app

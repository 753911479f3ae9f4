# storefront/services/order_service.py
from sqlalchemy.orm import Session

from storefront.data.models.order import ORDER_STATUSES
from storefront.domain.errors import AccessDenied, NotFoundError, ValidationError
from storefront.repos.order_item_repo import OrderItemRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.identity_service import Identity
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _order_dict(order) -> dict:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "total_price": order.total_price,
        "status": order.status,
        "created_at": order.created_at,
    }


class OrderService:
    """Order history for customers, order status management for the admin."""

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)
        self.items = OrderItemRepo(db)

    def list_my_orders(self, identity: Identity) -> list[dict]:
        return [_order_dict(o) for o in self.repo.list_for_user(identity.id)]

    def get_order(self, order_id: str, identity: Identity) -> dict:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        if order.user_id != identity.id:
            raise AccessDenied("Not your order")

        result = _order_dict(order)
        result["items"] = [
            {
                "id": item.id,
                "product_id": item.product_id,
                "quantity": item.quantity,
                "price_at_purchase": item.price_at_purchase,
                # product may have been deleted since
                "product_name": item.product.name if item.product else None,
                "image_url": item.product.image_url if item.product else None,
            }
            for item in self.items.list_for_order(order_id)
        ]
        return result

    # admin

    def list_all_orders(self) -> list[dict]:
        return [_order_dict(o) for o in self.repo.list_all()]

    def update_status(self, order_id: str, status: str) -> dict:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Unknown order status {status}")

        order = self.repo.update_order_status(order_id, status)
        if not order:
            raise NotFoundError("Order not found")

        logger.info(f"Order {order_id} status -> {status}")
        return _order_dict(order)

# all models imported here so SQLAlchemy registers them in Base.metadata

from storefront.data.models.product import ProductModel
from storefront.data.models.profile import ProfileModel
from storefront.data.models.order import OrderModel, ORDER_STATUSES
from storefront.data.models.order_item import OrderItemModel

__all__ = ["ProductModel", "ProfileModel", "OrderModel", "OrderItemModel", "ORDER_STATUSES"]

# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal
from decimal import Decimal
from datetime import datetime

OrderStatus = Literal["pending", "shipped", "delivered", "cancelled"]


class ProductIn(BaseModel):
    """Admin product form."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    stock_quantity: int = Field(0, ge=0)
    store_id: str | None = None


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    stock_quantity: int
    store_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class StockIn(BaseModel):
    stock_quantity: int = Field(..., ge=0)


class ItemIn(BaseModel):
    """Adding a product to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class CartLineOut(BaseModel):
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    items: List[CartLineOut]
    total: Decimal
    count: int


class CheckoutOut(BaseModel):
    order_id: str
    short_id: str
    total: Decimal
    state: str
    stock_levels: dict[int, int]
    unsettled: List[int]


class OrderOut(BaseModel):
    id: str
    user_id: str
    total_price: Decimal
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderItemOut(BaseModel):
    id: int
    product_id: int | None
    quantity: int
    price_at_purchase: Decimal
    product_name: str | None = None
    image_url: str | None = None


class OrderDetailOut(OrderOut):
    items: List[OrderItemOut]


class OrderStatusIn(BaseModel):
    status: OrderStatus

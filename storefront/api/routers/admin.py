# storefront/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import require_admin, to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import OrderOut, OrderStatusIn, ProductIn, ProductOut, StockIn
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# orders

@router.get("/orders", response_model=List[OrderOut])
def list_orders(db: Session = Depends(get_db)):
    return OrderService(db).list_all_orders()


@router.patch("/orders/{order_id}", response_model=OrderOut)
def update_order_status(order_id: str, payload: OrderStatusIn, db: Session = Depends(get_db)):
    try:
        return OrderService(db).update_status(order_id, payload.status)
    except StorefrontError as e:
        raise to_http(e)


# products

@router.get("/products", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return ProductService(db).list_products()


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    return ProductService(db).create_product(payload)


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn, db: Session = Depends(get_db)):
    try:
        return ProductService(db).update_product(product_id, payload)
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        ProductService(db).delete_product(product_id)
    except StorefrontError as e:
        raise to_http(e)


@router.put("/products/{product_id}/stock", response_model=ProductOut)
def set_stock(product_id: int, payload: StockIn, db: Session = Depends(get_db)):
    try:
        return ProductService(db).set_stock(product_id, payload.stock_quantity)
    except StorefrontError as e:
        raise to_http(e)

# storefront/repos/order_item_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order_item import OrderItemModel


class OrderItemRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_items(self, items: list[OrderItemModel]) -> list[OrderItemModel]:
        self.db.add_all(items)
        self.db.commit()
        for item in items:
            self.db.refresh(item)
        return items

    def list_for_order(self, order_id: str) -> list[OrderItemModel]:
        stmt = (
            select(OrderItemModel)
            .options(selectinload(OrderItemModel.product))
            .where(OrderItemModel.order_id == order_id)
            .order_by(OrderItemModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def rollback(self):
        self.db.rollback()

# storefront/repos/order_repo.py
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        # header only, lines go in through OrderItemRepo as a separate commit
        self.db.add(order)
        self.db.commit()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: str) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_all(self) -> list[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_orphans(self, created_before: datetime) -> list[OrderModel]:
        # pending orders without a single line
        has_items = select(OrderItemModel.id).where(OrderItemModel.order_id == OrderModel.id).exists()
        stmt = select(OrderModel).where(
            OrderModel.status == "pending",
            OrderModel.created_at < created_before,
            ~has_items,
        )
        return list(self.db.execute(stmt).scalars().all())

    def update_order_status(self, order_id: str, status: str) -> OrderModel | None:
        stmt = update(OrderModel).where(OrderModel.id == order_id).values(status=status)
        if self.db.execute(stmt).rowcount == 0:
            self.db.rollback()
            return None
        self.db.commit()

        order = self.db.get(OrderModel, order_id)
        self.db.refresh(order)
        return order

    def rollback(self):
        self.db.rollback()

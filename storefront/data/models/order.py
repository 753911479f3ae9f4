import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base

ORDER_STATUSES = ("pending", "shipped", "delivered", "cancelled")


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)

    # recorded at submission, never recomputed from the lines
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, shipped, delivered, cancelled
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship("OrderItemModel", back_populates="order")

from datetime import datetime, timezone, timedelta
from decimal import Decimal

import pytest

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.seed import DEMO_PRODUCTS, seed
from storefront.domain.errors import AccessDenied, NotFoundError, ValidationError
from storefront.repos.order_item_repo import OrderItemRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.notification_service import send_order_notification_task
from storefront.services.order_service import OrderService
from storefront.tasks.orphans import cancel_orphaned_orders

from tests.conftest import ALICE, BOB


def place(db, user_id, total="10.00", created_at=None, items=()):
    order = OrderRepo(db).create_order(
        OrderModel(
            user_id=user_id,
            total_price=Decimal(total),
            created_at=created_at or datetime.now(timezone.utc),
        )
    )
    if items:
        OrderItemRepo(db).create_items(
            [
                OrderItemModel(order_id=order.id, product_id=pid, quantity=qty, price_at_purchase=Decimal(price))
                for pid, qty, price in items
            ]
        )
    return order


def test_history_is_newest_first_and_per_user(db):
    now = datetime.now(timezone.utc)
    old = place(db, ALICE.id, created_at=now - timedelta(days=2))
    new = place(db, ALICE.id, created_at=now)
    place(db, BOB.id)

    orders = OrderService(db).list_my_orders(ALICE)

    assert [o["id"] for o in orders] == [new.id, old.id]


def test_order_detail_with_items(db, make_product):
    laptop = make_product()
    order = place(db, ALICE.id, total="1999.98", items=[(laptop.id, 2, "999.99")])

    detail = OrderService(db).get_order(order.id, ALICE)

    assert detail["total_price"] == Decimal("1999.98")
    assert detail["items"][0]["product_name"] == "Laptop Pro 14"
    assert detail["items"][0]["quantity"] == 2
    assert detail["items"][0]["price_at_purchase"] == Decimal("999.99")


def test_order_detail_survives_product_deletion(db, make_product):
    laptop = make_product()
    order = place(db, ALICE.id, items=[(laptop.id, 1, "999.99")])
    db.delete(laptop)
    db.commit()
    db.expire_all()

    item = OrderService(db).get_order(order.id, ALICE)["items"][0]

    assert item["product_id"] is None
    assert item["product_name"] is None
    assert item["price_at_purchase"] == Decimal("999.99")


def test_order_detail_is_owner_only(db):
    order = place(db, ALICE.id)
    with pytest.raises(AccessDenied):
        OrderService(db).get_order(order.id, BOB)
    with pytest.raises(NotFoundError):
        OrderService(db).get_order("missing", ALICE)


def test_admin_status_update(db):
    order = place(db, ALICE.id)
    svc = OrderService(db)

    assert svc.update_status(order.id, "shipped")["status"] == "shipped"
    with pytest.raises(ValidationError):
        svc.update_status(order.id, "lost")
    with pytest.raises(NotFoundError):
        svc.update_status("missing", "shipped")
    assert [o["status"] for o in svc.list_all_orders()] == ["shipped"]


def test_orphan_sweep_cancels_only_old_lineless_pending_orders(db, make_product):
    laptop = make_product()
    long_ago = datetime.now(timezone.utc) - timedelta(hours=1)

    orphan = place(db, ALICE.id, created_at=long_ago)
    complete = place(db, ALICE.id, created_at=long_ago, items=[(laptop.id, 1, "999.99")])
    fresh = place(db, BOB.id)
    shipped = place(db, BOB.id, created_at=long_ago)
    OrderRepo(db).update_order_status(shipped.id, "shipped")

    cancelled = cancel_orphaned_orders(db, grace_seconds=15 * 60)

    assert cancelled == [orphan.id]
    statuses = {o.id: o.status for o in OrderRepo(db).list_all()}
    assert statuses == {
        orphan.id: "cancelled",
        complete.id: "pending",
        fresh.id: "pending",
        shipped.id: "shipped",
    }


def test_notification_task():
    result = send_order_notification_task(ALICE.id, "6f1f5a0e-aaaa-bbbb-cccc-000000000001")
    assert result["status"] == "sent"


def test_seed_only_fills_empty_catalog(db):
    assert seed(db) == len(DEMO_PRODUCTS)
    assert seed(db) == 0

# storefront/tasks/orphans.py
from datetime import datetime, timezone, timedelta

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.order_repo import OrderRepo
from storefront.utils.settings import ORPHAN_GRACE_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def cancel_orphaned_orders(db, grace_seconds: int = ORPHAN_GRACE_SECONDS) -> list[str]:
    """Pending orders whose lines never made it in (checkout interrupted) get cancelled."""
    repo = OrderRepo(db)
    cutoff = datetime.now(timezone.utc) - timedelta(seconds=grace_seconds)

    orphans = repo.list_orphans(cutoff)
    logger.info(f"Found {len(orphans)} orphaned orders")

    for order in orphans:
        order.status = "cancelled"
        logger.warning(f"Cancelling orphaned order {order.id} (user {order.user_id})")
    db.commit()

    return [o.id for o in orphans]


@celery_app.task(name="storefront.tasks.orphans.cancel_orphaned_orders_task")
def cancel_orphaned_orders_task():
    logger.info("Orphaned orders sweep started")

    db = SessionLocal()
    try:
        return cancel_orphaned_orders(db)
    finally:
        db.close()

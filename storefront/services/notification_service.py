# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order confirmations.
    Sent through Celery so checkout never waits on delivery.
    """

    @staticmethod
    def send_order_notification(user_id: str, order_id: str):
        send_order_notification_task.delay(user_id, order_id)


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: str, order_id: str):
    """
    Celery task. A real deployment would hand this to a mail provider;
    for now it only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order #{order_id[:8]} received")

    return {"user_id": user_id, "order_id": order_id, "status": "sent"}

# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, ORPHAN_GRACE_SECONDS

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks have to be imported explicitly for the worker to register them
celery_app.conf.imports = (
    "storefront.tasks.orphans",
    "storefront.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "cancel-orphaned-orders": {
        "task": "storefront.tasks.orphans.cancel_orphaned_orders_task",
        "schedule": float(ORPHAN_GRACE_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"

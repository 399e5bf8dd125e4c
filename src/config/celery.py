"""
Celery configuration for the print orders service.

DJANGO_SETTINGS_MODULE is set before the app is created so Celery reads
its configuration from Django settings (``CELERY_`` prefix).  The sweep
of expired unpaid orders runs from ``CELERY_BEAT_SCHEDULE`` and once more
every time a worker comes up.
"""

import os

import structlog
from celery import Celery
from celery.signals import worker_ready

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

logger = structlog.get_logger(__name__)

app = Celery("print_orders")

app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()


@worker_ready.connect
def sweep_on_worker_start(sender=None, **kwargs) -> None:
    from modules.orders.tasks import sweep_expired_orders

    logger.info("orders.sweep_scheduled_on_startup")
    sweep_expired_orders.delay()

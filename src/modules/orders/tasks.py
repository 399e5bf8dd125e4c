"""Celery tasks of the orders module."""

import structlog
from celery import shared_task

from config.container import build_expiration_sweep

logger = structlog.get_logger(__name__)


@shared_task(name="orders.sweep_expired_orders", ignore_result=True)
def sweep_expired_orders() -> int:
    """Run one expiration sweep cycle (beat schedule and worker start)."""
    removed = build_expiration_sweep().run_cycle()
    logger.info("orders.sweep_task_finished", removed=removed)
    return removed

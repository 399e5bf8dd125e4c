"""Production notifier: hands the work to a Celery worker."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.notifications.tasks import send_order_paid_email

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class CeleryOrderNotifier:
    def notify_order_paid(self, order: Order) -> None:
        send_order_paid_email.delay(str(order.id))
        logger.info("notification.order_paid_enqueued", order_id=str(order.id))

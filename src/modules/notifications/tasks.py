"""Asynchronous delivery of order notifications."""

from __future__ import annotations

from smtplib import SMTPException

import structlog
from celery import shared_task
from django.conf import settings

from modules.notifications.mailer import EmailOrderNotifier

logger = structlog.get_logger(__name__)


@shared_task(
    name="notifications.send_order_paid_email",
    autoretry_for=(SMTPException, ConnectionError),
    retry_backoff=True,
    max_retries=3,
)
def send_order_paid_email(order_id: str) -> bool:
    """Send the payment confirmation for *order_id*.

    Returns ``False`` when the order no longer exists (removed between the
    settlement and the task run).
    """
    from modules.orders.models import Order

    order = Order.objects.filter(id=order_id).first()
    if order is None:
        logger.warning("notification.order_missing", order_id=order_id)
        return False

    EmailOrderNotifier(bcc=list(settings.ORDER_NOTIFICATION_BCC)).notify_order_paid(
        order
    )
    return True

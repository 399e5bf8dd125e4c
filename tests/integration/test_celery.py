"""Celery wiring: app configuration, the sweep task and the mail task."""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.conf import settings
from django.core import mail
from django.utils import timezone

from config.celery import app
from modules.notifications.tasks import send_order_paid_email
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.tasks import sweep_expired_orders

pytestmark = pytest.mark.integration


class TestCeleryApp:
    def test_app_name(self):
        assert app.main == "print_orders"

    def test_sweep_is_scheduled(self):
        entry = settings.CELERY_BEAT_SCHEDULE["orders.sweep-expired-orders"]
        assert entry["task"] == "orders.sweep_expired_orders"
        assert entry["schedule"] == settings.ORDER_SWEEP_INTERVAL_SECONDS

    def test_tasks_are_registered(self):
        assert "orders.sweep_expired_orders" in app.tasks
        assert "notifications.send_order_paid_email" in app.tasks


class TestSweepTask:
    def test_removes_only_expired_unpaid_orders(self, make_order):
        expired = make_order()
        fresh = make_order()
        paid = make_order(status=OrderStatus.PAID)
        old = timezone.now() - timedelta(hours=settings.ORDER_EXPIRATION_HOURS + 1)
        Order.objects.filter(id__in=[expired.id, paid.id]).update(created_at=old)

        sweep_expired_orders.delay()

        remaining = set(Order.objects.values_list("id", flat=True))
        assert remaining == {fresh.id, paid.id}


class TestOrderPaidEmailTask:
    def test_sends_confirmation(self, make_order):
        order = make_order(status=OrderStatus.PAID)

        assert send_order_paid_email.delay(str(order.id)).get() is True

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["camille@example.com"]
        assert str(order.id) in mail.outbox[0].subject

    def test_missing_order_is_skipped(self):
        result = send_order_paid_email.delay("0190a1b2-0000-7000-8000-000000000000")

        assert result.get() is False
        assert mail.outbox == []

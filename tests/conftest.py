from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def staff_client():
    """APIClient authenticated as a staff user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="staff", password="testpass123", is_staff=True
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def make_order():
    """Persist an order aggregate directly through the ORM.

    ``items`` is a list of ``OrderItem`` field dicts; pricing fields are
    derived from a 10.00 unit price unless overridden.
    """
    from modules.orders.constants import DeliveryType, OrderStatus
    from modules.orders.models import Delivery, Order, OrderItem

    def _make(items=None, status=OrderStatus.CREATED, **overrides):
        items = items or [{"quantity": 2}]
        quantity = sum(item.get("quantity", 1) for item in items)
        total = Decimal("10.00") * quantity
        fields = {
            "customer_name": "Camille Martin",
            "email": "camille@example.com",
            "phone": "0601020304",
            "status": status,
            "price_per_unit": Decimal("10.00"),
            "total_price": total,
            "discount_percent": Decimal("0.00"),
            "discount": Decimal("0.00"),
            "total_price_with_discount": total,
            "total_quantity": quantity,
        }
        if status == OrderStatus.PAID:
            fields["paid_at"] = timezone.now()
        fields.update(overrides)

        order = Order.objects.create(**fields)
        for item in items:
            OrderItem.objects.create(order=order, **item)
        Delivery.objects.create(
            order=order,
            type=DeliveryType.HOME,
            name="Camille Martin",
            street="12 rue des Lilas",
            postal_code="75011",
            city="Paris",
            phone="0601020304",
        )
        return order

    return _make

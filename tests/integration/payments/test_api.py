"""Integration tests for the payment endpoints.

The PayPal HTTP API is replaced by a fake at the ``requests.Session``
level, so everything from the view down to the wire client is real.
"""

from __future__ import annotations

import json
from urllib.parse import urlsplit

import pytest
import requests
from django.core import mail

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

CREATE_URL = "/api/v1/payments/create-order/"


def _capture_url(identifier) -> str:
    return f"/api/v1/payments/capture/{identifier}/"


def _response(status_code: int, payload) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload).encode()
    return response


class FakePayPal:
    """Routes PayPal REST calls and records them."""

    def __init__(self) -> None:
        self.calls = []
        self.capture_status = "COMPLETED"
        self.error = None

    def count(self, method: str, suffix: str) -> int:
        return sum(1 for m, path in self.calls if m == method and path.endswith(suffix))

    def __call__(self, method, url, **kwargs):
        path = urlsplit(url).path
        self.calls.append((method, path))
        if path == "/v1/oauth2/token":
            return _response(200, {"access_token": "A21AA", "expires_in": 32400})
        if self.error is not None:
            if isinstance(self.error, Exception):
                raise self.error
            return _response(self.error, {"name": "INTERNAL_SERVICE_ERROR"})
        if method == "POST" and path == "/v2/checkout/orders":
            return _response(
                201,
                {
                    "id": "PAY-1",
                    "status": "CREATED",
                    "links": [{"href": "https://paypal.test/approve", "rel": "approve", "method": "GET"}],
                },
            )
        if path.endswith("/capture"):
            return _response(
                201,
                {
                    "id": path.split("/")[-2],
                    "status": self.capture_status,
                    "purchase_units": [
                        {"payments": {"captures": [{"id": "CAP-1", "status": self.capture_status}]}}
                    ],
                },
            )
        return _response(200, {"id": path.split("/")[-1], "status": "APPROVED", "links": []})


@pytest.fixture()
def paypal(monkeypatch):
    fake = FakePayPal()
    monkeypatch.setattr(requests.Session, "request", fake)
    return fake


class TestCreatePaymentOrder:
    def test_session_is_created_and_bound(self, api_client, make_order, paypal):
        order = make_order()

        response = api_client.post(CREATE_URL, {"order_id": str(order.id)}, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["external_order_id"] == "PAY-1"
        assert data["links"][0]["rel"] == "approve"
        order.refresh_from_db()
        assert order.external_payment_order_id == "PAY-1"

    def test_second_request_reuses_session(self, api_client, make_order, paypal):
        order = make_order()

        api_client.post(CREATE_URL, {"order_id": str(order.id)}, format="json")
        response = api_client.post(CREATE_URL, {"order_id": str(order.id)}, format="json")

        assert response.status_code == 201
        assert response.json()["status"] == "APPROVED"
        assert paypal.count("POST", "/v2/checkout/orders") == 1
        assert paypal.count("POST", "/v1/oauth2/token") == 1

    def test_paid_order_conflicts(self, api_client, make_order, paypal):
        order = make_order(status=OrderStatus.PAID)

        response = api_client.post(CREATE_URL, {"order_id": str(order.id)}, format="json")

        assert response.status_code == 409
        assert paypal.calls == []

    def test_unknown_order(self, api_client, paypal):
        response = api_client.post(
            CREATE_URL, {"order_id": "0190a1b2-0000-7000-8000-000000000000"}, format="json"
        )
        assert response.status_code == 404

    def test_provider_error_is_bad_gateway(self, api_client, make_order, paypal):
        paypal.error = 500
        order = make_order()

        response = api_client.post(CREATE_URL, {"order_id": str(order.id)}, format="json")

        assert response.status_code == 502
        assert paypal.count("POST", "/v2/checkout/orders") == 1

    def test_unreachable_provider_is_unavailable(self, api_client, make_order, paypal):
        paypal.error = requests.ConnectionError("refused")
        order = make_order()

        response = api_client.post(CREATE_URL, {"order_id": str(order.id)}, format="json")

        assert response.status_code == 503
        assert paypal.count("POST", "/v2/checkout/orders") == 3


class TestCapture:
    def test_capture_settles_once_and_emails_once(
        self, api_client, make_order, paypal, django_capture_on_commit_callbacks
    ):
        order = make_order(external_payment_order_id="PAY-1")

        with django_capture_on_commit_callbacks(execute=True):
            first = api_client.post(_capture_url("PAY-1"))
        with django_capture_on_commit_callbacks(execute=True):
            second = api_client.post(_capture_url("PAY-1"))

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["capture_id"] == "CAP-1"
        assert first.json() == second.json()
        assert paypal.count("POST", "/capture") == 1
        assert len(mail.outbox) == 1

        order.refresh_from_db()
        assert order.status == OrderStatus.PAID
        assert order.paid_at is not None
        assert order.external_capture_id == "CAP-1"

    def test_capture_by_own_id(self, api_client, make_order, paypal):
        order = make_order(external_payment_order_id="PAY-1")

        response = api_client.post(_capture_url(order.id))

        assert response.status_code == 200
        assert response.json()["order_id"] == str(order.id)

    def test_capture_without_session_conflicts(self, api_client, make_order, paypal):
        order = make_order()

        response = api_client.post(_capture_url(order.id))

        assert response.status_code == 409
        assert paypal.calls == []

    def test_not_completed_capture_changes_nothing(self, api_client, make_order, paypal):
        paypal.capture_status = "DECLINED"
        order = make_order(external_payment_order_id="PAY-1")

        response = api_client.post(_capture_url("PAY-1"))

        assert response.status_code == 400
        assert Order.objects.get(id=order.id).status == OrderStatus.CREATED
        assert len(mail.outbox) == 0

    def test_unknown_reference(self, api_client, paypal):
        assert api_client.post(_capture_url("PAY-404")).status_code == 404

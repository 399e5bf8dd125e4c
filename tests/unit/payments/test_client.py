"""Unit tests for the PayPal wire client with a stubbed HTTP session."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from modules.payments.client import PayPalClient
from modules.payments.exceptions import PaymentConfigurationError, PaymentRejected

pytestmark = pytest.mark.unit

BASE_URL = "https://api-m.sandbox.paypal.com"


def _response(status_code: int, payload=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload or {}).encode()
    response.url = BASE_URL
    return response


@pytest.fixture()
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture()
def client(session):
    return PayPalClient(BASE_URL, "client-id", "client-secret", timeout=4.0, session=session)


def test_access_token_uses_client_credentials(client, session):
    session.request.return_value = _response(200, {"access_token": "A21AA", "expires_in": 32400})

    assert client.request_access_token()["access_token"] == "A21AA"

    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert (method, url) == ("POST", f"{BASE_URL}/v1/oauth2/token")
    assert kwargs["auth"] == ("client-id", "client-secret")
    assert kwargs["data"] == {"grant_type": "client_credentials"}
    assert kwargs["timeout"] == 4.0


def test_missing_credentials(session):
    client = PayPalClient(BASE_URL, "", "", session=session)

    with pytest.raises(PaymentConfigurationError):
        client.request_access_token()
    session.request.assert_not_called()


def test_capture_sends_bearer_token(client, session):
    session.request.return_value = _response(201, {"id": "5O190127TN364715T", "status": "COMPLETED"})

    client.capture_order("A21AA", "5O190127TN364715T")

    method, url = session.request.call_args.args
    headers = session.request.call_args.kwargs["headers"]
    assert method == "POST"
    assert url == f"{BASE_URL}/v2/checkout/orders/5O190127TN364715T/capture"
    assert headers["Authorization"] == "Bearer A21AA"


def test_get_order(client, session):
    session.request.return_value = _response(200, {"id": "PAY-1", "status": "APPROVED"})

    assert client.get_order("A21AA", "PAY-1")["status"] == "APPROVED"
    assert session.request.call_args.args == ("GET", f"{BASE_URL}/v2/checkout/orders/PAY-1")


def test_error_response_raises_rejected(client, session):
    session.request.return_value = _response(422, {"name": "UNPROCESSABLE_ENTITY"})

    with pytest.raises(PaymentRejected) as excinfo:
        client.create_order("A21AA", {"intent": "CAPTURE"})
    assert excinfo.value.status_code == 422


def test_transport_errors_propagate(client, session):
    session.request.side_effect = requests.Timeout("read timed out")

    with pytest.raises(requests.Timeout):
        client.get_order("A21AA", "PAY-1")

"""PayPal REST wire protocol.

Thin ``requests`` wrapper: every call carries the configured timeout,
HTTP error responses become ``PaymentRejected``, transport errors
(``requests.ConnectionError`` / ``requests.Timeout``) propagate untouched
so ``RetryExecutor`` can decide whether to try again.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests
import structlog

from modules.payments.exceptions import PaymentConfigurationError, PaymentRejected

logger = structlog.get_logger(__name__)


class PayPalClient:
    TOKEN_PATH = "/v1/oauth2/token"
    ORDERS_PATH = "/v2/checkout/orders"

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def has_credentials(self) -> bool:
        return bool(self._client_id and self._client_secret)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def request_access_token(self) -> Dict[str, Any]:
        """Client-credentials grant; returns ``access_token`` and ``expires_in``."""
        if not self.has_credentials:
            raise PaymentConfigurationError("PayPal credentials are missing.")
        return self._send(
            "POST",
            self.TOKEN_PATH,
            auth=(self._client_id, self._client_secret),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
        )

    def create_order(self, token: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send("POST", self.ORDERS_PATH, token=token, json=payload)

    def get_order(self, token: str, order_id: str) -> Dict[str, Any]:
        return self._send("GET", f"{self.ORDERS_PATH}/{order_id}", token=token)

    def capture_order(self, token: str, order_id: str) -> Dict[str, Any]:
        return self._send(
            "POST", f"{self.ORDERS_PATH}/{order_id}/capture", token=token, json={}
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        request_headers = {"Content-Type": "application/json"}
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        request_headers.update(headers or {})

        log = logger.bind(method=method, path=path)
        response = self._session.request(
            method,
            f"{self.base_url}{path}",
            headers=request_headers,
            timeout=self._timeout,
            **kwargs,
        )

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            log.warning(
                "paypal.request_rejected",
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise PaymentRejected(
                f"PayPal rejected {method} {path} ({response.status_code}).",
                status_code=response.status_code,
            ) from exc

        log.info("paypal.request_succeeded", status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise PaymentRejected(
                f"PayPal returned a non-JSON body for {method} {path}.",
                status_code=response.status_code,
            ) from exc

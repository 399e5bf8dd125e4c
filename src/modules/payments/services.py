"""Payment gateway service layer.

Binds orders to PayPal checkout orders and settles them.

Guarantees:
- An order is bound to at most one provider order.  Asking again for a
  session reuses the bound one; when two requests race, the first bind
  wins and the loser returns the winner's session.
- Capturing an already-paid order returns the same settlement as the
  first capture and makes no provider call.
- The CREATED -> PAID write is conditional, so the settlement (and its
  notification) happens at most once per order.
- A capture that is not COMPLETED leaves the order untouched.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

import structlog
from django.db import transaction
from django.utils import timezone

from modules.orders.exceptions import OrderNotFound
from modules.orders.services import notify_paid_on_commit
from modules.payments.dtos import CaptureResultDTO, PaymentLinkDTO, PaymentSessionDTO
from modules.payments.exceptions import (
    InvalidPaymentAmount,
    OrderAlreadyPaid,
    PaymentNotCompleted,
    PaymentRejected,
    PaymentSessionMissing,
)
from modules.pricing.calculator import to_money

if TYPE_CHECKING:
    from datetime import datetime

    from modules.notifications.interfaces import IOrderNotifier
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.payments.client import PayPalClient
    from modules.payments.retry import RetryExecutor
    from modules.payments.token_cache import TokenCache

logger = structlog.get_logger(__name__)

TOKEN_CACHE_KEY = "paypal:access_token"
COMPLETED = "COMPLETED"


def payable_amount(order: Order) -> str:
    """Amount to charge, formatted with two decimals.

    The discounted total is used unless it is not positive, in which case
    the undiscounted total is charged.

    Raises:
        InvalidPaymentAmount: neither total is positive.
    """
    net = order.total_price_with_discount
    amount = net if net is not None and net > 0 else order.total_price
    if amount is None or Decimal(amount) <= 0:
        raise InvalidPaymentAmount(f"Order {order.id} has no amount to charge.")
    return format(to_money(amount), ".2f")


def parse_capture(payload: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Return ``(completed, capture_id)`` for a capture response."""
    captures: List[Dict[str, Any]] = [
        capture
        for unit in payload.get("purchase_units") or []
        for capture in ((unit.get("payments") or {}).get("captures") or [])
    ]
    capture_id = captures[0].get("id") if captures else None
    completed = payload.get("status") == COMPLETED or any(
        capture.get("status") == COMPLETED for capture in captures
    )
    return completed, capture_id


class PaymentGateway:
    """Application service for provider checkout and capture.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        client: PayPalClient,
        token_cache: TokenCache,
        retry: RetryExecutor,
        notifier: IOrderNotifier,
        currency: str = "EUR",
        return_url: str = "",
        cancel_url: str = "",
        brand_name: str = "",
        token_safety_margin: int = 60,
        token_min_ttl: int = 60,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._order_repo = order_repository
        self._client = client
        self._tokens = token_cache
        self._retry = retry
        self._notifier = notifier
        self._currency = currency
        self._return_url = return_url
        self._cancel_url = cancel_url
        self._brand_name = brand_name
        self._token_safety_margin = token_safety_margin
        self._token_min_ttl = token_min_ttl
        self._clock = clock

    # ------------------------------------------------------------------
    # Access token
    # ------------------------------------------------------------------

    def get_access_token(self) -> str:
        """Return a provider access token, from cache when possible.

        Raises:
            PaymentConfigurationError: credentials are not configured.
            TokenCacheUnavailable: the cache backend failed.
        """
        cached = self._tokens.get(TOKEN_CACHE_KEY)
        if cached:
            return cached

        data = self._retry.run(self._client.request_access_token, name="paypal.token")
        token = data.get("access_token")
        if not token:
            raise PaymentRejected("PayPal token response has no access_token.")

        expires_in = int(data.get("expires_in") or 0)
        ttl = max(self._token_min_ttl, expires_in - self._token_safety_margin)
        self._tokens.set(TOKEN_CACHE_KEY, token, ttl)
        logger.info("payment.token_refreshed", ttl=ttl)
        return token

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, order_id: Any) -> PaymentSessionDTO:
        """Open (or reuse) the provider checkout session of an order.

        Raises:
            OrderNotFound: order does not exist.
            OrderAlreadyPaid: order is already settled.
            InvalidPaymentAmount: order has nothing to charge.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(order_id=str(order.id))
        if order.is_paid:
            log.warning("payment.order_already_paid")
            raise OrderAlreadyPaid(f"Order {order.id} is already paid.")

        amount = payable_amount(order)

        if order.external_payment_order_id:
            log.info(
                "payment.session_reused",
                external_order_id=order.external_payment_order_id,
            )
            return self._bound_session(order)

        token = self.get_access_token()
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": str(order.id),
                    "amount": {"currency_code": self._currency, "value": amount},
                }
            ],
            "application_context": {
                "return_url": self._return_url,
                "cancel_url": self._cancel_url,
                "brand_name": self._brand_name,
            },
        }
        created = self._retry.run(
            lambda: self._client.create_order(token, payload),
            name="paypal.create_order",
        )
        external_id = created.get("id")
        if not external_id:
            raise PaymentRejected("PayPal order response has no id.")

        if not self._order_repo.bind_payment_order(order.id, external_id):
            winner = self._order_repo.get_by_id(str(order.id))
            if not winner:
                raise OrderNotFound(f"Order {order_id} not found.")
            log.info(
                "payment.session_bind_lost",
                discarded_external_order_id=external_id,
                external_order_id=winner.external_payment_order_id,
            )
            return self._bound_session(winner)

        log.info("payment.session_created", external_order_id=external_id, amount=amount)
        return self._session_dto(order.id, external_id, created)

    def capture_payment(self, identifier: str) -> CaptureResultDTO:
        """Capture the payment of an order, at most once.

        *identifier* is the bound provider order id or the order's own id.

        Raises:
            OrderNotFound: no order matches *identifier*.
            PaymentSessionMissing: the order has no provider order bound.
            PaymentNotCompleted: the provider did not complete the capture.
        """
        order = self._order_repo.find_by_payment_reference(identifier)
        if not order:
            raise OrderNotFound(f"No order matches payment reference {identifier}.")

        log = logger.bind(
            order_id=str(order.id),
            external_order_id=order.external_payment_order_id,
        )

        if order.is_paid:
            log.info("payment.capture_already_recorded")
            return self._settlement(order)

        if not order.external_payment_order_id:
            log.warning("payment.session_missing")
            raise PaymentSessionMissing(f"Order {order.id} has no payment session.")

        token = self.get_access_token()
        external_id = order.external_payment_order_id
        response = self._retry.run(
            lambda: self._client.capture_order(token, external_id),
            name="paypal.capture_order",
        )

        completed, capture_id = parse_capture(response)
        if not completed:
            log.warning("payment.capture_not_completed", status=response.get("status"))
            raise PaymentNotCompleted(
                f"Payment for order {order.id} was not completed."
            )

        with transaction.atomic():
            settled_now = self._order_repo.mark_paid(order.id, self._clock(), capture_id)
            settled = self._order_repo.get_by_id(str(order.id))
            if not settled:
                log.error("payment.captured_order_missing", capture_id=capture_id)
                raise OrderNotFound(f"Order {order.id} not found.")
            if settled_now:
                notify_paid_on_commit(self._notifier, settled)

        if settled_now:
            log.info("payment.captured", capture_id=capture_id)
        else:
            log.info("payment.capture_raced", capture_id=capture_id)
        return self._settlement(settled)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _bound_session(self, order: Order) -> PaymentSessionDTO:
        token = self.get_access_token()
        external_id = order.external_payment_order_id
        remote = self._retry.run(
            lambda: self._client.get_order(token, external_id),
            name="paypal.get_order",
        )
        return self._session_dto(order.id, external_id, remote)

    @staticmethod
    def _session_dto(
        order_id: Any, external_id: str, payload: Dict[str, Any]
    ) -> PaymentSessionDTO:
        links = [
            PaymentLinkDTO(
                href=link.get("href", ""),
                rel=link.get("rel", ""),
                method=link.get("method") or "GET",
            )
            for link in payload.get("links") or []
        ]
        return PaymentSessionDTO(
            order_id=order_id,
            external_order_id=external_id,
            status=payload.get("status") or "",
            links=links,
        )

    @staticmethod
    def _settlement(order: Order) -> CaptureResultDTO:
        return CaptureResultDTO(
            status=COMPLETED,
            order_id=order.id,
            external_order_id=order.external_payment_order_id or "",
            capture_id=order.external_capture_id,
        )

"""Payment domain exceptions.

Raised by the gateway and its helpers.  The API layer (Views) catches
these and translates them into HTTP responses.
"""

from __future__ import annotations

from modules.orders.exceptions import InvalidOrderStatus


class OrderAlreadyPaid(InvalidOrderStatus):
    """A payment session was requested for an order that is already PAID."""


class PaymentSessionMissing(InvalidOrderStatus):
    """Capture was requested for an order with no provider order bound."""


class InvalidPaymentAmount(Exception):
    """The order has no positive amount to charge."""


class PaymentConfigurationError(Exception):
    """Provider credentials are missing."""


class PaymentProviderUnavailable(Exception):
    """The provider could not be reached after every retry attempt."""


class PaymentRejected(Exception):
    """The provider answered with an error response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PaymentNotCompleted(PaymentRejected):
    """The capture call succeeded but no capture is COMPLETED."""


class TokenCacheUnavailable(Exception):
    """The cache holding the provider access token could not be used."""

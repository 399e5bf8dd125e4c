"""Payment API views.

Both endpoints are public: the checkout page opens the session and the
provider's return page triggers the capture.  Domain exceptions are
translated into HTTP status codes here.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from config.container import build_payment_gateway
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound
from modules.payments.exceptions import (
    InvalidPaymentAmount,
    PaymentConfigurationError,
    PaymentNotCompleted,
    PaymentProviderUnavailable,
    PaymentRejected,
    TokenCacheUnavailable,
)
from modules.payments.serializers import (
    CaptureResultSerializer,
    CreatePaymentSerializer,
    PaymentSessionSerializer,
)

ERROR_STATUS = (
    (OrderNotFound, status.HTTP_404_NOT_FOUND),
    (InvalidOrderStatus, status.HTTP_409_CONFLICT),
    (InvalidPaymentAmount, status.HTTP_400_BAD_REQUEST),
    (PaymentNotCompleted, status.HTTP_400_BAD_REQUEST),
    (PaymentRejected, status.HTTP_502_BAD_GATEWAY),
    (PaymentProviderUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (TokenCacheUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (PaymentConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
)
HANDLED_ERRORS = tuple(error for error, _ in ERROR_STATUS)


def _error_response(exc: Exception) -> Response:
    for error, code in ERROR_STATUS:
        if isinstance(exc, error):
            return Response({"detail": str(exc)}, status=code)
    raise exc


class PaymentViewSet(ViewSet):
    permission_classes = [AllowAny]
    throttle_scope = "payments"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._gateway = build_payment_gateway()

    @action(detail=False, methods=["post"], url_path="create-order")
    def create_order(self, request: Request) -> Response:
        """POST /api/v1/payments/create-order/"""
        payload = CreatePaymentSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            session = self._gateway.create_order(payload.validated_data["order_id"])
        except HANDLED_ERRORS as exc:
            return _error_response(exc)
        return Response(
            PaymentSessionSerializer(session.model_dump()).data,
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=False,
        methods=["post"],
        url_path=r"capture/(?P<identifier>[^/]+)",
    )
    def capture(self, request: Request, identifier: str) -> Response:
        """POST /api/v1/payments/capture/{identifier}/"""
        try:
            result = self._gateway.capture_payment(identifier)
        except HANDLED_ERRORS as exc:
            return _error_response(exc)
        return Response(CaptureResultSerializer(result.model_dump()).data)

"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.

Placing an order and reading it back is public; listing, status changes
and deletion are reserved to staff.
"""

from __future__ import annotations

from pydantic import ValidationError
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import ViewSet

from config.container import build_order_service
from modules.orders.dtos import CreateOrderDTO, ItemArtifactsDTO, OrderFiltersDTO
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderNotFound,
    UnknownBackTemplate,
)
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderListQuerySerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)

ARTIFACT_FIELDS = ("front_original", "front_processed", "back_original", "back_processed")


def _not_found() -> Response:
    return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)


class OrderViewSet(ViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` built by the composition root (DIP).
    All ORM access goes through the service/repository layer.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_permissions(self):
        if self.action in {"create", "retrieve"}:
            return [AllowAny()]
        return [IsAdminUser()]

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = "order_creation" if self.action == "create" else None
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)
        data = create_serializer.validated_data

        try:
            dto = CreateOrderDTO(
                customer_name=data["customer_name"],
                email=data["email"],
                phone=data["phone"],
                items=[
                    {
                        "quantity": item["quantity"],
                        "characteristics": item.get("characteristics"),
                        "back_side_type": item["back_side_type"],
                        "back_template_id": item.get("back_template_id"),
                    }
                    for item in data["items"]
                ],
                delivery=data["delivery"],
            )
        except ValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        artifacts = [
            ItemArtifactsDTO(**{field: item.get(field) or None for field in ARTIFACT_FIELDS})
            for item in data["items"]
        ]
        try:
            order = self._service.create_order(dto, artifacts)
        except UnknownBackTemplate as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/?status=&contact=&page=&limit="""
        query = OrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        result = self._service.list_orders(
            filters=OrderFiltersDTO(
                status=params.get("status"), contact=params.get("contact")
            ),
            page=params["page"],
            limit=params["limit"],
        )
        return Response(
            {
                "data": OrderListSerializer(result.items, many=True).data,
                "total": result.total,
                "page": result.page,
                "limit": result.limit,
            }
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except OrderNotFound:
            return _not_found()
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status Update / Delete
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/"""
        payload = UpdateOrderStatusSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        try:
            order = self._service.update_status(pk, payload.validated_data["status"])
        except OrderNotFound:
            return _not_found()
        except InvalidOrderStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        try:
            self._service.remove_order(pk)
        except OrderNotFound:
            return _not_found()
        return Response(status=status.HTTP_204_NO_CONTENT)

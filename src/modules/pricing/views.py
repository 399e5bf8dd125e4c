"""Pricing API views.

Reading the price and requesting a quote is public; editing the price or
the discount table is reserved to staff.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from config.container import build_pricing_service
from modules.pricing.dtos import CreateDiscountTierDTO, UpdateUnitPriceDTO
from modules.pricing.exceptions import DiscountTierAlreadyExists, DiscountTierNotFound
from modules.pricing.serializers import (
    CreateDiscountTierSerializer,
    DiscountTierSerializer,
    PriceBreakdownSerializer,
    QuoteQuerySerializer,
    UpdateUnitPriceSerializer,
)


class PricingViewSet(ViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_pricing_service()

    def get_permissions(self):
        if self.action in {"list", "quote"}:
            return [AllowAny()]
        return [IsAdminUser()]

    def list(self, request: Request) -> Response:
        """GET /api/v1/pricing/"""
        return Response(
            {
                "unit_price": str(self._service.get_unit_price()),
                "tiers": DiscountTierSerializer(
                    self._service.list_tiers(), many=True
                ).data,
            }
        )

    @action(detail=False, methods=["get"])
    def quote(self, request: Request) -> Response:
        """GET /api/v1/pricing/quote/?quantity=N"""
        query = QuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        breakdown = self._service.quote(query.validated_data["quantity"])
        return Response(PriceBreakdownSerializer(breakdown).data)

    @action(detail=False, methods=["put"], url_path="unit-price")
    def unit_price(self, request: Request) -> Response:
        """PUT /api/v1/pricing/unit-price/"""
        payload = UpdateUnitPriceSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        price = self._service.update_unit_price(
            UpdateUnitPriceDTO(**payload.validated_data)
        )
        return Response({"unit_price": str(price)})

    @action(detail=False, methods=["post"])
    def tiers(self, request: Request) -> Response:
        """POST /api/v1/pricing/tiers/"""
        payload = CreateDiscountTierSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            tier = self._service.create_tier(
                CreateDiscountTierDTO(**payload.validated_data)
            )
        except DiscountTierAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(
            DiscountTierSerializer(tier).data, status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=["delete"], url_path=r"tiers/(?P<tier_id>[^/.]+)")
    def delete_tier(self, request: Request, tier_id: str) -> Response:
        """DELETE /api/v1/pricing/tiers/{tier_id}/"""
        try:
            self._service.delete_tier(tier_id)
        except DiscountTierNotFound:
            return Response(
                {"detail": "Discount tier not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

"""Pricing DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.pricing.models import DiscountTier


class DiscountTierSerializer(serializers.ModelSerializer):
    class Meta:
        model = DiscountTier
        fields = ["id", "min_quantity", "discount_percent"]
        read_only_fields = fields


class CreateDiscountTierSerializer(serializers.Serializer):
    min_quantity = serializers.IntegerField(min_value=1)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100
    )


class UpdateUnitPriceSerializer(serializers.Serializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class QuoteQuerySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class PriceBreakdownSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    base_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_price_with_discount = serializers.DecimalField(
        max_digits=12, decimal_places=2
    )

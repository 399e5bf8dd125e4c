"""Payment DRF serializers."""

from __future__ import annotations

from rest_framework import serializers


class CreatePaymentSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()


class PaymentLinkSerializer(serializers.Serializer):
    href = serializers.CharField()
    rel = serializers.CharField()
    method = serializers.CharField()


class PaymentSessionSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    external_order_id = serializers.CharField()
    status = serializers.CharField()
    links = PaymentLinkSerializer(many=True)


class CaptureResultSerializer(serializers.Serializer):
    status = serializers.CharField()
    order_id = serializers.UUIDField()
    external_order_id = serializers.CharField()
    capture_id = serializers.CharField(allow_null=True)

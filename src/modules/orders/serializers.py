"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers

from modules.orders.constants import BackSideType, OrderStatus
from modules.orders.models import Delivery, Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single item in an order creation request.

    Artwork fields carry references to files that were already stored.
    """

    quantity = serializers.IntegerField(min_value=1)
    characteristics = serializers.JSONField(required=False, default=dict)
    back_side_type = serializers.ChoiceField(
        choices=BackSideType.choices, default=BackSideType.TEMPLATE
    )
    back_template_id = serializers.UUIDField(required=False, allow_null=True)
    front_original = serializers.CharField(required=False, allow_blank=True)
    front_processed = serializers.CharField(required=False, allow_blank=True)
    back_original = serializers.CharField(required=False, allow_blank=True)
    back_processed = serializers.CharField(required=False, allow_blank=True)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    customer_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(
        max_length=32, required=False, default="", allow_blank=True
    )
    items = CreateOrderItemSerializer(many=True, allow_empty=False)
    delivery = serializers.JSONField()


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class OrderListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    contact = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(
        min_value=1, max_value=100, default=settings.ORDER_DEFAULT_PAGE_SIZE
    )


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "quantity",
            "characteristics",
            "front_original_path",
            "front_processed_path",
            "back_side_type",
            "back_template_id",
            "back_original_path",
            "back_processed_path",
        ]
        read_only_fields = fields


class DeliverySerializer(serializers.ModelSerializer):
    pickup_point = serializers.JSONField(source="relay_point", read_only=True)

    class Meta:
        model = Delivery
        fields = [
            "type",
            "name",
            "street",
            "additional",
            "postal_code",
            "city",
            "phone",
            "relay_phone",
            "pickup_point",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and delivery."""

    items = OrderItemSerializer(many=True, read_only=True)
    delivery = DeliverySerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "customer_name",
            "email",
            "phone",
            "price_per_unit",
            "total_quantity",
            "total_price",
            "discount_percent",
            "discount",
            "total_price_with_discount",
            "external_payment_order_id",
            "external_capture_id",
            "paid_at",
            "created_at",
            "updated_at",
            "items",
            "delivery",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "customer_name",
            "email",
            "total_quantity",
            "total_price_with_discount",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields

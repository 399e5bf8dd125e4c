"""Order, OrderItem, and Delivery models.

Business rules implemented:
- Pricing fields are a snapshot taken at creation time; the order never
  references the live price table.
- ``status`` only moves CREATED -> PAID (see ``constants.VALID_TRANSITIONS``);
  the transition itself is a conditional update in the repository.
- A capture id implies a paid order with a ``paid_at`` timestamp
  (database check constraint).
- ``external_payment_order_id`` is unique and bound at most once.
- Items and delivery belong to exactly one order and are deleted with it.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    VALID_TRANSITIONS,
    BackSideType,
    DeliveryType,
    OrderStatus,
)

if TYPE_CHECKING:
    from modules.orders.dtos import PickupPointDTO


def _money_field(**kwargs) -> models.DecimalField:
    return models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        **kwargs,
    )


class Order(BaseModel):
    """Order aggregate root."""

    customer_name: models.CharField = models.CharField(max_length=255)
    email: models.EmailField = models.EmailField()
    phone: models.CharField = models.CharField(max_length=32, blank=True, default="")
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.CREATED,
    )
    price_per_unit: models.DecimalField = _money_field()
    total_price: models.DecimalField = _money_field()
    discount_percent: models.DecimalField = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    discount: models.DecimalField = _money_field(default=Decimal("0.00"))
    total_price_with_discount: models.DecimalField = _money_field()
    total_quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    external_payment_order_id: models.CharField = models.CharField(  # noqa: DJ01
        max_length=64,
        unique=True,
        null=True,
        blank=True,
    )
    external_capture_id: models.CharField = models.CharField(  # noqa: DJ01
        max_length=64,
        null=True,
        blank=True,
    )
    paid_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(
                fields=["status", "created_at"], name="orders_status_created_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(total_quantity__gte=1),
                name="orders_total_quantity_positive",
            ),
            models.CheckConstraint(
                check=models.Q(total_price_with_discount__gte=0),
                name="orders_net_total_non_negative",
            ),
            models.CheckConstraint(
                check=models.Q(external_capture_id__isnull=True)
                | models.Q(status=OrderStatus.PAID, paid_at__isnull=False),
                name="orders_capture_implies_paid",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def artifact_paths(self) -> List[str]:
        """Every artifact reference held by the order's items."""
        return [path for item in self.items.all() for path in item.artifact_paths()]

    def __str__(self) -> str:
        return f"{self.id} ({self.status})"


class OrderItem(BaseModel):
    """A printed item with its front/back artwork.

    ``back_side_type`` decides where the back artwork comes from:
    TEMPLATE points at a shared template (``back_template_id``), CUSTOM
    carries its own back artifacts.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    characteristics: models.JSONField = models.JSONField(default=dict, blank=True)
    front_original_path: models.CharField = models.CharField(
        max_length=512, blank=True, default=""
    )
    front_processed_path: models.CharField = models.CharField(
        max_length=512, blank=True, default=""
    )
    back_side_type: models.CharField = models.CharField(
        max_length=10,
        choices=BackSideType.choices,
        default=BackSideType.TEMPLATE,
    )
    back_template_id: models.UUIDField = models.UUIDField(null=True, blank=True)
    back_original_path: models.CharField = models.CharField(
        max_length=512, blank=True, default=""
    )
    back_processed_path: models.CharField = models.CharField(
        max_length=512, blank=True, default=""
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def artifact_paths(self) -> List[str]:
        paths = [
            self.front_original_path,
            self.front_processed_path,
            self.back_original_path,
            self.back_processed_path,
        ]
        return [path for path in paths if path]

    def __str__(self) -> str:
        return f"{self.order_id} x{self.quantity} ({self.back_side_type})"


class Delivery(BaseModel):
    """Delivery details, one per order.

    HOME uses the postal address columns; RELAY uses ``relay_phone`` and
    the canonical pickup-point dump in ``relay_point``.
    """

    order: models.OneToOneField = models.OneToOneField(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="delivery",
    )
    type: models.CharField = models.CharField(
        max_length=10, choices=DeliveryType.choices
    )
    name: models.CharField = models.CharField(max_length=255, blank=True, default="")
    street: models.CharField = models.CharField(max_length=255, blank=True, default="")
    additional: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    postal_code: models.CharField = models.CharField(
        max_length=20, blank=True, default=""
    )
    city: models.CharField = models.CharField(max_length=120, blank=True, default="")
    phone: models.CharField = models.CharField(max_length=32, blank=True, default="")
    relay_phone: models.CharField = models.CharField(
        max_length=32, blank=True, default=""
    )
    relay_point: models.JSONField = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "deliveries"

    @property
    def pickup_point(self) -> Optional[PickupPointDTO]:
        from modules.orders.dtos import PickupPointDTO

        if not self.relay_point:
            return None
        return PickupPointDTO.model_validate(self.relay_point)

    def __str__(self) -> str:
        return f"{self.type} for {self.order_id}"


"""Unit price and discount tier models.

Both tables are edited by shop staff at any time.  Orders never point at
them: the order keeps its own copy of every price field, so later edits
cannot change an existing order.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class UnitPrice(BaseModel):
    """Current price of a single printed unit (single-row table)."""

    price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    class Meta:
        db_table = "unit_prices"
        constraints = [
            models.CheckConstraint(
                check=models.Q(price__gte=0),
                name="unit_prices_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.price}"


class DiscountTier(BaseModel):
    """Discount applied once an order reaches ``min_quantity`` units."""

    min_quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        unique=True,
        validators=[MinValueValidator(1)],
    )
    discount_percent: models.DecimalField = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[
            MinValueValidator(Decimal("0")),
            MaxValueValidator(Decimal("100")),
        ],
    )

    class Meta:
        db_table = "discount_tiers"
        ordering = ["min_quantity"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(min_quantity__gte=1),
                name="discount_tiers_min_quantity_positive",
            ),
            models.CheckConstraint(
                check=models.Q(discount_percent__gte=0)
                & models.Q(discount_percent__lte=100),
                name="discount_tiers_percent_range",
            ),
        ]

    def __str__(self) -> str:
        return f">= {self.min_quantity}: {self.discount_percent}%"

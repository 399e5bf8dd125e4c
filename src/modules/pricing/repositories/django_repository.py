"""Django ORM implementation of the pricing repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.pricing.calculator import TierRule
from modules.pricing.models import DiscountTier, UnitPrice
from modules.pricing.repositories.interfaces import IPricingRepository

logger = structlog.get_logger(__name__)


class PricingDjangoRepository(IPricingRepository):
    """Concrete pricing repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Unit price (single row)
    # ------------------------------------------------------------------

    @transaction.atomic
    def get_unit_price(self) -> Decimal:
        row = UnitPrice.objects.order_by("created_at").first()
        if row is None:
            row = UnitPrice.objects.create(price=Decimal("0.00"))
            logger.info("pricing.unit_price_initialized")
        return row.price

    @transaction.atomic
    def set_unit_price(self, price: Decimal) -> Decimal:
        row = UnitPrice.objects.select_for_update().order_by("created_at").first()
        if row is None:
            row = UnitPrice(price=price)
        else:
            row.price = price
        row.save()
        logger.info("pricing.unit_price_updated", price=str(price))
        return row.price

    # ------------------------------------------------------------------
    # Discount tiers
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[DiscountTier]:
        try:
            return DiscountTier.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[DiscountTier]:
        queryset = DiscountTier.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def save(self, entity: DiscountTier) -> DiscountTier:
        entity.save()
        logger.info("pricing.tier_saved", tier_id=str(entity.id))
        return entity

    def delete(self, id: str) -> bool:
        tier = self.get_by_id(id)
        if not tier:
            return False
        tier.delete()
        logger.info("pricing.tier_deleted", tier_id=str(id))
        return True

    def tier_snapshot(self) -> List[TierRule]:
        return [
            TierRule(min_quantity=min_quantity, discount_percent=percent)
            for min_quantity, percent in DiscountTier.objects.values_list(
                "min_quantity", "discount_percent"
            )
        ]

    def exists_for_quantity(self, min_quantity: int) -> bool:
        return DiscountTier.objects.filter(min_quantity=min_quantity).exists()

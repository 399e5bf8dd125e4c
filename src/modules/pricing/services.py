"""Pricing service layer.

Reads the unit price and the discount table as a fresh snapshot on every
call and hands them to ``compute_price``.  Staff edits to the table take
effect for the next quote and never for orders that already exist.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, List

import structlog
from django.db import IntegrityError, transaction

from modules.pricing.calculator import PriceBreakdown, compute_price
from modules.pricing.exceptions import DiscountTierAlreadyExists, DiscountTierNotFound
from modules.pricing.models import DiscountTier

if TYPE_CHECKING:
    from modules.pricing.dtos import CreateDiscountTierDTO, UpdateUnitPriceDTO
    from modules.pricing.repositories.interfaces import IPricingRepository

logger = structlog.get_logger(__name__)


class PricingService:
    """Application service for price configuration and quotes."""

    def __init__(self, repository: IPricingRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_unit_price(self) -> Decimal:
        return self._repo.get_unit_price()

    def list_tiers(self) -> List[DiscountTier]:
        return self._repo.list()

    def quote(self, quantity: int) -> PriceBreakdown:
        """Price *quantity* units with the current price and discount table."""
        return compute_price(
            quantity,
            self._repo.get_unit_price(),
            self._repo.tier_snapshot(),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def update_unit_price(self, dto: UpdateUnitPriceDTO) -> Decimal:
        return self._repo.set_unit_price(dto.price)

    def create_tier(self, dto: CreateDiscountTierDTO) -> DiscountTier:
        """Add a discount tier.

        Raises:
            DiscountTierAlreadyExists: a tier already starts at ``min_quantity``.
        """
        log = logger.bind(min_quantity=dto.min_quantity)
        if self._repo.exists_for_quantity(dto.min_quantity):
            log.warning("pricing.duplicate_tier")
            raise DiscountTierAlreadyExists(
                f"A tier for {dto.min_quantity} units already exists."
            )
        tier = DiscountTier(
            min_quantity=dto.min_quantity,
            discount_percent=dto.discount_percent,
        )
        try:
            with transaction.atomic():
                tier = self._repo.save(tier)
        except IntegrityError as exc:
            raise DiscountTierAlreadyExists(
                f"A tier for {dto.min_quantity} units already exists."
            ) from exc
        log.info("pricing.tier_created", tier_id=str(tier.id))
        return tier

    def delete_tier(self, tier_id: str) -> None:
        """Raises ``DiscountTierNotFound`` when the tier does not exist."""
        if not self._repo.delete(tier_id):
            raise DiscountTierNotFound(f"Discount tier {tier_id} not found.")

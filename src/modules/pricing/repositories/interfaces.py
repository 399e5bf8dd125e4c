"""Pricing repository interface."""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, List

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.pricing.calculator import TierRule
    from modules.pricing.models import DiscountTier


class IPricingRepository(IRepository["DiscountTier"]):
    """Repository contract for the unit price and the discount table."""

    @abstractmethod
    def get_unit_price(self) -> Decimal:
        """Return the current unit price, creating a zero price if unset."""

    @abstractmethod
    def set_unit_price(self, price: Decimal) -> Decimal:
        """Replace the current unit price."""

    @abstractmethod
    def tier_snapshot(self) -> List[TierRule]:
        """Return the discount table as immutable calculator rules."""

    @abstractmethod
    def exists_for_quantity(self, min_quantity: int) -> bool:
        """Return ``True`` when a tier already starts at *min_quantity*."""

"""Pricing repositories package."""

from modules.pricing.repositories.django_repository import PricingDjangoRepository
from modules.pricing.repositories.interfaces import IPricingRepository

__all__ = ["IPricingRepository", "PricingDjangoRepository"]

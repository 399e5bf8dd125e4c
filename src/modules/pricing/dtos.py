"""Pricing DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class UpdateUnitPriceDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class CreateDiscountTierDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_quantity: int = Field(ge=1)
    discount_percent: Decimal = Field(ge=0, le=100, max_digits=5, decimal_places=2)

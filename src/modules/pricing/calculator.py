"""Tiered price computation.

``compute_price`` is a pure function: it never touches the database and
always works on ``Decimal`` values quantized to cents, so the same input
produces the same breakdown no matter how many times it is evaluated.

Tier selection: the tier with the greatest ``min_quantity`` that does
not exceed the requested quantity wins.  ``min_quantity`` is unique per
tier, so there is never a tie.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize *value* to two decimal places (half-up)."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TierRule:
    """Snapshot of a discount tier as seen by the calculator."""

    min_quantity: int
    discount_percent: Decimal


@dataclass(frozen=True)
class PriceBreakdown:
    quantity: int
    base_price: Decimal
    total_price: Decimal
    discount_percent: Decimal
    discount: Decimal
    total_price_with_discount: Decimal


def select_tier(quantity: int, tiers: Iterable[TierRule]) -> Optional[TierRule]:
    """Return the highest-threshold tier not exceeding *quantity*."""
    eligible = [tier for tier in tiers if tier.min_quantity <= quantity]
    if not eligible:
        return None
    return max(eligible, key=lambda tier: tier.min_quantity)


def compute_price(
    quantity: int,
    unit_price: Decimal,
    tiers: Iterable[TierRule],
) -> PriceBreakdown:
    """Compute the price breakdown for *quantity* units.

    The discounted total is rounded first and the discount is derived
    from it, which keeps ``total_price - discount`` exact.

    Raises:
        ValueError: quantity is lower than 1 or the unit price is negative.
    """
    if quantity < 1:
        raise ValueError("Quantity must be at least 1.")

    base_price = to_money(unit_price)
    if base_price < 0:
        raise ValueError("Unit price cannot be negative.")

    tier = select_tier(quantity, tiers)
    discount_percent = Decimal(tier.discount_percent) if tier else Decimal("0")

    total_price = to_money(base_price * quantity)
    total_price_with_discount = to_money(
        total_price * (HUNDRED - discount_percent) / HUNDRED
    )
    discount = total_price - total_price_with_discount

    return PriceBreakdown(
        quantity=quantity,
        base_price=base_price,
        total_price=total_price,
        discount_percent=discount_percent,
        discount=discount,
        total_price_with_discount=total_price_with_discount,
    )

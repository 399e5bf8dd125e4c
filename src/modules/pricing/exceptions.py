"""Pricing domain exceptions."""

from __future__ import annotations


class DiscountTierNotFound(Exception):
    """The requested discount tier does not exist."""


class DiscountTierAlreadyExists(Exception):
    """A tier with the same minimum quantity is already configured."""

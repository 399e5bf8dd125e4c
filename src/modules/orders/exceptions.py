"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The requested order does not exist (never created, removed or expired)."""


class InvalidOrderStatus(Exception):
    """The requested status change is not a forward transition."""


class UnknownBackTemplate(Exception):
    """A TEMPLATE item names a back template that is not in the catalog."""

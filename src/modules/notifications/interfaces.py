"""Notification contract consumed by the order lifecycle and the gateway."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderNotifier(Protocol):
    """Fire-and-forget notification sent once an order is settled."""

    def notify_order_paid(self, order: Order) -> None: ...

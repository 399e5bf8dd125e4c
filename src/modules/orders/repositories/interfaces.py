"""Order repository interface.

Extends ``IRepository[Order]`` with the methods required by the Order
aggregate: atomic creation with items and delivery, paginated queries,
and the two conditional writes that keep payment settlement
at-most-once (session binding and the CREATED -> PAID transition).

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import OrderFiltersDTO
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and one Delivery.
    Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items and delivery atomically.

        ``data`` holds the order columns plus ``items`` (list of item
        column dicts) and ``delivery`` (delivery column dict).
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock."""

    @abstractmethod
    def find_by_payment_reference(self, reference: str) -> Optional[Order]:
        """Find an order by its bound provider order id, or by its own id."""

    @abstractmethod
    def query(
        self, filters: Optional[OrderFiltersDTO], page: int, limit: int
    ) -> Tuple[List[Order], int]:
        """Return one page of orders (newest first) and the total count."""

    @abstractmethod
    def bind_payment_order(self, order_id: Any, external_order_id: str) -> bool:
        """Bind a provider order id unless one is already bound.

        Returns ``True`` when this call performed the bind.
        """

    @abstractmethod
    def mark_paid(
        self,
        order_id: Any,
        paid_at: datetime,
        capture_id: Optional[str] = None,
    ) -> bool:
        """Move the order to PAID only if it is still CREATED.

        Returns ``True`` when this call performed the transition.
        """

    @abstractmethod
    def list_expired_unpaid(self, deadline: datetime) -> List[Order]:
        """Unpaid orders created before *deadline*, with items loaded."""

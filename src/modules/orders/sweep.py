"""Reclamation of abandoned unpaid orders.

An order that is still unpaid ``max_age`` after its creation is deleted
together with its artifacts.  Each candidate is re-read under a row lock
right before deletion, so an order settled between the scan and the
delete is left alone.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable

import structlog
from django.db import transaction
from django.utils import timezone

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)


class ExpirationSweep:
    def __init__(
        self,
        order_repository: IOrderRepository,
        order_service: OrderService,
        max_age: timedelta,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._order_repo = order_repository
        self._order_service = order_service
        self._max_age = max_age
        self._clock = clock

    def run_cycle(self) -> int:
        """Remove every expired unpaid order and return how many were removed.

        A failing scan is logged and reported as zero removals so the
        schedule keeps running.  A failure on one order is logged and the
        remaining candidates are still processed.
        """
        deadline = self._clock() - self._max_age
        log = logger.bind(deadline=deadline.isoformat())
        try:
            candidates = self._order_repo.list_expired_unpaid(deadline)
        except Exception:
            log.exception("orders.sweep_failed")
            return 0

        removed = 0
        for candidate in candidates:
            try:
                if self._reclaim(candidate.id, deadline):
                    removed += 1
            except Exception:
                log.exception("orders.sweep_order_failed", order_id=str(candidate.id))

        log.info("orders.sweep_completed", removed=removed)
        return removed

    def _reclaim(self, order_id: Any, deadline: datetime) -> bool:
        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if (
                order is None
                or order.is_paid
                or order.paid_at is not None
                or order.created_at >= deadline
            ):
                logger.info("orders.sweep_skipped", order_id=str(order_id))
                return False
            self._order_service.purge(order)
        return True

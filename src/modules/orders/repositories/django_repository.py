"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
The aggregate (Order + OrderItems + Delivery) is written inside one
``transaction.atomic()`` block, so a failure half-way leaves nothing
behind.

Settlement and session binding are single conditional ``UPDATE``
statements; the row count tells the caller whether it won.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderFiltersDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Delivery, Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _is_uuid(value: str) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _aggregate(self):
        return Order.objects.select_related("delivery").prefetch_related("items")

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order_fields = {
            key: value for key, value in data.items() if key not in {"items", "delivery"}
        }
        order = Order.objects.create(**order_fields)

        items = [OrderItem(order=order, **item) for item in data["items"]]
        for item in items:
            item.save()

        Delivery.objects.create(order=order, **data["delivery"])

        logger.info("order.persisted", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its delivery and items.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return self._aggregate().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return self._aggregate().select_for_update(of=("self",)).filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def find_by_payment_reference(self, reference: str) -> Optional[Order]:
        condition = Q(external_payment_order_id=reference)
        if _is_uuid(reference):
            condition |= Q(id=reference)
        return self._aggregate().filter(condition).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = self._aggregate()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def query(
        self, filters: Optional[OrderFiltersDTO], page: int, limit: int
    ) -> Tuple[List[Order], int]:
        data = filters.model_dump(exclude_none=True) if filters else {}
        queryset = OrderFilter(data=data, queryset=self._aggregate()).qs
        total = queryset.count()
        offset = (page - 1) * limit
        return list(queryset[offset : offset + limit]), total

    def list_expired_unpaid(self, deadline: datetime) -> List[Order]:
        return list(
            self._aggregate()
            .exclude(status=OrderStatus.PAID)
            .filter(paid_at__isnull=True, created_at__lt=deadline)
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        entity.save()
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Hard-delete an order; items and delivery cascade."""
        try:
            deleted, _ = Order.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info("order.deleted", order_id=str(id))
        return bool(deleted)

    def bind_payment_order(self, order_id: Any, external_order_id: str) -> bool:
        updated = Order.objects.filter(
            id=order_id, external_payment_order_id__isnull=True
        ).update(external_payment_order_id=external_order_id, updated_at=timezone.now())
        logger.info(
            "order.payment_bound" if updated else "order.payment_bind_skipped",
            order_id=str(order_id),
            external_order_id=external_order_id,
        )
        return updated == 1

    def mark_paid(
        self,
        order_id: Any,
        paid_at: datetime,
        capture_id: Optional[str] = None,
    ) -> bool:
        updated = Order.objects.filter(id=order_id, status=OrderStatus.CREATED).update(
            status=OrderStatus.PAID,
            paid_at=paid_at,
            external_capture_id=capture_id,
            updated_at=timezone.now(),
        )
        logger.info(
            "order.marked_paid" if updated else "order.mark_paid_skipped",
            order_id=str(order_id),
        )
        return updated == 1

"""Order service layer (Use Cases).

Orchestrates order creation, queries, the status transition and removal.
All write operations are atomic; the service defines the unit-of-work
boundary.

Business rules enforced:
- Pricing fields are a snapshot of the current price table at creation.
- The item's back side comes either from a shared template or from its
  own artwork, never both.
- A TEMPLATE item may only name a template that exists in the catalog.
- Status only moves forward (CREATED -> PAID); repeating the current
  status is accepted as a no-op.
- The settlement notification is sent only after the status write has
  committed, and its failure never undoes the write.
- Artifact deletion is attempted before the rows are removed; a failed
  deletion is logged and skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence

import structlog
from django.db import transaction
from django.utils import timezone

from modules.files.blob_store import to_relative_path
from modules.orders.constants import BackSideType, DeliveryType, OrderStatus
from modules.orders.dtos import ItemArtifactsDTO, OrderPage
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderNotFound,
    UnknownBackTemplate,
)

if TYPE_CHECKING:
    from datetime import datetime

    from modules.files.blob_store import IBlobStore
    from modules.notifications.interfaces import IOrderNotifier
    from modules.orders.dtos import (
        CreateOrderDTO,
        CreateOrderItemDTO,
        DeliveryDTO,
        OrderFiltersDTO,
    )
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.pricing.services import PricingService
    from modules.templates.repositories.interfaces import IBackTemplateRepository

logger = structlog.get_logger(__name__)


def notify_paid_on_commit(notifier: IOrderNotifier, order: Order) -> None:
    """Hand *order* to *notifier* once the current transaction commits.

    Notifier errors are logged and never reach the caller.
    """

    def _send() -> None:
        try:
            notifier.notify_order_paid(order)
        except Exception:
            logger.exception("order.notification_failed", order_id=str(order.id))

    transaction.on_commit(_send)


class OrderService:
    """Application service for Order use-cases.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        pricing_service: PricingService,
        blob_store: IBlobStore,
        notifier: IOrderNotifier,
        template_repository: IBackTemplateRepository,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._order_repo = order_repository
        self._pricing = pricing_service
        self._blob_store = blob_store
        self._notifier = notifier
        self._templates = template_repository
        self._clock = clock

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(
        self,
        dto: CreateOrderDTO,
        artifacts: Optional[Sequence[Optional[ItemArtifactsDTO]]] = None,
    ) -> Order:
        """Price and persist a new order with its items and delivery.

        ``artifacts[i]`` holds the stored artwork of ``dto.items[i]``;
        missing entries mean the item has no artwork yet.

        Raises:
            ValueError: more artifact entries than items.
            UnknownBackTemplate: a TEMPLATE item names a template that is
                not in the catalog.
        """
        artifacts = list(artifacts or [])
        if len(artifacts) > len(dto.items):
            raise ValueError("More artifact entries than order items.")

        log = logger.bind(email=dto.email, item_count=len(dto.items))
        log.info("order.creation_started")

        self._check_templates(dto.items)

        breakdown = self._pricing.quote(dto.total_quantity)

        items = [
            self._item_row(item, artifacts[index] if index < len(artifacts) else None)
            for index, item in enumerate(dto.items)
        ]

        order = self._order_repo.create(
            {
                "customer_name": dto.customer_name,
                "email": dto.email,
                "phone": dto.phone,
                "status": OrderStatus.CREATED,
                "price_per_unit": breakdown.base_price,
                "total_price": breakdown.total_price,
                "discount_percent": breakdown.discount_percent,
                "discount": breakdown.discount,
                "total_price_with_discount": breakdown.total_price_with_discount,
                "total_quantity": breakdown.quantity,
                "items": items,
                "delivery": self._delivery_row(dto.delivery),
            }
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            total_quantity=breakdown.quantity,
            total=str(breakdown.total_price_with_discount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def update_status(self, order_id: Any, new_status: str) -> Order:
        """Move an order to *new_status*.

        Repeating the current status is a no-op.  CREATED -> PAID is a
        conditional write that also records ``paid_at``; the notifier runs
        after commit.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: unknown status or backward transition.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )

        if new_status not in OrderStatus.values:
            log.warning("order.unknown_status")
            raise InvalidOrderStatus(f"Unknown order status {new_status}.")

        if order.status == new_status:
            log.info("order.status_unchanged")
            return order

        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(
                f"Cannot transition from {order.status} to {new_status}."
            )

        if self._order_repo.mark_paid(order.id, self._clock()):
            log.info("order.status_updated")
            updated = self._order_repo.get_by_id(str(order.id))
            notify_paid_on_commit(self._notifier, updated)
            return updated

        log.info("order.already_settled")
        return self._order_repo.get_by_id(str(order.id))

    def remove_order(self, order_id: Any) -> None:
        """Delete an order, its artifacts first.

        Raises:
            OrderNotFound: order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        self.purge(order)

    def purge(self, order: Order) -> int:
        """Delete *order*'s artifacts then its rows.

        Returns the number of files actually removed.
        """
        log = logger.bind(order_id=str(order.id))
        removed = 0
        for reference in order.artifact_paths():
            try:
                if self._blob_store.delete(reference):
                    removed += 1
            except Exception as exc:
                log.warning("order.artifact_delete_failed", path=reference, error=str(exc))

        self._order_repo.delete(str(order.id))
        log.info("order.removed", files_removed=removed)
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: Any) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(
        self,
        filters: Optional[OrderFiltersDTO] = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPage:
        """Return one page of orders, newest first."""
        page = max(page, 1)
        limit = max(limit, 1)
        items, total = self._order_repo.query(filters, page, limit)
        return OrderPage(items=items, total=total, page=page, limit=limit)

    def _check_templates(self, items: Sequence[CreateOrderItemDTO]) -> None:
        wanted = {
            item.back_template_id
            for item in items
            if item.back_side_type == BackSideType.TEMPLATE
            and item.back_template_id is not None
        }
        if not wanted:
            return
        missing = wanted - self._templates.existing_ids(wanted)
        if missing:
            logger.warning(
                "order.unknown_back_template",
                template_ids=sorted(str(template_id) for template_id in missing),
            )
            raise UnknownBackTemplate(
                "Unknown back template: "
                + ", ".join(sorted(str(template_id) for template_id in missing))
            )

    # ------------------------------------------------------------------
    # Row builders
    # ------------------------------------------------------------------

    @staticmethod
    def _item_row(
        item: CreateOrderItemDTO, artifacts: Optional[ItemArtifactsDTO]
    ) -> Dict[str, Any]:
        artifacts = artifacts or ItemArtifactsDTO()
        row: Dict[str, Any] = {
            "quantity": item.quantity,
            "characteristics": dict(item.characteristics),
            "back_side_type": item.back_side_type,
            "front_original_path": to_relative_path(artifacts.front_original) or "",
            "front_processed_path": to_relative_path(artifacts.front_processed) or "",
            "back_template_id": None,
            "back_original_path": "",
            "back_processed_path": "",
        }
        if item.back_side_type == BackSideType.TEMPLATE:
            row["back_template_id"] = item.back_template_id
        else:
            row["back_original_path"] = to_relative_path(artifacts.back_original) or ""
            row["back_processed_path"] = (
                to_relative_path(artifacts.back_processed) or ""
            )
        return row

    @staticmethod
    def _delivery_row(delivery: DeliveryDTO) -> Dict[str, Any]:
        if delivery.type == DeliveryType.HOME:
            address = delivery.address
            return {
                "type": DeliveryType.HOME,
                "name": address.name,
                "street": address.street,
                "additional": address.additional,
                "postal_code": address.postal_code,
                "city": address.city,
                "phone": address.phone,
            }
        return {
            "type": DeliveryType.RELAY,
            "relay_phone": delivery.relay.phone,
            "relay_point": delivery.relay.point.model_dump(mode="json"),
        }

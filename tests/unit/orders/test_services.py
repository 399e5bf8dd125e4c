"""Unit tests for OrderService with stubbed collaborators.

Covers:
- Creation: price snapshot from the pricing service, back-side rules,
  artifact reference normalization.
- Status transition: no-ops, backward transition, conditional write,
  notification after commit and notifier failure isolation.
- Removal: artifact-then-row deletion tolerant of storage failures.
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock, call
from uuid import uuid4

import pytest

from modules.files.blob_store import IBlobStore
from modules.notifications.interfaces import IOrderNotifier
from modules.orders.constants import BackSideType, DeliveryType, OrderStatus
from modules.orders.dtos import CreateOrderDTO, ItemArtifactsDTO, OrderFiltersDTO
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound, UnknownBackTemplate
from modules.orders.repositories.interfaces import IOrderRepository
from modules.orders.services import OrderService
from modules.pricing.calculator import TierRule, compute_price
from modules.pricing.services import PricingService
from modules.templates.repositories.interfaces import IBackTemplateRepository

pytestmark = pytest.mark.unit

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=dt_timezone.utc)

HOME = {
    "type": "HOME",
    "address": {
        "name": "Camille Martin",
        "street": "12 rue des Lilas",
        "postal_code": "75011",
        "city": "Paris",
        "phone": "0601020304",
    },
}


def _order(status=OrderStatus.CREATED, paths=()):
    order = SimpleNamespace(id=uuid4(), status=status)
    order.artifact_paths = lambda: list(paths)
    order.can_transition_to = lambda new: status == OrderStatus.CREATED and new == OrderStatus.PAID
    return order


@pytest.fixture()
def repo():
    mock = MagicMock(spec=IOrderRepository)
    mock.create.side_effect = lambda data: SimpleNamespace(id=uuid4(), **data)
    mock.get_by_id.return_value = None
    return mock


@pytest.fixture()
def pricing():
    mock = MagicMock(spec=PricingService)
    mock.quote.side_effect = lambda quantity: compute_price(
        quantity, Decimal("10.00"), [TierRule(5, Decimal("10"))]
    )
    return mock


@pytest.fixture()
def blob_store():
    mock = MagicMock(spec=IBlobStore)
    mock.delete.return_value = True
    return mock


@pytest.fixture()
def notifier():
    return MagicMock(spec=IOrderNotifier)


@pytest.fixture()
def templates():
    mock = MagicMock(spec=IBackTemplateRepository)
    mock.existing_ids.side_effect = lambda ids: set(ids)
    return mock


@pytest.fixture()
def service(repo, pricing, blob_store, notifier, templates):
    return OrderService(repo, pricing, blob_store, notifier, templates, clock=lambda: NOW)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_price_snapshot_is_taken_from_total_quantity(self, service, repo, pricing):
        dto = CreateOrderDTO(
            customer_name="Camille",
            email="camille@example.com",
            items=[{"quantity": 3}, {"quantity": 4}],
            delivery=HOME,
        )

        service.create_order(dto)

        pricing.quote.assert_called_once_with(7)
        data = repo.create.call_args.args[0]
        assert data["status"] == OrderStatus.CREATED
        assert data["total_quantity"] == 7
        assert data["price_per_unit"] == Decimal("10.00")
        assert data["total_price"] == Decimal("70.00")
        assert data["discount"] == Decimal("7.00")
        assert data["total_price_with_discount"] == Decimal("63.00")
        assert [item["quantity"] for item in data["items"]] == [3, 4]

    def test_template_back_drops_back_artifacts(self, service, repo):
        template_id = uuid4()
        dto = CreateOrderDTO(
            customer_name="Camille",
            email="camille@example.com",
            items=[{"quantity": 1, "back_side_type": "TEMPLATE", "back_template_id": str(template_id)}],
            delivery=HOME,
        )

        service.create_order(
            dto,
            [ItemArtifactsDTO(front_original="/uploads/orders/f.png", back_original="orders/b.png")],
        )

        item = repo.create.call_args.args[0]["items"][0]
        assert item["back_template_id"] == template_id
        assert item["front_original_path"] == "orders/f.png"
        assert item["back_original_path"] == ""

    def test_unknown_template_is_rejected_before_persisting(self, service, repo, templates):
        known, unknown = uuid4(), uuid4()
        templates.existing_ids.side_effect = lambda ids: {known} & set(ids)
        dto = CreateOrderDTO(
            customer_name="Camille",
            email="camille@example.com",
            items=[
                {"quantity": 1, "back_side_type": "TEMPLATE", "back_template_id": str(known)},
                {"quantity": 2, "back_side_type": "TEMPLATE", "back_template_id": str(unknown)},
            ],
            delivery=HOME,
        )

        with pytest.raises(UnknownBackTemplate, match=str(unknown)):
            service.create_order(dto)

        repo.create.assert_not_called()

    def test_items_without_template_skip_the_catalog(self, service, repo, templates):
        dto = CreateOrderDTO(
            customer_name="Camille",
            email="camille@example.com",
            items=[
                {"quantity": 1},
                {"quantity": 1, "back_side_type": "CUSTOM", "back_template_id": str(uuid4())},
            ],
            delivery=HOME,
        )

        service.create_order(dto)

        templates.existing_ids.assert_not_called()
        repo.create.assert_called_once()

    def test_custom_back_keeps_artifacts_and_no_template(self, service, repo):
        dto = CreateOrderDTO(
            customer_name="Camille",
            email="camille@example.com",
            items=[{"quantity": 1, "back_side_type": "CUSTOM", "back_template_id": str(uuid4())}],
            delivery=HOME,
        )

        service.create_order(
            dto,
            [ItemArtifactsDTO(back_original="https://shop.example.com/uploads/orders/b.png")],
        )

        item = repo.create.call_args.args[0]["items"][0]
        assert item["back_side_type"] == BackSideType.CUSTOM
        assert item["back_template_id"] is None
        assert item["back_original_path"] == "orders/b.png"

    def test_relay_delivery_stores_canonical_point(self, service, repo):
        dto = CreateOrderDTO(
            customer_name="Camille",
            email="camille@example.com",
            items=[{"quantity": 1}],
            delivery={
                "type": "RELAY",
                "relay": {
                    "phone": "0601020304",
                    "point": {"Num": "1", "LgAdr1": "SHOP", "CP": "69002", "Ville": "LYON", "Pays": "FR"},
                },
            },
        )

        service.create_order(dto)

        delivery = repo.create.call_args.args[0]["delivery"]
        assert delivery["type"] == DeliveryType.RELAY
        assert delivery["relay_point"]["number"] == "1"
        assert delivery["relay_point"]["city"] == "LYON"

    def test_more_artifacts_than_items_is_rejected(self, service, repo):
        dto = CreateOrderDTO(
            customer_name="Camille",
            email="camille@example.com",
            items=[{"quantity": 1}],
            delivery=HOME,
        )

        with pytest.raises(ValueError):
            service.create_order(dto, [ItemArtifactsDTO(), ItemArtifactsDTO()])
        repo.create.assert_not_called()


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class TestUpdateStatus:
    def test_missing_order(self, service, repo):
        repo.get_for_update.return_value = None

        with pytest.raises(OrderNotFound):
            service.update_status(uuid4(), OrderStatus.PAID)

    def test_paid_to_paid_is_a_noop(self, service, repo, notifier):
        order = _order(OrderStatus.PAID)
        repo.get_for_update.return_value = order

        assert service.update_status(order.id, OrderStatus.PAID) is order
        repo.mark_paid.assert_not_called()
        notifier.notify_order_paid.assert_not_called()

    def test_created_to_created_is_a_noop(self, service, repo):
        order = _order()
        repo.get_for_update.return_value = order

        assert service.update_status(order.id, OrderStatus.CREATED) is order
        repo.mark_paid.assert_not_called()

    def test_paid_to_created_is_rejected(self, service, repo):
        order = _order(OrderStatus.PAID)
        repo.get_for_update.return_value = order

        with pytest.raises(InvalidOrderStatus):
            service.update_status(order.id, OrderStatus.CREATED)

    def test_unknown_status_is_rejected(self, service, repo):
        repo.get_for_update.return_value = _order()

        with pytest.raises(InvalidOrderStatus):
            service.update_status(uuid4(), "SHIPPED")

    def test_created_to_paid_notifies_after_commit(
        self, service, repo, notifier, django_capture_on_commit_callbacks
    ):
        order = _order()
        paid = _order(OrderStatus.PAID)
        repo.get_for_update.return_value = order
        repo.mark_paid.return_value = True
        repo.get_by_id.return_value = paid

        with django_capture_on_commit_callbacks() as callbacks:
            result = service.update_status(order.id, OrderStatus.PAID)
            notifier.notify_order_paid.assert_not_called()

        assert result is paid
        repo.mark_paid.assert_called_once_with(order.id, NOW)
        assert len(callbacks) == 1
        callbacks[0]()
        notifier.notify_order_paid.assert_called_once_with(paid)

    def test_lost_conditional_write_does_not_notify(
        self, service, repo, notifier, django_capture_on_commit_callbacks
    ):
        repo.get_for_update.return_value = _order()
        repo.mark_paid.return_value = False

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            service.update_status(uuid4(), OrderStatus.PAID)

        assert callbacks == []
        notifier.notify_order_paid.assert_not_called()

    def test_notifier_failure_does_not_propagate(
        self, service, repo, notifier, django_capture_on_commit_callbacks
    ):
        repo.get_for_update.return_value = _order()
        repo.mark_paid.return_value = True
        repo.get_by_id.return_value = _order(OrderStatus.PAID)
        notifier.notify_order_paid.side_effect = ConnectionError("smtp down")

        with django_capture_on_commit_callbacks(execute=True):
            result = service.update_status(uuid4(), OrderStatus.PAID)

        assert result.status == OrderStatus.PAID
        notifier.notify_order_paid.assert_called_once()


# ---------------------------------------------------------------------------
# Remove / Query
# ---------------------------------------------------------------------------


class TestRemoveOrder:
    def test_missing_order(self, service, repo):
        with pytest.raises(OrderNotFound):
            service.remove_order(uuid4())

    def test_artifacts_deleted_before_rows(self, service, repo, blob_store):
        order = _order(paths=["orders/a.png", "orders/b.png"])
        repo.get_by_id.return_value = order
        manager = MagicMock()
        manager.attach_mock(blob_store.delete, "blob_delete")
        manager.attach_mock(repo.delete, "row_delete")

        service.remove_order(order.id)

        assert manager.mock_calls == [
            call.blob_delete("orders/a.png"),
            call.blob_delete("orders/b.png"),
            call.row_delete(str(order.id)),
        ]

    def test_storage_failures_are_skipped(self, service, repo, blob_store):
        order = _order(paths=["orders/a.png", "orders/b.png"])
        repo.get_by_id.return_value = order
        blob_store.delete.side_effect = [OSError("disk"), True]

        service.remove_order(order.id)

        assert blob_store.delete.call_count == 2
        repo.delete.assert_called_once_with(str(order.id))

    def test_already_absent_files_do_not_block_removal(self, service, repo, blob_store):
        order = _order(paths=["orders/a.png"])
        repo.get_by_id.return_value = order
        blob_store.delete.return_value = False

        assert service.purge(order) == 0
        repo.delete.assert_called_once_with(str(order.id))


class TestQueries:
    def test_get_order_missing(self, service):
        with pytest.raises(OrderNotFound):
            service.get_order("not-a-uuid")

    def test_list_orders_returns_page(self, service, repo):
        repo.query.return_value = (["a", "b"], 12)
        filters = OrderFiltersDTO(status=OrderStatus.CREATED)

        page = service.list_orders(filters, page=2, limit=2)

        repo.query.assert_called_once_with(filters, 2, 2)
        assert page.items == ["a", "b"]
        assert page.total == 12
        assert (page.page, page.limit) == (2, 2)

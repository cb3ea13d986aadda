"""
OrderService - Order Lifecycle Management

Handles order creation, cancellation and fulfillment transitions.

Two units of work are atomic:
- creation: every line's stock reservation plus the order rows commit together,
  or nothing does;
- cancellation: the status change and the stock release commit together.

Every status change is a compare-and-set on the current status, which is what
guarantees stock is released at most once per order.
"""

import logging
from typing import Iterable, Optional

from django.db import transaction

from marketplace.cart.domain.services.cart_service import CartService
from marketplace.cart.domain.services.inventory_service import InventoryService
from marketplace.cart.domain.services.snapshot_service import CartLine, CartSnapshotService, PricedCart
from marketplace.domain.events.base import publish_on_commit
from marketplace.domain.events.order_events import OrderCancelledEvent, OrderPlacedEvent, OrderStatusChangedEvent
from marketplace.infra.observability.alarms import raise_integrity_alarm
from marketplace.infra.observability.metrics import (
    order_transition_rejections_total,
    order_transitions_total,
    order_value,
    orders_placed_total,
)
from marketplace.infra.observability.tracing import get_tracer
from marketplace.ordering.domain.models.order import OrderStatus
from marketplace.ordering.domain.records import OrderPage, OrderRecord
from marketplace.ordering.domain.repositories import OrderRepository
from marketplace.ordering.domain.state_machine import BUYER_CANCELLABLE, can_transition, is_terminal, releases_stock
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, parse_uuid, service_err, service_ok
from utils.transaction_utils import retry_on_lock_contention

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

MAX_PAGE_SIZE = 100


class _UnitOfWorkAborted(Exception):
    """Raised inside an atomic block to roll it back and hand ``result`` to the caller."""

    def __init__(self, result: ServiceResult):
        super().__init__(result.error)
        self.result = result


class OrderService(BaseService):
    """
    Service for managing order lifecycle.
    """

    def __init__(
        self,
        inventory_service: InventoryService = None,
        snapshot_service: CartSnapshotService = None,
        cart_service: CartService = None,
        repository: OrderRepository = None,
        event_bus=None,
    ):
        """
        Initialize OrderService.

        Args:
            inventory_service: Stock ledger (injected)
            snapshot_service: Prices carts into snapshots (injected)
            cart_service: Cart operations, used to clear the cart after checkout (injected)
            repository: Order persistence (injected)
            event_bus: Event bus for publishing domain events (injected)
        """
        super().__init__()
        if event_bus is None:
            from infrastructure.events import get_event_bus

            event_bus = get_event_bus()
        self.event_bus = event_bus
        self.inventory_service = inventory_service or InventoryService(event_bus=event_bus)
        self.snapshot_service = snapshot_service or CartSnapshotService()
        self.cart_service = cart_service or CartService(snapshot_service=self.snapshot_service)
        self.repository = repository or OrderRepository()

    @BaseService.log_performance
    @retry_on_lock_contention()
    def create_order(self, user, priced_cart: PricedCart) -> ServiceResult[OrderRecord]:
        """
        Create a PENDING order from a priced snapshot, reserving stock for every line.

        All-or-nothing: if any line cannot be reserved, reservations made for
        earlier lines and the order row are rolled back and the failing line is
        reported in ``error_context``.

        Example:
            >>> snapshot = snapshot_service.snapshot([CartLine(product_id, 3)])
            >>> result = order_service.create_order(user, snapshot.value)
            >>> if not result.ok and result.error == ErrorCodes.INSUFFICIENT_STOCK:
            ...     print(result.error_context["product_id"])
        """
        with tracer.start_as_current_span("order_create_transaction") as span:
            span.set_attribute("user.id", str(user.id))

            if not priced_cart.lines:
                orders_placed_total.labels(status="empty_cart").inc()
                return service_err(ErrorCodes.CART_EMPTY, "Cannot create order from empty cart")

            try:
                with transaction.atomic():
                    order = self.repository.create(user, priced_cart.lines)

                    # Lock rows in a stable order so concurrent multi-line checkouts cannot deadlock
                    with tracer.start_as_current_span("reserve_inventory"):
                        for line in sorted(priced_cart.lines, key=lambda line: line.product_id):
                            reserved = self.inventory_service.reserve_stock(
                                line.product_id, line.quantity, order_id=str(order.id)
                            )
                            if not reserved.ok:
                                raise _UnitOfWorkAborted(reserved)

                    publish_on_commit(
                        self.event_bus,
                        OrderPlacedEvent(str(order.id), str(user.id), order.total_amount, len(priced_cart.lines)),
                    )
            except _UnitOfWorkAborted as aborted:
                orders_placed_total.labels(status="rejected").inc()
                span.set_attribute("order.rejected", aborted.result.error)
                self.logger.info(f"Order for user {user.id} rejected: {aborted.result.error_detail}")
                return aborted.result

            orders_placed_total.labels(status="success").inc()
            order_value.observe(float(order.total_amount))
            span.set_attribute("order.id", str(order.id))
            span.set_attribute("order.total", str(order.total_amount))
            self.logger.info(
                f"Created order {order.id} for user {user.id}: "
                f"{len(priced_cart.lines)} lines, total {order.total_amount}"
            )

            return service_ok(self.repository.get(order.id))

    @BaseService.log_performance
    @retry_on_lock_contention()
    def checkout(self, user, lines: Optional[Iterable[CartLine]] = None) -> ServiceResult[OrderRecord]:
        """
        Snapshot the buyer's cart (or the explicit ``lines``) and create the order.

        When the persisted cart was used it is cleared in the same transaction.
        """
        with transaction.atomic():
            if lines is None:
                snapshot = self.snapshot_service.snapshot_cart(user)
            else:
                snapshot = self.snapshot_service.snapshot(lines)
            if not snapshot.ok:
                orders_placed_total.labels(status="invalid").inc()
                return snapshot

            result = self.create_order(user, snapshot.value)
            if result.ok and lines is None:
                self.cart_service.clear_cart(user)
            return result

    @BaseService.log_performance
    @retry_on_lock_contention()
    def cancel_order(self, order_id: str, user, reason: str = "") -> ServiceResult[OrderRecord]:
        """
        Cancel an order on behalf of its buyer. Legal only from PENDING.

        Returns:
            ServiceResult with the cancelled OrderRecord, or ORDER_NOT_FOUND /
            NOT_ORDER_OWNER / INVALID_TRANSITION. A rejected cancel changes no stock.
        """
        with tracer.start_as_current_span("order_cancel") as span:
            span.set_attribute("order.id", str(order_id))

            owner_check = self._check_owner(order_id, user)
            if not owner_check.ok:
                return owner_check
            order_uuid = owner_check.value

            current = self.repository.get_status(order_uuid)
            if current not in BUYER_CANCELLABLE:
                order_transition_rejections_total.labels(to_status=OrderStatus.CANCELLED.value).inc()
                if is_terminal(current):
                    detail = f"Order is {current} and can no longer change"
                else:
                    detail = f"Only pending orders can be cancelled by the buyer (order is {current})"
                return service_err(
                    ErrorCodes.INVALID_TRANSITION,
                    detail,
                    current_status=current,
                    requested_status=OrderStatus.CANCELLED.value,
                )

            return self._apply_transition(order_uuid, current, OrderStatus.CANCELLED.value, actor=user, reason=reason)

    @BaseService.log_performance
    @retry_on_lock_contention()
    def advance_status(self, order_id: str, to_status: str, actor=None, reason: str = "") -> ServiceResult[OrderRecord]:
        """
        Move an order along the fulfillment path (VALIDATED, SHIPPED, DELIVERED),
        or cancel a VALIDATED order from the fulfillment side.

        Out-of-order and repeated transitions are rejected with INVALID_TRANSITION.
        """
        with tracer.start_as_current_span("order_transition") as span:
            span.set_attribute("order.id", str(order_id))
            span.set_attribute("order.to_status", str(to_status))

            if to_status not in OrderStatus.values:
                return service_err(ErrorCodes.VALIDATION_ERROR, f"Unknown status '{to_status}'")

            order_uuid = parse_uuid(order_id)
            current = self.repository.get_status(order_uuid) if order_uuid else None
            if current is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

            if not can_transition(current, to_status):
                order_transition_rejections_total.labels(to_status=to_status).inc()
                return service_err(
                    ErrorCodes.INVALID_TRANSITION,
                    f"Cannot move order from '{current}' to '{to_status}'",
                    current_status=current,
                    requested_status=to_status,
                )

            return self._apply_transition(order_uuid, current, to_status, actor=actor, reason=reason)

    @BaseService.log_performance
    def get_order(self, order_id: str, user) -> ServiceResult[OrderRecord]:
        """
        Get order details (owner or staff only).
        """
        if getattr(user, "is_staff", False):
            order_uuid = parse_uuid(order_id)
            record = self.repository.get(order_uuid) if order_uuid else None
            if record is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")
            return service_ok(record)

        owner_check = self._check_owner(order_id, user)
        if not owner_check.ok:
            return owner_check
        return service_ok(self.repository.get(owner_check.value))

    @BaseService.log_performance
    def list_orders(self, user, status: Optional[str] = None, page: int = 1, page_size: int = 20) -> ServiceResult[OrderPage]:
        """
        List the buyer's orders, newest first.

        Example:
            >>> result = order_service.list_orders(user, status="pending")
            >>> if result.ok:
            ...     orders = result.value.results
        """
        if status and status not in OrderStatus.values:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Unknown status '{status}'")
        if page < 1 or not 1 <= page_size <= MAX_PAGE_SIZE:
            return service_err(
                ErrorCodes.VALIDATION_ERROR, f"page must be >= 1 and page_size between 1 and {MAX_PAGE_SIZE}"
            )

        order_page = self.repository.list_for_buyer(user, status=status, page=page, page_size=page_size)
        self.logger.info(f"Listed orders for user {user.id}: {order_page.count} total, page {page}")
        return service_ok(order_page)

    def _check_owner(self, order_id, user) -> ServiceResult:
        order_uuid = parse_uuid(order_id)
        owner_id = self.repository.get_owner_id(order_uuid) if order_uuid else None
        if owner_id is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")
        if owner_id != user.id:
            return service_err(ErrorCodes.NOT_ORDER_OWNER, "You do not own this order")
        return service_ok(order_uuid)

    def _apply_transition(self, order_id, from_status: str, to_status: str, actor=None, reason: str = "") -> ServiceResult:
        extra = {}
        if to_status == OrderStatus.CANCELLED.value:
            extra = {"cancellation_reason": reason, "cancelled_by_id": getattr(actor, "id", None)}

        try:
            with transaction.atomic():
                if not self.repository.compare_and_set_status(order_id, from_status, to_status, **extra):
                    current = self.repository.get_status(order_id)
                    if current is None:
                        raise_integrity_alarm("order_row_missing", f"Order {order_id} vanished during {to_status}")
                        raise _UnitOfWorkAborted(
                            service_err(ErrorCodes.DATA_INTEGRITY_ERROR, f"Order {order_id} missing during transition")
                        )
                    # Another request moved the order first
                    raise _UnitOfWorkAborted(
                        service_err(
                            ErrorCodes.INVALID_TRANSITION,
                            f"Order {order_id} is no longer in status '{from_status}'",
                            current_status=current,
                            requested_status=to_status,
                        )
                    )

                if releases_stock(to_status):
                    with tracer.start_as_current_span("release_inventory"):
                        for product_id, quantity in self.repository.line_quantities(order_id):
                            released = self.inventory_service.release_stock(
                                str(product_id), quantity, reason=f"order_cancelled:{order_id}"
                            )
                            if not released.ok:
                                raise _UnitOfWorkAborted(released)

                publish_on_commit(self.event_bus, OrderStatusChangedEvent(str(order_id), from_status, to_status))
                if to_status == OrderStatus.CANCELLED.value:
                    publish_on_commit(
                        self.event_bus,
                        OrderCancelledEvent(str(order_id), str(getattr(actor, "id", "")), reason, from_status),
                    )
        except _UnitOfWorkAborted as aborted:
            order_transition_rejections_total.labels(to_status=to_status).inc()
            return aborted.result

        order_transitions_total.labels(from_status=from_status, to_status=to_status).inc()
        self.logger.info(f"Order {order_id}: {from_status} -> {to_status}")
        return service_ok(self.repository.get(order_id))

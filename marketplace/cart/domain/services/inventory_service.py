"""
InventoryService - Stock Ledger

Owns the per-product stock count. Reservation is a single conditional UPDATE
(decrement only where enough stock remains), so two buyers racing for the last
unit cannot both succeed and stock can never go negative.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.db.models import F

from marketplace.catalog.domain.models.catalog import Product
from marketplace.domain.events import StockReleasedEvent, StockReservedEvent
from marketplace.domain.events.base import publish_on_commit
from marketplace.infra.observability.alarms import raise_integrity_alarm
from marketplace.infra.observability.metrics import stock_releases_total, stock_reservations_total
from marketplace.services.base import (
    MAX_QUANTITY,
    BaseService,
    ErrorCodes,
    ServiceResult,
    parse_uuid,
    service_err,
    service_ok,
)
from utils.transaction_utils import retry_on_lock_contention

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockMovement:
    product_id: str
    quantity: int
    new_stock: int
    reason: str


class InventoryService(BaseService):
    """
    Service for product stock reservations and releases.

    ``reserve_stock`` and ``release_stock`` join the caller's transaction when
    there is one, so an order and its stock movements commit or roll back together.
    """

    def __init__(self, event_bus=None):
        """
        Initialize InventoryService.

        Args:
            event_bus: Event bus for publishing stock events (injected)
        """
        super().__init__()
        if event_bus is None:
            from infrastructure.events import get_event_bus

            event_bus = get_event_bus()
        self.event_bus = event_bus

    @BaseService.log_performance
    @retry_on_lock_contention()
    @transaction.atomic
    def reserve_stock(self, product_id: str, quantity: int, order_id: Optional[str] = None) -> ServiceResult[StockMovement]:
        """
        Atomically check and decrement stock.

        Args:
            product_id: UUID of the product
            quantity: Quantity to reserve (must be positive)
            order_id: Optional order ID for tracking

        Returns:
            ServiceResult with the StockMovement, or INSUFFICIENT_STOCK with
            ``product_id``, ``requested`` and ``available`` in the error context.
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")
        if quantity > MAX_QUANTITY:
            return service_err(ErrorCodes.INVALID_QUANTITY, f"Quantity must not exceed {MAX_QUANTITY}")

        product_uuid = parse_uuid(product_id)
        if product_uuid is None:
            stock_reservations_total.labels(status="not_found").inc()
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

        updated = Product.objects.filter(id=product_uuid, is_active=True, stock_quantity__gte=quantity).update(
            stock_quantity=F("stock_quantity") - quantity
        )

        if not updated:
            available = (
                Product.objects.filter(id=product_uuid, is_active=True)
                .values_list("stock_quantity", flat=True)
                .first()
            )
            if available is None:
                stock_reservations_total.labels(status="not_found").inc()
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            stock_reservations_total.labels(status="insufficient").inc()
            return service_err(
                ErrorCodes.INSUFFICIENT_STOCK,
                f"Insufficient stock for product {product_id}. Available: {available}, Requested: {quantity}",
                product_id=str(product_uuid),
                requested=quantity,
                available=available,
            )

        new_stock = Product.objects.values_list("stock_quantity", flat=True).get(id=product_uuid)
        if new_stock < 0:
            raise_integrity_alarm("negative_stock", f"Product {product_uuid} at {new_stock} after reservation")
            transaction.set_rollback(True)
            return service_err(ErrorCodes.DATA_INTEGRITY_ERROR, f"Stock of product {product_uuid} went negative")

        stock_reservations_total.labels(status="success").inc()
        self.logger.info(
            f"Stock reserved: product={product_uuid}, quantity={quantity}, order={order_id}, stock -> {new_stock}"
        )
        publish_on_commit(self.event_bus, StockReservedEvent(str(product_uuid), quantity, new_stock, order_id))

        return service_ok(StockMovement(str(product_uuid), quantity, new_stock, "reserved"))

    @BaseService.log_performance
    @retry_on_lock_contention()
    @transaction.atomic
    def release_stock(self, product_id: str, quantity: int, reason: str = "order_cancelled") -> ServiceResult[StockMovement]:
        """
        Return stock to inventory.

        The caller guarantees this runs exactly once per reserved quantity (the
        order status transition is the guard). A missing product row is a
        ledger divergence and fails the operation.

        Args:
            product_id: UUID of the product
            quantity: Quantity to release
            reason: Reason for release (for audit logging)
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")
        if quantity > MAX_QUANTITY:
            return service_err(ErrorCodes.INVALID_QUANTITY, f"Quantity must not exceed {MAX_QUANTITY}")

        product_uuid = parse_uuid(product_id)
        updated = 0
        if product_uuid is not None:
            updated = Product.objects.filter(id=product_uuid).update(stock_quantity=F("stock_quantity") + quantity)

        if not updated:
            raise_integrity_alarm("release_without_product", f"Cannot release {quantity} of missing product {product_id}")
            transaction.set_rollback(True)
            return service_err(
                ErrorCodes.DATA_INTEGRITY_ERROR,
                f"Product {product_id} missing while releasing stock",
                product_id=str(product_id),
            )

        new_stock = Product.objects.values_list("stock_quantity", flat=True).get(id=product_uuid)

        stock_releases_total.labels(reason=reason.split(":")[0]).inc()
        self.logger.info(
            f"Stock released: product={product_uuid}, quantity={quantity}, reason={reason}, stock -> {new_stock}"
        )
        publish_on_commit(self.event_bus, StockReleasedEvent(str(product_uuid), quantity, new_stock, reason))

        return service_ok(StockMovement(str(product_uuid), quantity, new_stock, reason))

    @BaseService.log_performance
    @retry_on_lock_contention()
    @transaction.atomic
    def restock(self, product_id: str, quantity: int) -> ServiceResult[StockMovement]:
        """
        Add stock for a product (seller/admin operation).

        Example:
            >>> result = inventory_service.restock(product_id, 50)
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity to add must be positive")
        if quantity > MAX_QUANTITY:
            return service_err(ErrorCodes.INVALID_QUANTITY, f"Quantity must not exceed {MAX_QUANTITY}")

        product_uuid = parse_uuid(product_id)
        if product_uuid is None or not Product.objects.filter(id=product_uuid).exists():
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

        return self.release_stock(str(product_uuid), quantity, reason="restock")

    def check_availability(self, product_id: str, quantity: int = 1) -> ServiceResult[bool]:
        """
        Check if a product has sufficient stock available.

        This is a point-in-time read; only ``reserve_stock`` guarantees the stock.
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")
        if quantity > MAX_QUANTITY:
            return service_err(ErrorCodes.INVALID_QUANTITY, f"Quantity must not exceed {MAX_QUANTITY}")

        level = self.get_stock_level(product_id)
        if not level.ok:
            return level
        return service_ok(level.value >= quantity)

    def get_stock_level(self, product_id: str) -> ServiceResult[int]:
        """
        Get current stock quantity for an active product.
        """
        product_uuid = parse_uuid(product_id)
        stock = None
        if product_uuid is not None:
            stock = (
                Product.objects.filter(id=product_uuid, is_active=True)
                .values_list("stock_quantity", flat=True)
                .first()
            )

        if stock is None:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

        if stock < 0:
            raise_integrity_alarm("negative_stock", f"Product {product_uuid} observed at {stock}")
            return service_err(ErrorCodes.DATA_INTEGRITY_ERROR, f"Stock of product {product_uuid} is negative")

        return service_ok(stock)

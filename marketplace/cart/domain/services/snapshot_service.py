"""
CartSnapshotService - Priced Cart Snapshots

Turns a mutable cart (lines pointing at live product rows) into an immutable
PricedCart. Order creation only ever reads prices from the snapshot, so a price
change after the quote does not alter it.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from marketplace.cart.domain.models.cart import Cart
from marketplace.catalog.domain.models.catalog import Product
from marketplace.services.base import (
    MAX_QUANTITY,
    BaseService,
    ErrorCodes,
    ServiceResult,
    parse_uuid,
    service_err,
    service_ok,
)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    product_name: str
    seller_id: int
    quantity: int
    unit_price: Decimal
    available_stock: int
    unavailable: bool

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PricedCart:
    lines: Tuple[PricedLine, ...]

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))

    @property
    def has_unavailable(self) -> bool:
        return any(line.unavailable for line in self.lines)

    @property
    def unavailable_lines(self) -> List[PricedLine]:
        return [line for line in self.lines if line.unavailable]


class CartSnapshotService(BaseService):
    """
    Builds PricedCart snapshots. Never writes to the cart or the product.
    """

    @BaseService.log_performance
    def snapshot(self, lines: Iterable[CartLine]) -> ServiceResult[PricedCart]:
        """
        Price a list of cart lines against current product data.

        Duplicate product lines are merged. A line asking for more than the
        current stock is kept and flagged ``unavailable``.

        Returns:
            ServiceResult with PricedCart, or CART_EMPTY / INVALID_QUANTITY /
            PRODUCT_NOT_FOUND.
        """
        merged: Dict[str, int] = {}
        for line in lines:
            if line.quantity <= 0:
                return service_err(
                    ErrorCodes.INVALID_QUANTITY,
                    f"Quantity for product {line.product_id} must be positive",
                    product_id=str(line.product_id),
                )
            product_uuid = parse_uuid(line.product_id)
            if product_uuid is None:
                return service_err(
                    ErrorCodes.PRODUCT_NOT_FOUND,
                    f"Product {line.product_id} not found",
                    product_id=str(line.product_id),
                )
            key = str(product_uuid)
            merged[key] = merged.get(key, 0) + line.quantity
            if merged[key] > MAX_QUANTITY:
                return service_err(
                    ErrorCodes.INVALID_QUANTITY,
                    f"Quantity for product {key} exceeds {MAX_QUANTITY}",
                    product_id=key,
                    max_quantity=MAX_QUANTITY,
                )

        if not merged:
            return service_err(ErrorCodes.CART_EMPTY, "Cannot snapshot an empty cart")

        products = {
            str(product.id): product
            for product in Product.objects.filter(id__in=list(merged), is_active=True).select_related("boutique")
        }

        priced = []
        for product_id, quantity in merged.items():
            product = products.get(product_id)
            if product is None:
                return service_err(
                    ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found", product_id=product_id
                )
            priced.append(
                PricedLine(
                    product_id=product_id,
                    product_name=product.name,
                    seller_id=product.boutique.seller_id,
                    quantity=quantity,
                    unit_price=product.price,
                    available_stock=product.stock_quantity,
                    unavailable=quantity > product.stock_quantity,
                )
            )

        snapshot = PricedCart(lines=tuple(priced))
        if snapshot.has_unavailable:
            self.logger.info(f"Snapshot has {len(snapshot.unavailable_lines)} unavailable line(s)")
        return service_ok(snapshot)

    def snapshot_cart(self, user) -> ServiceResult[PricedCart]:
        """Snapshot the user's persisted cart."""
        cart = Cart.objects.filter(user=user).first()
        if cart is None:
            return service_err(ErrorCodes.CART_EMPTY, "Cart is empty")
        lines = [CartLine(str(product_id), quantity) for product_id, quantity in cart.line_items()]
        return self.snapshot(lines)

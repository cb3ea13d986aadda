"""
CartService - Shopping Cart Operations

Handles shopping cart operations including add, remove, update, and clear.
The cart never reserves stock: quantities beyond current stock are accepted and
surfaced as unavailable lines by CartSnapshotService.
"""

import logging
from typing import Dict

from django.db import transaction

from marketplace.cart.domain.models.cart import Cart, CartItem
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

from .snapshot_service import CartLine, CartSnapshotService

logger = logging.getLogger(__name__)


class CartService(BaseService):
    """
    Service for managing shopping cart operations.

    Responsibilities:
    - Get user's cart (priced against live product data)
    - Add items to cart (merging quantities)
    - Update item quantities (0 removes the line)
    - Remove items / clear cart

    Dependencies:
    - CartSnapshotService: prices the cart lines
    """

    def __init__(self, snapshot_service: CartSnapshotService = None):
        super().__init__()
        self.snapshot_service = snapshot_service or CartSnapshotService()

    @BaseService.log_performance
    def get_cart(self, user) -> ServiceResult[Dict]:
        """
        Get user's shopping cart with priced items and total.

        Example:
            >>> result = cart_service.get_cart(user)
            >>> if result.ok:
            ...     total = result.value["total"]
        """
        cart = Cart.get_or_create_cart(user)
        lines = [CartLine(str(product_id), quantity) for product_id, quantity in cart.line_items()]

        cart_data = {
            "id": cart.id,
            "user_id": user.id,
            "items": [],
            "items_count": 0,
            "total": None,
            "has_unavailable": False,
            "updated_at": cart.updated_at,
        }
        if not lines:
            return service_ok(cart_data)

        snapshot = self.snapshot_service.snapshot(lines)
        if not snapshot.ok:
            return snapshot

        priced = snapshot.value
        cart_data.update(
            {
                "items": [
                    {
                        "product_id": line.product_id,
                        "product_name": line.product_name,
                        "quantity": line.quantity,
                        "unit_price": line.unit_price,
                        "line_total": line.line_total,
                        "available_stock": line.available_stock,
                        "unavailable": line.unavailable,
                    }
                    for line in priced.lines
                ],
                "items_count": len(priced.lines),
                "total": priced.total,
                "has_unavailable": priced.has_unavailable,
            }
        )
        return service_ok(cart_data)

    @BaseService.log_performance
    @transaction.atomic
    def add_to_cart(self, user, product_id: str, quantity: int = 1) -> ServiceResult[Dict]:
        """
        Add item to cart, merging with an existing line for the same product.
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")
        if quantity > MAX_QUANTITY:
            return service_err(ErrorCodes.INVALID_QUANTITY, f"Quantity must not exceed {MAX_QUANTITY}")

        product_uuid = parse_uuid(product_id)
        product = Product.objects.filter(id=product_uuid, is_active=True).first() if product_uuid else None
        if product is None:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found or inactive")

        cart = Cart.get_or_create_cart(user)
        cart_item, created = CartItem.objects.select_for_update().get_or_create(
            cart=cart, product=product, defaults={"quantity": quantity}
        )
        if created:
            self.logger.info(f"Added to cart for user {user.id}: {quantity}x {product.name}")
        else:
            old_quantity = cart_item.quantity
            if old_quantity + quantity > MAX_QUANTITY:
                return service_err(ErrorCodes.INVALID_QUANTITY, f"Cart quantity must not exceed {MAX_QUANTITY}")
            cart_item.quantity = old_quantity + quantity
            cart_item.save(update_fields=["quantity"])
            self.logger.info(
                f"Updated cart item for user {user.id}: {product.name} quantity {old_quantity} -> {cart_item.quantity}"
            )

        cart.save(update_fields=["updated_at"])
        return self.get_cart(user)

    @BaseService.log_performance
    @transaction.atomic
    def update_quantity(self, user, product_id: str, quantity: int) -> ServiceResult[Dict]:
        """
        Set the quantity of a cart line. A quantity of 0 removes the line.
        """
        if quantity < 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity cannot be negative")
        if quantity > MAX_QUANTITY:
            return service_err(ErrorCodes.INVALID_QUANTITY, f"Quantity must not exceed {MAX_QUANTITY}")
        if quantity == 0:
            return self.remove_from_cart(user, product_id)

        cart_item = self._get_item(user, product_id)
        if cart_item is None:
            return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} not in cart")

        old_quantity = cart_item.quantity
        cart_item.quantity = quantity
        cart_item.save(update_fields=["quantity"])
        self.logger.info(f"Updated cart quantity for user {user.id}: {product_id} {old_quantity} -> {quantity}")

        return self.get_cart(user)

    @BaseService.log_performance
    @transaction.atomic
    def remove_from_cart(self, user, product_id: str) -> ServiceResult[Dict]:
        cart_item = self._get_item(user, product_id)
        if cart_item is None:
            return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} not in cart")

        cart_item.delete()
        self.logger.info(f"Removed from cart for user {user.id}: {product_id}")
        return self.get_cart(user)

    @BaseService.log_performance
    @transaction.atomic
    def clear_cart(self, user) -> ServiceResult[int]:
        """
        Clear all items from cart.

        Returns:
            ServiceResult with the number of removed lines
        """
        removed, _ = CartItem.objects.filter(cart__user=user).delete()
        if removed:
            self.logger.info(f"Cleared cart for user {user.id}: {removed} items removed")
        return service_ok(removed)

    def _get_item(self, user, product_id):
        product_uuid = parse_uuid(product_id)
        if product_uuid is None:
            return None
        return CartItem.objects.select_for_update().filter(cart__user=user, product_id=product_uuid).first()

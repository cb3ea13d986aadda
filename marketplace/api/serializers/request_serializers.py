"""
Request Serializers for the Marketplace API

Validate input before any service call, so malformed requests never touch the
ledger.
"""

from rest_framework import serializers

from marketplace.analytics.domain.services.statistics_service import DEFAULT_PERIOD, PERIOD_DAYS
from marketplace.boutique.domain.services.boutique_service import NAME_MAX_LENGTH
from marketplace.ordering.domain.models.order import OrderStatus
from marketplace.services.base import MAX_QUANTITY


class CartLineRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(help_text="Product UUID")
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY, help_text="Requested quantity")


class CheckoutRequestSerializer(serializers.Serializer):
    """Request body for checkout. Without ``lines`` the persisted cart is used."""

    lines = CartLineRequestSerializer(many=True, required=False, help_text="Explicit lines instead of the cart")


class CancelOrderRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class TransitionRequestSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, help_text="Target status")
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class OrderListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    page = serializers.IntegerField(min_value=1, default=1)
    page_size = serializers.IntegerField(min_value=1, max_value=100, default=20)


class AddToCartRequestSerializer(serializers.Serializer):
    """Request body for adding item to cart"""

    product_id = serializers.UUIDField(help_text="Product UUID to add")
    quantity = serializers.IntegerField(
        min_value=1, max_value=MAX_QUANTITY, default=1, help_text="Quantity to add (default: 1)"
    )


class UpdateCartItemRequestSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(
        min_value=0, max_value=MAX_QUANTITY, help_text="New quantity (0 removes the item)"
    )


class BoutiqueCreateRequestSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=NAME_MAX_LENGTH)
    template_id = serializers.IntegerField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    theme_color = serializers.RegexField(r"^#[0-9a-fA-F]{6}$", required=False)


class BoutiqueUpdateRequestSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=NAME_MAX_LENGTH, required=False)
    template_id = serializers.IntegerField(required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    theme_color = serializers.RegexField(r"^#[0-9a-fA-F]{6}$", required=False)


class StatisticsQuerySerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=list(PERIOD_DAYS), default=DEFAULT_PERIOD)

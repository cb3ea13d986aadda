from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    AddToCartRequestSerializer,
    CartResponseSerializer,
    ErrorResponseSerializer,
    UpdateCartItemRequestSerializer,
)
from marketplace.cart.domain.services import CartService

from .errors import error_response, validation_response


class CartViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> CartService:
        return container.cart_service()

    def _cart_response(self, result, http_status=status.HTTP_200_OK):
        if not result.ok:
            return error_response(result)
        return Response(CartResponseSerializer(result.value).data, status=http_status)

    @extend_schema(
        operation_id="cart_retrieve",
        summary="Get user's cart",
        description="""
        Lines are priced against current product data. A line asking for more
        than the current stock is flagged `unavailable`.
        """,
        responses={200: OpenApiResponse(response=CartResponseSerializer, description="Cart retrieved")},
        tags=["Marketplace - Cart"],
    )
    def retrieve(self, request):
        return self._cart_response(self.get_service().get_cart(request.user))

    @extend_schema(
        operation_id="cart_clear",
        summary="Clear cart",
        responses={204: OpenApiResponse(description="Cart cleared")},
        tags=["Marketplace - Cart"],
    )
    def clear(self, request):
        result = self.get_service().clear_cart(request.user)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="cart_add_item",
        summary="Add item to cart",
        request=AddToCartRequestSerializer,
        responses={
            201: OpenApiResponse(response=CartResponseSerializer, description="Item added (quantities merge)"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid quantity"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Cart"],
    )
    def add_item(self, request):
        serializer = AddToCartRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_response(serializer.errors)

        result = self.get_service().add_to_cart(
            request.user, str(serializer.validated_data["product_id"]), serializer.validated_data["quantity"]
        )
        return self._cart_response(result, status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="cart_update_item",
        summary="Update cart item quantity",
        request=UpdateCartItemRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Quantity updated (0 removes)"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    def update_item(self, request, product_id=None):
        serializer = UpdateCartItemRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_response(serializer.errors)

        result = self.get_service().update_quantity(request.user, str(product_id), serializer.validated_data["quantity"])
        return self._cart_response(result)

    @extend_schema(
        operation_id="cart_remove_item",
        summary="Remove item from cart",
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Item removed"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    def remove_item(self, request, product_id=None):
        return self._cart_response(self.get_service().remove_from_cart(request.user, str(product_id)))

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    CancelOrderRequestSerializer,
    CheckoutRequestSerializer,
    ErrorResponseSerializer,
    OrderListQuerySerializer,
    OrderListResponseSerializer,
    OrderSerializer,
    TransitionRequestSerializer,
)
from marketplace.cart.domain.services.snapshot_service import CartLine
from marketplace.ordering.domain.services import OrderService

from .errors import error_response, validation_response


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> OrderService:
        return container.order_service()

    @extend_schema(
        operation_id="orders_list",
        summary="List user's orders (as buyer)",
        description="""
        **What it receives:**
        - Optional status filter (query param)
        - Pagination parameters (page, page_size)

        **What it returns:**
        - Paginated list of orders where user is the buyer, newest first
        """,
        parameters=[
            OpenApiParameter(name="status", type=str, description="Filter by order status"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20, max 100)"),
        ],
        responses={
            200: OpenApiResponse(response=OrderListResponseSerializer, description="Orders retrieved successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filter or pagination"),
        },
        tags=["Marketplace - Orders"],
    )
    def list(self, request):
        query = OrderListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_response(query.errors)

        result = self.get_service().list_orders(request.user, **query.validated_data)
        if not result.ok:
            return error_response(result)

        order_page = result.value
        return Response(
            {
                "count": order_page.count,
                "page": order_page.page,
                "page_size": order_page.page_size,
                "has_next": order_page.has_next,
                "results": OrderSerializer(order_page.results, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        responses={
            200: OpenApiResponse(response=OrderSerializer, description="Order retrieved successfully"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order(pk, request.user)
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_create",
        summary="Checkout",
        description="""
        **What it receives:**
        - `lines` (optional): explicit `[{product_id, quantity}]`; without it the user's cart is used

        **What it returns:**
        - The created order in `pending` status with price-snapshotted lines
        - Stock is reserved for every line, or for none of them
        - The cart is cleared when it was the source of the order
        """,
        request=CheckoutRequestSerializer,
        responses={
            201: OpenApiResponse(response=OrderSerializer, description="Order created successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Cart empty or validation error"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Insufficient stock (line in context)"),
        },
        tags=["Marketplace - Orders"],
    )
    def create(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_response(serializer.errors)

        lines = serializer.validated_data.get("lines")
        if lines is not None:
            lines = [CartLine(str(line["product_id"]), line["quantity"]) for line in lines]

        result = self.get_service().checkout(request.user, lines)
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="orders_cancel",
        summary="Cancel order",
        description="""
        Only a `pending` order can be cancelled by its buyer. Reserved stock is
        returned in the same transaction.
        """,
        request=CancelOrderRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderSerializer, description="Order cancelled"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Order can no longer be cancelled"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        serializer = CancelOrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_response(serializer.errors)

        result = self.get_service().cancel_order(pk, request.user, serializer.validated_data["reason"])
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_transition",
        summary="Advance order status (staff)",
        description="""
        Fulfillment transitions: `pending -> validated -> shipped -> delivered`,
        or cancellation of a `validated` order. Out-of-order transitions are rejected.
        """,
        request=TransitionRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderSerializer, description="Status changed"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Transition not allowed"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated, IsAdminUser])
    def transition(self, request, pk=None):
        serializer = TransitionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_response(serializer.errors)

        result = self.get_service().advance_status(
            pk, serializer.validated_data["status"], actor=request.user, reason=serializer.validated_data["reason"]
        )
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)

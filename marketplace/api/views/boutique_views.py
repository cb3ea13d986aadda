from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    BoutiqueCreateRequestSerializer,
    BoutiqueSerializer,
    BoutiqueUpdateRequestSerializer,
    ErrorResponseSerializer,
    PeriodComparisonSerializer,
    SalesStatRecordSerializer,
    SellerStatisticsSerializer,
    StatisticsQuerySerializer,
    StatisticsResponseSerializer,
    TemplateEntrySerializer,
)
from marketplace.boutique.domain.services import BoutiqueService

from .errors import error_response, validation_response


class BoutiqueViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> BoutiqueService:
        return container.boutique_service()

    @extend_schema(
        operation_id="boutiques_create",
        summary="Create the seller's boutique",
        description="""
        **What it receives:**
        - `name`, `template_id`, optional `description` and `theme_color`

        **What it returns:**
        - The created boutique. The template must be unlocked by the seller's grade
          and a seller owns at most one boutique.
        """,
        request=BoutiqueCreateRequestSerializer,
        responses={
            201: OpenApiResponse(response=BoutiqueSerializer, description="Boutique created"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Template or seller not found"),
            409: OpenApiResponse(
                response=ErrorResponseSerializer, description="Grade insufficient or seller already owns a boutique"
            ),
        },
        tags=["Marketplace - Boutiques"],
    )
    def create(self, request):
        serializer = BoutiqueCreateRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_response(serializer.errors)

        result = self.get_service().create_boutique(request.user, **serializer.validated_data)
        if not result.ok:
            return error_response(result)
        return Response(BoutiqueSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="boutiques_retrieve",
        summary="Get boutique",
        responses={
            200: OpenApiResponse(response=BoutiqueSerializer, description="Boutique retrieved"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Boutique not found"),
        },
        tags=["Marketplace - Boutiques"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_boutique(pk)
        if not result.ok:
            return error_response(result)
        return Response(BoutiqueSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="boutiques_update",
        summary="Update boutique / change template",
        description="A template change is re-checked against the seller's current grade.",
        request=BoutiqueUpdateRequestSerializer,
        responses={
            200: OpenApiResponse(response=BoutiqueSerializer, description="Boutique updated"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Boutique or template not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Grade insufficient"),
        },
        tags=["Marketplace - Boutiques"],
    )
    def update(self, request, pk=None):
        serializer = BoutiqueUpdateRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_response(serializer.errors)

        result = self.get_service().update_boutique(pk, request.user, **serializer.validated_data)
        if not result.ok:
            return error_response(result)
        return Response(BoutiqueSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(operation_id="boutiques_partial_update", tags=["Marketplace - Boutiques"])
    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    @extend_schema(
        operation_id="boutiques_statistics",
        summary="Seller sales statistics",
        description="""
        Units sold, revenue, average order value and top products of the
        boutique's seller over the period. Only validated, shipped and delivered
        orders count. Visible to the owner and to staff.
        """,
        parameters=[
            OpenApiParameter(name="period", type=str, enum=["7d", "30d", "90d", "1y"], description="Default: 30d"),
        ],
        responses={
            200: OpenApiResponse(response=StatisticsResponseSerializer, description="Statistics computed"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown period"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Boutique not found"),
        },
        tags=["Marketplace - Boutiques"],
    )
    @action(detail=True, methods=["get"])
    def statistiques(self, request, pk=None):
        query = StatisticsQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_response(query.errors)
        period = query.validated_data["period"]

        statistics_service = container.statistics_service()
        result = statistics_service.boutique_statistics(pk, request.user, period)
        if not result.ok:
            return error_response(result)

        stats = result.value
        daily = statistics_service.daily_breakdown(stats.seller_id, period, now=stats.end)
        comparison = statistics_service.compare_periods(stats.seller_id, period, now=stats.end)

        data = dict(SellerStatisticsSerializer(stats).data)
        data["daily"] = SalesStatRecordSerializer(daily.value, many=True).data
        data["comparison"] = PeriodComparisonSerializer(comparison.value).data
        return Response(data, status=status.HTTP_200_OK)


class TemplateViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="templates_list",
        summary="Template catalogue",
        description="Every template with an `accessible` flag for the caller's seller grade.",
        responses={200: OpenApiResponse(response=TemplateEntrySerializer(many=True), description="Templates")},
        tags=["Marketplace - Boutiques"],
    )
    def list(self, request):
        result = container.boutique_service().list_templates(request.user)
        if not result.ok:
            return error_response(result)
        return Response(TemplateEntrySerializer(result.value, many=True).data, status=status.HTTP_200_OK)

# Marketplace API Serializers

from .request_serializers import (
    AddToCartRequestSerializer,
    BoutiqueCreateRequestSerializer,
    BoutiqueUpdateRequestSerializer,
    CancelOrderRequestSerializer,
    CheckoutRequestSerializer,
    OrderListQuerySerializer,
    StatisticsQuerySerializer,
    TransitionRequestSerializer,
    UpdateCartItemRequestSerializer,
)
from .response_serializers import (
    BoutiqueSerializer,
    CartResponseSerializer,
    ErrorResponseSerializer,
    OrderListResponseSerializer,
    OrderSerializer,
    PeriodComparisonSerializer,
    SalesStatRecordSerializer,
    SellerStatisticsSerializer,
    StatisticsResponseSerializer,
    TemplateEntrySerializer,
)


__all__ = [
    # Requests
    "AddToCartRequestSerializer",
    "BoutiqueCreateRequestSerializer",
    "BoutiqueUpdateRequestSerializer",
    "CancelOrderRequestSerializer",
    "CheckoutRequestSerializer",
    "OrderListQuerySerializer",
    "StatisticsQuerySerializer",
    "TransitionRequestSerializer",
    "UpdateCartItemRequestSerializer",
    # Responses
    "BoutiqueSerializer",
    "CartResponseSerializer",
    "ErrorResponseSerializer",
    "OrderListResponseSerializer",
    "OrderSerializer",
    "PeriodComparisonSerializer",
    "SalesStatRecordSerializer",
    "SellerStatisticsSerializer",
    "StatisticsResponseSerializer",
    "TemplateEntrySerializer",
]

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api.views import (
    BoutiqueViewSet,
    CartViewSet,
    OrderViewSet,
    TemplateViewSet,
    marketplace_prometheus_metrics,
)

# Create the main router
router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"boutiques", BoutiqueViewSet, basename="boutique")
router.register(r"templates", TemplateViewSet, basename="template")

app_name = "marketplace"

urlpatterns = [
    # Cart routes (manual routing: one cart per user, items keyed by product)
    path("cart/", CartViewSet.as_view({"get": "retrieve", "delete": "clear"}), name="cart"),
    path("cart/items/", CartViewSet.as_view({"post": "add_item"}), name="cart-items"),
    path(
        "cart/items/<uuid:product_id>/",
        CartViewSet.as_view({"patch": "update_item", "delete": "remove_item"}),
        name="cart-item-detail",
    ),
    # Prometheus metrics endpoint
    path("metrics/", marketplace_prometheus_metrics, name="marketplace-metrics"),
    # Main API routes
    path("", include(router.urls)),
]

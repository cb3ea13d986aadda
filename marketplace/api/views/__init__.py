from .boutique_views import BoutiqueViewSet, TemplateViewSet
from .cart_views import CartViewSet
from .order_views import OrderViewSet
from .prometheus_metrics import marketplace_prometheus_metrics

__all__ = [
    "BoutiqueViewSet",
    "CartViewSet",
    "OrderViewSet",
    "TemplateViewSet",
    "marketplace_prometheus_metrics",
]

from marketplace.analytics.domain.models import SalesStatistic
from marketplace.boutique.domain.models import Boutique, Seller, SellerGrade, Template
from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import Category, Product
from marketplace.ordering.domain.models import Order, OrderItem, OrderStatus


__all__ = [
    "Category",
    "Product",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "SellerGrade",
    "Seller",
    "Template",
    "Boutique",
    "SalesStatistic",
]

from .boutique import Boutique, Seller, SellerGrade, Template


__all__ = [
    "Boutique",
    "Seller",
    "SellerGrade",
    "Template",
]

"""
GradeService - Seller grade promotion

A grade is reached when the seller's all-time counted orders and revenue meet
its ``min_sales`` and ``min_revenue``. Promotion only ever moves a seller up.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.db import transaction

from marketplace.analytics.domain.services.statistics_service import StatisticsService
from marketplace.boutique.domain.models.boutique import Seller, SellerGrade
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromotionDecision:
    seller_id: int
    current_rank: Optional[int]
    eligible_rank: Optional[int]
    eligible_grade: Optional[str]
    order_count: int
    revenue: Decimal

    @property
    def promotes(self) -> bool:
        if self.eligible_rank is None:
            return False
        return self.current_rank is None or self.eligible_rank > self.current_rank


class GradeService(BaseService):
    def __init__(self, statistics_service: StatisticsService = None):
        super().__init__()
        self.statistics_service = statistics_service or StatisticsService()

    def evaluate_promotion(self, seller_id) -> ServiceResult[PromotionDecision]:
        """
        Find the highest grade the seller's ledger figures qualify for.
        """
        seller = Seller.objects.select_related("grade").filter(id=seller_id).first()
        if seller is None:
            return service_err(ErrorCodes.SELLER_NOT_FOUND, f"Seller {seller_id} not found")

        order_count, revenue = self.statistics_service.lifetime_totals(seller.id)
        eligible = (
            SellerGrade.objects.filter(min_sales__lte=order_count, min_revenue__lte=revenue).order_by("-rank").first()
        )
        return service_ok(
            PromotionDecision(
                seller_id=seller.id,
                current_rank=seller.grade.rank if seller.grade else None,
                eligible_rank=eligible.rank if eligible else None,
                eligible_grade=eligible.name if eligible else None,
                order_count=order_count,
                revenue=revenue,
            )
        )

    @BaseService.log_performance
    @transaction.atomic
    def promote_seller(self, seller_id) -> ServiceResult[PromotionDecision]:
        """
        Apply ``evaluate_promotion``. A seller already at or above the eligible
        grade keeps their grade.
        """
        Seller.objects.select_for_update().filter(id=seller_id).first()
        decision = self.evaluate_promotion(seller_id)
        if not decision.ok or not decision.value.promotes:
            return decision

        grade = SellerGrade.objects.get(rank=decision.value.eligible_rank)
        Seller.objects.filter(id=seller_id).update(grade=grade)
        self.logger.info(
            f"Promoted seller {seller_id}: rank {decision.value.current_rank} -> {grade.rank} ({grade.name})"
        )
        return decision

from .access_gate import LOWEST_GRADE_RANK, GradeRef, TemplateRef, can_use
from .boutique_service import BoutiqueRecord, BoutiqueService, TemplateEntry
from .grade_service import GradeService, PromotionDecision

__all__ = [
    "LOWEST_GRADE_RANK",
    "BoutiqueRecord",
    "BoutiqueService",
    "GradeRef",
    "GradeService",
    "PromotionDecision",
    "TemplateEntry",
    "TemplateRef",
    "can_use",
]

"""
Template access gate.

``can_use`` is a pure comparison over explicit grade and template values; it
never loads anything. Grades are ordinal: a higher rank unlocks every template
of a lower or equal rank.
"""

from dataclasses import dataclass
from typing import Optional

# Rank of the entry-level grade; templates at this rank are open to sellers without a grade
LOWEST_GRADE_RANK = 1


@dataclass(frozen=True)
class GradeRef:
    rank: int
    name: str = ""

    @classmethod
    def from_model(cls, grade) -> Optional["GradeRef"]:
        if grade is None:
            return None
        return cls(rank=grade.rank, name=grade.name)


@dataclass(frozen=True)
class TemplateRef:
    required_rank: int
    name: str = ""

    @classmethod
    def from_model(cls, template) -> "TemplateRef":
        return cls(required_rank=template.required_grade.rank, name=template.name)


def can_use(grade: Optional[GradeRef], template: TemplateRef) -> bool:
    """
    Return True when a seller of ``grade`` may use ``template``.

    An unassigned grade (None) only opens templates of the lowest required rank.
    """
    if grade is None:
        return template.required_rank <= LOWEST_GRADE_RANK
    return grade.rank >= template.required_rank

import pytest

from marketplace.boutique.domain.services.access_gate import LOWEST_GRADE_RANK, GradeRef, TemplateRef, can_use


@pytest.mark.unit
class TestAccessGate:
    def test_lower_grade_is_denied_higher_template(self):
        assert can_use(GradeRef(rank=1), TemplateRef(required_rank=2)) is False

    def test_grade_unlocks_equal_and_lower_templates(self):
        grade = GradeRef(rank=2)
        assert can_use(grade, TemplateRef(required_rank=1)) is True
        assert can_use(grade, TemplateRef(required_rank=2)) is True

    def test_comparison_is_ordinal_not_equality(self):
        assert can_use(GradeRef(rank=5), TemplateRef(required_rank=3)) is True

    def test_unassigned_grade_only_gets_entry_templates(self):
        assert can_use(None, TemplateRef(required_rank=LOWEST_GRADE_RANK)) is True
        assert can_use(None, TemplateRef(required_rank=LOWEST_GRADE_RANK + 1)) is False

    def test_refs_from_model_like_objects(self):
        class _Grade:
            rank = 3
            name = "Gold"

        class _Template:
            name = "Atelier"
            required_grade = _Grade()

        assert GradeRef.from_model(None) is None
        assert GradeRef.from_model(_Grade()) == GradeRef(rank=3, name="Gold")
        assert TemplateRef.from_model(_Template()) == TemplateRef(required_rank=3, name="Atelier")

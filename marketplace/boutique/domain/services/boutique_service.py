"""
BoutiqueService - Boutique creation and template changes

A seller owns at most one boutique, and the boutique's template must be allowed
for the seller's grade. The grade check runs every time the template link is
set, not only at creation.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from django.db import IntegrityError, transaction

from marketplace.boutique.domain.models.boutique import Boutique, Seller, Template
from marketplace.infra.observability.metrics import template_access_denials_total
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, parse_int_id, service_err, service_ok

from .access_gate import GradeRef, TemplateRef, can_use

logger = logging.getLogger(__name__)

THEME_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
NAME_MAX_LENGTH = 100


@dataclass(frozen=True)
class BoutiqueRecord:
    id: int
    seller_id: int
    owner_id: int
    name: str
    description: str
    theme_color: str
    template_id: int
    template_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TemplateEntry:
    id: int
    name: str
    description: str
    required_rank: int
    required_grade: str
    accessible: bool


class BoutiqueService(BaseService):
    """
    Service for boutiques and the template catalogue.
    """

    @BaseService.log_performance
    @transaction.atomic
    def create_boutique(
        self, user, name: str, template_id, description: str = "", theme_color: Optional[str] = None
    ) -> ServiceResult[BoutiqueRecord]:
        """
        Create the seller's boutique.

        Returns:
            ServiceResult with BoutiqueRecord, or SELLER_NOT_FOUND /
            TEMPLATE_NOT_FOUND / GRADE_INSUFFICIENT / ALREADY_OWNS_BOUTIQUE /
            VALIDATION_ERROR.
        """
        invalid = self._validate_display(name, theme_color)
        if invalid:
            return invalid

        # Lock the seller row so two concurrent creations for one seller serialize
        seller = Seller.objects.select_for_update().select_related("grade").filter(user=user).first()
        if seller is None:
            return service_err(ErrorCodes.SELLER_NOT_FOUND, "User has no seller profile")

        template = self._get_template(template_id)
        if template is None:
            return service_err(ErrorCodes.TEMPLATE_NOT_FOUND, f"Template {template_id} not found")

        if Boutique.objects.filter(seller=seller).exists():
            return service_err(ErrorCodes.ALREADY_OWNS_BOUTIQUE, "Seller already owns a boutique")

        denied = self._check_grade(seller, template)
        if denied:
            return denied

        fields = {"seller": seller, "template": template, "name": name.strip(), "description": description or ""}
        if theme_color:
            fields["theme_color"] = theme_color
        try:
            with transaction.atomic():
                boutique = Boutique.objects.create(**fields)
        except IntegrityError:
            return service_err(ErrorCodes.ALREADY_OWNS_BOUTIQUE, "Seller already owns a boutique")

        self.logger.info(f"Created boutique {boutique.id} for seller {seller.id} with template '{template.name}'")
        return service_ok(self.to_record(boutique))

    @BaseService.log_performance
    @transaction.atomic
    def update_boutique(
        self,
        boutique_id,
        user,
        template_id=None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        theme_color: Optional[str] = None,
    ) -> ServiceResult[BoutiqueRecord]:
        """
        Update display metadata and/or change the template.

        A template change is re-checked against the seller's current grade.
        """
        boutique_pk = parse_int_id(boutique_id)
        if boutique_pk is None:
            return service_err(ErrorCodes.BOUTIQUE_NOT_FOUND, f"Boutique {boutique_id} not found")
        boutique = (
            Boutique.objects.select_for_update()
            .select_related("seller__grade", "template__required_grade")
            .filter(id=boutique_pk)
            .first()
        )
        if boutique is None:
            return service_err(ErrorCodes.BOUTIQUE_NOT_FOUND, f"Boutique {boutique_id} not found")
        if boutique.seller.user_id != user.id:
            return service_err(ErrorCodes.NOT_BOUTIQUE_OWNER, "You do not own this boutique")

        if name is not None or theme_color is not None:
            invalid = self._validate_display(name if name is not None else boutique.name, theme_color)
            if invalid:
                return invalid

        update_fields = ["updated_at"]
        if template_id is not None and str(template_id) != str(boutique.template_id):
            template = self._get_template(template_id)
            if template is None:
                return service_err(ErrorCodes.TEMPLATE_NOT_FOUND, f"Template {template_id} not found")
            denied = self._check_grade(boutique.seller, template)
            if denied:
                return denied
            boutique.template = template
            update_fields.append("template")

        if name is not None:
            boutique.name = name.strip()
            update_fields.append("name")
        if description is not None:
            boutique.description = description
            update_fields.append("description")
        if theme_color is not None:
            boutique.theme_color = theme_color
            update_fields.append("theme_color")

        boutique.save(update_fields=update_fields)
        self.logger.info(f"Updated boutique {boutique.id}: {', '.join(update_fields[1:]) or 'no changes'}")
        return service_ok(self.to_record(boutique))

    def get_boutique(self, boutique_id) -> ServiceResult[BoutiqueRecord]:
        boutique_pk = parse_int_id(boutique_id)
        if boutique_pk is None:
            return service_err(ErrorCodes.BOUTIQUE_NOT_FOUND, f"Boutique {boutique_id} not found")
        boutique = Boutique.objects.select_related("seller", "template").filter(id=boutique_pk).first()
        if boutique is None:
            return service_err(ErrorCodes.BOUTIQUE_NOT_FOUND, f"Boutique {boutique_id} not found")
        return service_ok(self.to_record(boutique))

    def list_templates(self, user) -> ServiceResult[List[TemplateEntry]]:
        """
        List every template with an ``accessible`` flag for the user's grade.
        """
        seller = Seller.objects.select_related("grade").filter(user=user).first()
        grade = GradeRef.from_model(seller.grade) if seller else None

        entries = [
            TemplateEntry(
                id=template.id,
                name=template.name,
                description=template.description,
                required_rank=template.required_grade.rank,
                required_grade=template.required_grade.name,
                accessible=can_use(grade, TemplateRef.from_model(template)),
            )
            for template in Template.objects.select_related("required_grade")
        ]
        return service_ok(entries)

    def _get_template(self, template_id) -> Optional[Template]:
        template_pk = parse_int_id(template_id)
        if template_pk is None:
            return None
        return Template.objects.select_related("required_grade").filter(id=template_pk).first()

    def _check_grade(self, seller: Seller, template: Template) -> Optional[ServiceResult]:
        grade = GradeRef.from_model(seller.grade)
        required = TemplateRef.from_model(template)
        if can_use(grade, required):
            return None

        template_access_denials_total.inc()
        self.logger.info(
            f"Seller {seller.id} (rank {grade.rank if grade else None}) denied template "
            f"'{template.name}' (requires rank {required.required_rank})"
        )
        return service_err(
            ErrorCodes.GRADE_INSUFFICIENT,
            f"Template '{template.name}' requires grade rank {required.required_rank}",
            seller_rank=grade.rank if grade else None,
            required_rank=required.required_rank,
        )

    @staticmethod
    def _validate_display(name: Optional[str], theme_color: Optional[str]) -> Optional[ServiceResult]:
        if not name or not name.strip():
            return service_err(ErrorCodes.VALIDATION_ERROR, "Boutique name is required", field="name")
        if len(name.strip()) > NAME_MAX_LENGTH:
            return service_err(
                ErrorCodes.VALIDATION_ERROR, f"Boutique name exceeds {NAME_MAX_LENGTH} characters", field="name"
            )
        if theme_color and not THEME_COLOR_RE.match(theme_color):
            return service_err(ErrorCodes.VALIDATION_ERROR, "theme_color must look like #RRGGBB", field="theme_color")
        return None

    @staticmethod
    def to_record(boutique: Boutique) -> BoutiqueRecord:
        return BoutiqueRecord(
            id=boutique.id,
            seller_id=boutique.seller_id,
            owner_id=boutique.seller.user_id,
            name=boutique.name,
            description=boutique.description,
            theme_color=boutique.theme_color,
            template_id=boutique.template_id,
            template_name=boutique.template.name,
            is_active=boutique.is_active,
            created_at=boutique.created_at,
            updated_at=boutique.updated_at,
        )

"""Django ORM implementation of the back-template repository."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError

from modules.templates.models import BackTemplate
from modules.templates.repositories.interfaces import IBackTemplateRepository

logger = structlog.get_logger(__name__)


class BackTemplateDjangoRepository(IBackTemplateRepository):
    def get_by_id(self, id: str) -> Optional[BackTemplate]:
        try:
            return BackTemplate.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[BackTemplate]:
        queryset = BackTemplate.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def save(self, entity: BackTemplate) -> BackTemplate:
        entity.save()
        logger.info("template.saved", template_id=str(entity.id))
        return entity

    def delete(self, id: str) -> bool:
        try:
            deleted, _ = BackTemplate.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info("template.deleted", template_id=str(id))
        return bool(deleted)

    def existing_ids(self, ids: Iterable[UUID]) -> Set[UUID]:
        wanted = set(ids)
        if not wanted:
            return set()
        return set(
            BackTemplate.objects.filter(id__in=wanted).values_list("id", flat=True)
        )

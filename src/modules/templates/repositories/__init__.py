"""Back-template repositories package."""

from modules.templates.repositories.django_repository import BackTemplateDjangoRepository
from modules.templates.repositories.interfaces import IBackTemplateRepository

__all__ = ["BackTemplateDjangoRepository", "IBackTemplateRepository"]

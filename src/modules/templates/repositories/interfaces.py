"""Back-template repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Iterable, Set
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.templates.models import BackTemplate


class IBackTemplateRepository(IRepository["BackTemplate"]):
    @abstractmethod
    def existing_ids(self, ids: Iterable[UUID]) -> Set[UUID]:
        """Return the subset of *ids* that name a stored template."""

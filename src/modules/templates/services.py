"""Back-template catalog service.

Staff upload a template image (and optionally a thumbnail); the files
are written to the blob store first and the row stores their relative
paths.  Replacing or deleting a template removes the old files on a
best-effort basis: a failed file deletion is logged and never blocks
the catalog change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.db import transaction

from modules.templates.exceptions import BackTemplateNotFound
from modules.templates.models import TEMPLATE_FOLDER, BackTemplate

if TYPE_CHECKING:
    from modules.files.blob_store import IBlobStore
    from modules.templates.dtos import (
        CreateBackTemplateDTO,
        ImageUploadDTO,
        UpdateBackTemplateDTO,
    )
    from modules.templates.repositories.interfaces import IBackTemplateRepository

logger = structlog.get_logger(__name__)


class BackTemplateService:
    def __init__(
        self, repository: IBackTemplateRepository, blob_store: IBlobStore
    ) -> None:
        self._repo = repository
        self._blob_store = blob_store

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_templates(self) -> List[BackTemplate]:
        return self._repo.list()

    def get_template(self, template_id: Any) -> BackTemplate:
        """Raises ``BackTemplateNotFound`` when the template does not exist."""
        template = self._repo.get_by_id(str(template_id))
        if not template:
            raise BackTemplateNotFound(f"Back template {template_id} not found.")
        return template

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_template(
        self,
        dto: CreateBackTemplateDTO,
        image: ImageUploadDTO,
        thumbnail: Optional[ImageUploadDTO] = None,
    ) -> BackTemplate:
        template = BackTemplate(
            title=dto.title,
            description=dto.description,
            image_path=self._store(image),
            thumbnail_path=self._store(thumbnail) if thumbnail else "",
        )
        try:
            with transaction.atomic():
                template = self._repo.save(template)
        except Exception:
            self._discard(template.file_paths(), template_id=None)
            raise
        logger.info("template.created", template_id=str(template.id))
        return template

    def update_template(
        self,
        template_id: Any,
        dto: UpdateBackTemplateDTO,
        image: Optional[ImageUploadDTO] = None,
        thumbnail: Optional[ImageUploadDTO] = None,
    ) -> BackTemplate:
        """Update fields and replace files; old files are removed afterwards.

        Raises:
            BackTemplateNotFound: the template does not exist.
        """
        template = self.get_template(template_id)
        replaced: List[str] = []

        if dto.title is not None:
            template.title = dto.title
        if dto.description is not None:
            template.description = dto.description
        if image is not None:
            replaced.append(template.image_path)
            template.image_path = self._store(image)
        if thumbnail is not None:
            replaced.append(template.thumbnail_path)
            template.thumbnail_path = self._store(thumbnail)

        with transaction.atomic():
            template = self._repo.save(template)

        self._discard([path for path in replaced if path], template_id=template.id)
        logger.info("template.updated", template_id=str(template.id))
        return template

    def delete_template(self, template_id: Any) -> None:
        """Remove the template files, then the row.

        Orders that already reference the template keep its id.

        Raises:
            BackTemplateNotFound: the template does not exist.
        """
        template = self.get_template(template_id)
        self._discard(template.file_paths(), template_id=template.id)
        self._repo.delete(str(template.id))

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _store(self, upload: ImageUploadDTO) -> str:
        return self._blob_store.put(upload.content, TEMPLATE_FOLDER, upload.extension)

    def _discard(self, paths: List[str], template_id: Any) -> None:
        for path in paths:
            try:
                self._blob_store.delete(path)
            except Exception as exc:
                logger.warning(
                    "template.file_delete_failed",
                    template_id=str(template_id) if template_id else None,
                    path=path,
                    error=str(exc),
                )

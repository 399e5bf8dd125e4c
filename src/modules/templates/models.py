"""Back-side template catalog.

A TEMPLATE order item prints one of these images on its back.  Items keep
only the template id; the image files live in the blob store under
``TEMPLATE_FOLDER``.
"""

from __future__ import annotations

from typing import List

from django.db import models

from modules.core.models import BaseModel

TEMPLATE_FOLDER = "back-templates"


class BackTemplate(BaseModel):
    title: models.CharField = models.CharField(max_length=255)
    description: models.TextField = models.TextField(blank=True, default="")
    image_path: models.CharField = models.CharField(max_length=512)
    thumbnail_path: models.CharField = models.CharField(
        max_length=512, blank=True, default=""
    )

    class Meta:
        db_table = "back_templates"
        ordering = ["-created_at", "-id"]

    def file_paths(self) -> List[str]:
        return [path for path in (self.image_path, self.thumbnail_path) if path]

    def __str__(self) -> str:
        return self.title

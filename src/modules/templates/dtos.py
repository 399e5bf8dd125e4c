"""Back-template DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImageUploadDTO(BaseModel):
    """Raw bytes of an uploaded image and its file extension."""

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(min_length=1)
    extension: str = ""

    @field_validator("extension")
    @classmethod
    def strip_dot(cls, v: str) -> str:
        return v.lstrip(".").lower()


class CreateBackTemplateDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = ""


class UpdateBackTemplateDTO(BaseModel):
    """Partial update; ``None`` leaves the field unchanged."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None

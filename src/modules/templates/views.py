"""Back-template API views.

Browsing the catalog is public; uploading, editing and deleting
templates is reserved to staff.  Files arrive as multipart uploads.
"""

from __future__ import annotations

import posixpath
from typing import Optional

from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from config.container import build_template_service
from modules.templates.dtos import (
    CreateBackTemplateDTO,
    ImageUploadDTO,
    UpdateBackTemplateDTO,
)
from modules.templates.exceptions import BackTemplateNotFound
from modules.templates.serializers import (
    BackTemplateSerializer,
    CreateBackTemplateSerializer,
    UpdateBackTemplateSerializer,
)


def _upload(file) -> Optional[ImageUploadDTO]:
    if file is None:
        return None
    return ImageUploadDTO(
        content=file.read(), extension=posixpath.splitext(file.name or "")[1]
    )


def _not_found() -> Response:
    return Response(
        {"detail": "Back template not found."}, status=status.HTTP_404_NOT_FOUND
    )


class BackTemplateViewSet(ViewSet):
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_template_service()

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [AllowAny()]
        return [IsAdminUser()]

    def list(self, request: Request) -> Response:
        """GET /api/v1/back-templates/"""
        templates = self._service.list_templates()
        return Response(BackTemplateSerializer(templates, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/back-templates/{pk}/"""
        try:
            template = self._service.get_template(pk)
        except BackTemplateNotFound:
            return _not_found()
        return Response(BackTemplateSerializer(template).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/back-templates/ (multipart: title, description, image, thumbnail)"""
        payload = CreateBackTemplateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        template = self._service.create_template(
            CreateBackTemplateDTO(title=data["title"], description=data["description"]),
            image=_upload(data["image"]),
            thumbnail=_upload(data.get("thumbnail")),
        )
        return Response(
            BackTemplateSerializer(template).data, status=status.HTTP_201_CREATED
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/back-templates/{pk}/"""
        payload = UpdateBackTemplateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        try:
            template = self._service.update_template(
                pk,
                UpdateBackTemplateDTO(
                    title=data.get("title"), description=data.get("description")
                ),
                image=_upload(data.get("image")),
                thumbnail=_upload(data.get("thumbnail")),
            )
        except BackTemplateNotFound:
            return _not_found()
        return Response(BackTemplateSerializer(template).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/back-templates/{pk}/"""
        try:
            self._service.delete_template(pk)
        except BackTemplateNotFound:
            return _not_found()
        return Response(status=status.HTTP_204_NO_CONTENT)

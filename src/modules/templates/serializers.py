"""Back-template DRF serializers."""

from __future__ import annotations

from django.core.files.storage import default_storage
from rest_framework import serializers

from modules.templates.models import BackTemplate


class BackTemplateSerializer(serializers.ModelSerializer):
    image_url = serializers.SerializerMethodField()
    thumbnail_url = serializers.SerializerMethodField()

    class Meta:
        model = BackTemplate
        fields = [
            "id",
            "title",
            "description",
            "image_url",
            "thumbnail_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_image_url(self, obj: BackTemplate) -> str:
        return default_storage.url(obj.image_path)

    def get_thumbnail_url(self, obj: BackTemplate):
        if not obj.thumbnail_path:
            return None
        return default_storage.url(obj.thumbnail_path)


class CreateBackTemplateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    image = serializers.FileField()
    thumbnail = serializers.FileField(required=False)


class UpdateBackTemplateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    image = serializers.FileField(required=False)
    thumbnail = serializers.FileField(required=False)

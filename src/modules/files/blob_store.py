"""Blob storage for order artifacts (uploaded and processed images).

``IBlobStore`` is the narrow contract the order lifecycle depends on.
``DjangoStorageBlobStore`` implements it on top of Django's storage API,
so switching from the local ``MEDIA_ROOT`` to an object store is a
``STORAGES`` setting change.

Artifact references are storage-relative paths (``orders/ab12.png``).
Older rows may still hold public URLs (``/uploads/orders/ab12.png`` or an
absolute URL); ``to_relative_path`` folds all of those into the relative
form before any storage call.
"""

from __future__ import annotations

import posixpath
import uuid
from typing import Optional, Protocol
from urllib.parse import urlsplit

import structlog
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import Storage, default_storage

logger = structlog.get_logger(__name__)


class IBlobStore(Protocol):
    def put(self, content: bytes, folder: str, extension: str = "") -> str: ...

    def public_url(self, relative_path: str) -> str: ...

    def delete(self, relative_path: str) -> bool: ...


def to_relative_path(reference: Optional[str]) -> Optional[str]:
    """Normalize an artifact reference into a storage-relative path.

    Returns ``None`` for empty references.
    """
    if not reference:
        return None

    normalized = reference.replace("\\", "/")
    parts = urlsplit(normalized)
    if parts.scheme and parts.netloc:
        normalized = parts.path

    media_prefix = "/" + settings.MEDIA_URL.strip("/") + "/"
    if normalized.startswith(media_prefix):
        normalized = normalized[len(media_prefix) :]
    elif normalized.startswith(media_prefix[1:]):
        normalized = normalized[len(media_prefix) - 1 :]

    normalized = normalized.lstrip("/")
    return normalized or None


class DjangoStorageBlobStore:
    """``IBlobStore`` backed by a Django ``Storage`` (``default_storage``)."""

    def __init__(self, storage: Optional[Storage] = None) -> None:
        self._storage = storage or default_storage

    def put(self, content: bytes, folder: str, extension: str = "") -> str:
        suffix = f".{extension.lstrip('.')}" if extension else ""
        name = posixpath.join(folder.strip("/"), f"{uuid.uuid4().hex}{suffix}")
        saved = self._storage.save(name, ContentFile(content))
        logger.info("blob.stored", path=saved, size=len(content))
        return saved

    def public_url(self, relative_path: str) -> str:
        return self._storage.url(relative_path)

    def delete(self, relative_path: str) -> bool:
        """Delete *relative_path*; missing files and I/O errors are not fatal.

        Returns ``True`` only when a file was actually removed.
        """
        path = to_relative_path(relative_path)
        if path is None:
            return False
        log = logger.bind(path=path)
        try:
            if not self._storage.exists(path):
                log.info("blob.already_absent")
                return False
            self._storage.delete(path)
        except (OSError, ValueError) as exc:
            log.warning("blob.delete_failed", error=str(exc))
            return False
        log.info("blob.deleted")
        return True

"""Back-template domain exceptions."""

from __future__ import annotations


class BackTemplateNotFound(Exception):
    """The requested back template does not exist."""

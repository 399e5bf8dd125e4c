"""Back-template URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.templates.views import BackTemplateViewSet

router = SimpleRouter(trailing_slash=True)
router.register("back-templates", BackTemplateViewSet, basename="back-template")

urlpatterns = router.urls

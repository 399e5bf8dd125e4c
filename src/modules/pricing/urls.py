"""Pricing URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.pricing.views import PricingViewSet

router = DefaultRouter(trailing_slash=True)
router.register("pricing", PricingViewSet, basename="pricing")

urlpatterns = router.urls

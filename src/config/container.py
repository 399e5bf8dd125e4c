"""Composition root.

Builds the application services with their production collaborators.
Views, Celery tasks and management commands obtain services from here;
tests construct services directly with stubs.
"""

from datetime import timedelta

from django.conf import settings

from modules.files.blob_store import DjangoStorageBlobStore
from modules.notifications.notifier import CeleryOrderNotifier
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.orders.sweep import ExpirationSweep
from modules.payments.client import PayPalClient
from modules.payments.retry import RetryExecutor
from modules.payments.services import PaymentGateway
from modules.payments.token_cache import TokenCache
from modules.pricing.repositories import PricingDjangoRepository
from modules.pricing.services import PricingService
from modules.templates.repositories import BackTemplateDjangoRepository
from modules.templates.services import BackTemplateService


def build_pricing_service() -> PricingService:
    return PricingService(PricingDjangoRepository())


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        pricing_service=build_pricing_service(),
        blob_store=DjangoStorageBlobStore(),
        notifier=CeleryOrderNotifier(),
        template_repository=BackTemplateDjangoRepository(),
    )


def build_template_service() -> BackTemplateService:
    return BackTemplateService(BackTemplateDjangoRepository(), DjangoStorageBlobStore())


def build_expiration_sweep() -> ExpirationSweep:
    repository = OrderDjangoRepository()
    return ExpirationSweep(
        order_repository=repository,
        order_service=build_order_service(),
        max_age=timedelta(hours=settings.ORDER_EXPIRATION_HOURS),
    )


def build_payment_gateway() -> PaymentGateway:
    client = PayPalClient(
        base_url=settings.PAYPAL_BASE_URL,
        client_id=settings.PAYPAL_CLIENT_ID,
        client_secret=settings.PAYPAL_CLIENT_SECRET,
        timeout=settings.PAYPAL_TIMEOUT_SECONDS,
    )
    return PaymentGateway(
        order_repository=OrderDjangoRepository(),
        client=client,
        token_cache=TokenCache(),
        retry=RetryExecutor(
            attempts=settings.PAYPAL_RETRY_ATTEMPTS,
            base_delay=settings.PAYPAL_RETRY_BASE_DELAY,
        ),
        notifier=CeleryOrderNotifier(),
        currency=settings.PAYPAL_CURRENCY,
        return_url=settings.PAYPAL_RETURN_URL,
        cancel_url=settings.PAYPAL_CANCEL_URL,
        brand_name=settings.PAYPAL_BRAND_NAME,
        token_safety_margin=settings.PAYPAL_TOKEN_SAFETY_MARGIN,
        token_min_ttl=settings.PAYPAL_TOKEN_MIN_TTL,
    )

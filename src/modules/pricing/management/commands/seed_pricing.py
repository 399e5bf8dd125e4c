from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.pricing.models import DiscountTier
from modules.pricing.repositories.django_repository import PricingDjangoRepository

DEFAULT_TIERS = [
    (5, Decimal("10.00")),
    (10, Decimal("20.00")),
    (25, Decimal("30.00")),
]


class Command(BaseCommand):
    help = "Seed the unit price and a default discount table for development."

    def add_arguments(self, parser):
        parser.add_argument("--price", type=Decimal, default=Decimal("10.00"))

    def handle(self, *args, **options):
        repo = PricingDjangoRepository()
        price = repo.set_unit_price(options["price"])

        created = 0
        for min_quantity, percent in DEFAULT_TIERS:
            _, was_created = DiscountTier.objects.get_or_create(
                min_quantity=min_quantity,
                defaults={"discount_percent": percent},
            )
            created += int(was_created)

        self.stdout.write(
            self.style.SUCCESS(f"Seed completed: unit_price={price}, tiers={created}")
        )

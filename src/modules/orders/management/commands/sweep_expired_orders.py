from django.core.management.base import BaseCommand

from config.container import build_expiration_sweep


class Command(BaseCommand):
    help = "Delete unpaid orders older than ORDER_EXPIRATION_HOURS and their files"

    def handle(self, *args, **options):
        removed = build_expiration_sweep().run_cycle()
        self.stdout.write(self.style.SUCCESS(f"Removed {removed} expired order(s)."))

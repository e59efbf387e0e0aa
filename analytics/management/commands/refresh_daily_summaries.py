from analytics.services import refresh_daily_summaries
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Rebuild the daily summary cache from the full stock transaction history"

    def handle(self, *args, **options):
        count = refresh_daily_summaries()
        self.stdout.write(self.style.SUCCESS(f"Stored daily summaries for {count} days."))

"""
Management command to fetch a new snapshot from Traction Rec.

Usage:
    python manage.py tr_fetch_all
"""

from django.core.management.base import BaseCommand, CommandError

from traction_rec_import.exceptions import TractionRecError
from traction_rec_import.fetcher import TractionRecFetcher


class Command(BaseCommand):
    help = "Fetch programs, classes and sessions from Traction Rec"

    def handle(self, **options):
        fetcher = TractionRecFetcher()
        if not fetcher.is_enabled():
            raise CommandError("Fetcher is disabled!")

        self.stdout.write("Fetching Traction Rec data...")
        try:
            directory = fetcher.fetch()
        except TractionRecError as exc:
            raise CommandError(str(exc))
        self.stdout.write(self.style.SUCCESS("Fetched into %s" % directory))

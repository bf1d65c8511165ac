"""
Management command to fetch a fresh snapshot and queue a sync import of it.

Usage:
    python manage.py tr_queue_import_sync
"""

from django.core.management.base import BaseCommand
from kombu.exceptions import OperationalError

from traction_rec.logging import TractionRecLogger
from traction_rec_import.exceptions import TractionRecError
from traction_rec_import.fetcher import TractionRecFetcher
from traction_rec_import.importer import Importer

structured_logger = TractionRecLogger.get_logger(__name__)


class Command(BaseCommand):
    help = "Fetch from Traction Rec and queue a sync import"

    def handle(self, **options):
        fetcher = TractionRecFetcher()
        if not fetcher.is_enabled():
            self.stderr.write("Fetcher is disabled!")
            return

        self.stdout.write("Fetching Traction Rec data...")
        try:
            directory = fetcher.fetch()
            # OperationalError is raised when the broker cannot be reached
            Importer(fetcher.settings).queue_sync_import(directory)
        except (TractionRecError, OSError, OperationalError) as exc:
            structured_logger.error(
                "Queueing sync import failed.",
                event_code="queue_sync_failed",
                reason=str(exc),
                reason_code=exc.__class__.__name__,
            )
            self.stderr.write(str(exc))
            return

        self.stdout.write(self.style.SUCCESS("Sync import of %s queued" % directory))

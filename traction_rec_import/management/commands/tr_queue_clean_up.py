"""
Management command to queue a clean-up of backups and orphaned session times.

Usage:
    python manage.py tr_queue_clean_up
"""

from django.core.management.base import BaseCommand

from traction_rec_import.importer import Importer


class Command(BaseCommand):
    help = "Add a clean-up item to the import queue"

    def handle(self, **options):
        self.stdout.write("Queueing clean up...")
        Importer().queue_cleanup()
        self.stdout.write(self.style.SUCCESS("Clean up queued"))

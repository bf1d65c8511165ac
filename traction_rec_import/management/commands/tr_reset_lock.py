"""
Management command to recover from a crashed import: clears the import lock
and returns any migration task left running to idle.

Usage:
    python manage.py tr_reset_lock
"""

from django.core.management.base import BaseCommand

from traction_rec_import.importer import Importer


class Command(BaseCommand):
    help = "Reset the Traction Rec import lock and migration status"

    def handle(self, **options):
        self.stdout.write("Reset import status...")
        importer = Importer()
        importer.reset_lock()
        self.stdout.write(self.style.SUCCESS("Import lock released"))
        count = importer.reset_status()
        self.stdout.write(self.style.SUCCESS("%d migration tasks reset" % count))

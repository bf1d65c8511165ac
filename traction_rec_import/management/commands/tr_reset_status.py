"""
Management command to return migration tasks left running by a crashed import
to idle, without touching the import lock.

Usage:
    python manage.py tr_reset_status
"""

from django.core.management.base import BaseCommand

from traction_rec_import.importer import Importer


class Command(BaseCommand):
    help = "Reset Traction Rec migration tasks to idle"

    def handle(self, **options):
        count = Importer().reset_status()
        self.stdout.write(self.style.SUCCESS("%d migration tasks reset" % count))

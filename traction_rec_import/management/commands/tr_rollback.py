"""
Management command to roll back the Traction Rec migrations.

Usage:
    python manage.py tr_rollback
"""

from django.core.management.base import BaseCommand

from traction_rec_import.importer import Importer


class Command(BaseCommand):
    help = "Delete everything imported by the Traction Rec migrations"

    def handle(self, **options):
        self.stdout.write("Rolling back Traction Rec migrations...")
        if Importer().rollback():
            self.stdout.write(self.style.SUCCESS("Rollback done!"))
        else:
            self.stderr.write("Rollback failed, see the log")

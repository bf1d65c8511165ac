"""
Management command to delete every imported session.

Usage:
    python manage.py tr_session_flush
"""

from django.core.management.base import BaseCommand

from traction_rec_import.importer import Importer


class Command(BaseCommand):
    help = "Remove all sessions from the catalog"

    def handle(self, **options):
        self.stdout.write("Removing sessions...")
        deleted = Importer().flush_sessions()
        self.stdout.write(self.style.SUCCESS("Removed %d sessions" % deleted))

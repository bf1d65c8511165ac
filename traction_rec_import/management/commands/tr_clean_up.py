"""
Management command to remove old snapshot directories.

Usage:
    python manage.py tr_clean_up
"""

from django.core.management.base import BaseCommand

from traction_rec_import.cleaner import Cleaner


class Command(BaseCommand):
    help = "Keep only the newest Traction Rec JSON backups"

    def handle(self, *, verbosity, **options):
        self.stdout.write("Starting clean up...")
        deleted = Cleaner().clean_backup_files()
        if verbosity > 1:
            for path in deleted:
                self.stdout.write("Removed %s" % path)
        self.stdout.write(self.style.SUCCESS("Clean up finished!"))

"""
Management command to delete session times which no longer belong to a
session.

Usage:
    python manage.py tr_db_clean_up
    python manage.py tr_db_clean_up --limit 1000
"""

from django.core.management.base import BaseCommand, CommandError

from traction_rec_import.cleaner import Cleaner
from traction_rec_import.config import ORPHAN_CLEANUP_LIMIT


class Command(BaseCommand):
    help = "Delete orphaned session times"

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=ORPHAN_CLEANUP_LIMIT,
            help="Max number of rows to remove in one run (default: %(default)s)",
        )

    def handle(self, *, limit, **options):
        if limit < 1:
            raise CommandError("--limit must be a positive number, got %d" % limit)
        self.stdout.write("Starting database clean up...")
        deleted = Cleaner().clean_database(limit)
        self.stdout.write(
            self.style.SUCCESS(
                "Database clean up finished! Removed %d session times" % (deleted or 0)
            )
        )

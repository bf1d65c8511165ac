"""
Management command to import pending Traction Rec snapshot directories.

Usage:
    python manage.py tr_import
    python manage.py tr_import --sync
"""

from django.core.management.base import BaseCommand, CommandError

from traction_rec_import.importer import Importer


class Command(BaseCommand):
    help = "Import pending Traction Rec snapshot directories"

    def add_arguments(self, parser):
        parser.add_argument(
            "--sync",
            action="store_true",
            default=False,
            help="Delete catalog records which are not present in the snapshot",
        )

    def handle(self, *, sync, **options):
        self.stdout.write("Starting Traction Rec import")
        if not Importer().run_import(sync=sync):
            raise CommandError("Traction Rec import did not run, see the log")
        self.stdout.write(self.style.SUCCESS("Traction Rec import done!"))

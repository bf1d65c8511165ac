"""
Migration engines run snapshot directories into the catalog.

The importer only relies on the operations of ``MigrationEngine`` so a
deployment can swap in another implementation with
``TRACTION_REC["MIGRATION_ENGINE"]``.
"""

import os
from datetime import timedelta
from logging import getLogger

from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from traction_rec.logging import TractionRecLogger

from .config import (
    DEFAULT_MIGRATION_ENGINE,
    DEFAULT_STUCK_AFTER,
    MIGRATE_GROUP,
    traction_rec_setting,
)
from .exceptions import MigrationBusyError, SnapshotFormatError
from .mappings import SNAPSHOT_MIGRATIONS
from .models import MigrationTask

logger = getLogger(__name__)
structured_logger = TractionRecLogger.get_logger(__name__)


class MigrationEngine:
    def status(self, group):
        """
        Return a ``{task name: "idle" | "running" | "stuck"}`` mapping for
        every task in ``group``.
        """
        raise NotImplementedError

    def run(self, directory, sync=False, group=MIGRATE_GROUP):
        """
        Import one snapshot directory. With ``sync`` destination records
        missing from the snapshot are deleted.
        """
        raise NotImplementedError

    def rollback(self, group):
        raise NotImplementedError

    def reset_status(self, group):
        """
        Put every task of ``group`` that is not idle back to idle. Returns the
        number of tasks changed.
        """
        raise NotImplementedError


def get_migration_engine():
    engine_class = import_string(
        traction_rec_setting("MIGRATION_ENGINE", DEFAULT_MIGRATION_ENGINE)
    )
    return engine_class()


class JsonMigrationEngine(MigrationEngine):
    """
    Runs the snapshot migrations in ``mappings`` against a snapshot directory,
    tracking each one with a ``MigrationTask`` row.

    A task is claimed with a conditional update before it runs so two
    processes can never run the same migration at once, and it is always
    returned to idle afterwards with a message describing the result. The
    records of one migration are written in a single transaction.
    """

    def __init__(self, migrations=None, stuck_after=None):
        if migrations is None:
            migrations = [migration_class() for migration_class in SNAPSHOT_MIGRATIONS]
        self.migrations = sorted(migrations, key=lambda m: (m.weight, m.name))
        if stuck_after is None:
            stuck_after = traction_rec_setting(
                "MIGRATION_STUCK_AFTER", DEFAULT_STUCK_AFTER
            )
        self.stuck_after = timedelta(seconds=stuck_after)

    def get_migrations(self, group):
        return [migration for migration in self.migrations if migration.group == group]

    def get_task(self, migration):
        task, created = MigrationTask.objects.get_or_create(
            name=migration.name,
            defaults={"group": migration.group, "weight": migration.weight},
        )
        if created:
            logger.info("Registered migration task %s", task)
        return task

    def status(self, group):
        for migration in self.get_migrations(group):
            self.get_task(migration)

        stuck_before = timezone.now() - self.stuck_after
        return {
            task.name: str(task.reported_status(stuck_before))
            for task in MigrationTask.objects.filter(group=group)
        }

    def claim(self, migration):
        task = self.get_task(migration)
        if not task.claim():
            task.refresh_from_db()
            raise MigrationBusyError(
                "Migration %s is %s since %s"
                % (migration.name, task.status, task.last_started)
            )
        return task

    def run(self, directory, sync=False, group=MIGRATE_GROUP):
        if not os.path.isdir(directory):
            raise SnapshotFormatError("%s is not a directory" % directory)

        results = {}
        for migration in self.get_migrations(group):
            results[migration.name] = self.run_migration(migration, directory, sync)
        return results

    def run_migration(self, migration, directory, sync=False):
        task = self.claim(migration)
        migration_logger = structured_logger.bind(migration=task)

        processed = deleted = 0
        message = "Interrupted"
        try:
            records = migration.load_records(directory)
            if records is None:
                message = "Skipped: %s not found in %s" % (
                    migration.source_file,
                    directory,
                )
                migration_logger.info(
                    "Snapshot file not found, skipping migration.",
                    event_code="migration_source_missing",
                    snapshot_directory=directory,
                    source_file=migration.source_file,
                )
                return message

            with transaction.atomic():
                source_ids = set()
                for record in records:
                    migration.import_record(record)
                    source_ids.add(migration.source_id(record))
                    processed += 1
                if sync:
                    deleted = migration.delete_missing(source_ids)

            message = "Imported %d records, deleted %d" % (processed, deleted)
            migration_logger.info(
                "Migration finished.",
                event_code="migration_finished",
                snapshot_directory=directory,
                processed=processed,
                deleted=deleted,
                sync=sync,
            )
            return message
        except Exception as exc:
            # Records written before the failure were rolled back with the
            # transaction
            processed = deleted = 0
            message = "Failed: %s" % exc
            raise
        finally:
            task.finish(message, processed=processed, deleted=deleted)

    def rollback(self, group):
        results = {}
        for migration in reversed(self.get_migrations(group)):
            task = self.claim(migration)
            deleted = 0
            message = "Interrupted"
            try:
                with transaction.atomic():
                    deleted = migration.rollback()
                message = "Rolled back %d records" % deleted
                structured_logger.info(
                    "Migration rolled back.",
                    event_code="migration_rolled_back",
                    migration=task,
                    deleted=deleted,
                )
            except Exception as exc:
                message = "Rollback failed: %s" % exc
                raise
            finally:
                task.finish(message, processed=0, deleted=deleted)
            results[migration.name] = deleted
        return results

    def reset_status(self, group):
        reset = MigrationTask.objects.filter(group=group).exclude(
            status=MigrationTask.Status.IDLE
        )
        names = list(reset.values_list("name", flat=True))
        count = reset.update(
            status=MigrationTask.Status.IDLE,
            last_finished=timezone.now(),
            last_message="Reset by operator",
        )
        if count:
            structured_logger.warning(
                "Migration tasks reset to idle.",
                event_code="migration_status_reset",
                reason="A previous run did not finish.",
                reason_code="migration_interrupted",
                group=group,
                tasks=names,
            )
        return count

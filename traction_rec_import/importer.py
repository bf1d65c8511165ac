"""
Import orchestration.

``Importer.run_import`` is the whole pipeline: check the enable flag, take the
import lock, make sure no migration is running or stuck, then hand each new
snapshot directory to the migration engine. The lock is held through the
``import_lock`` context manager so every exit from the pipeline releases it.
"""

import os
from logging import getLogger

from catalog.models import Session
from traction_rec.logging import TractionRecLogger

from .config import SNAPSHOT_DIRECTORY_PATTERN, ImportSettings
from .engine import get_migration_engine
from .gate import check_migrations_status
from .lock import ImportLock, import_lock
from .models import SnapshotImport

logger = getLogger(__name__)
structured_logger = TractionRecLogger.get_logger(__name__)


class Importer:
    def __init__(self, import_settings=None, engine=None, lock=None):
        if import_settings is None:
            import_settings = ImportSettings.load()
        self.settings = import_settings
        self._engine = engine
        self.lock = lock or ImportLock()

    def __repr__(self):
        return "Importer(settings=%r, lock=%r)" % (self.settings, self.lock)

    @property
    def engine(self):
        if self._engine is None:
            self._engine = get_migration_engine()
        return self._engine

    def is_enabled(self):
        return bool(self.settings.import_enabled)

    def is_backup_enabled(self):
        return bool(self.settings.backup_enabled)

    def get_json_backup_limit(self):
        return self.settings.backup_limit

    def acquire_lock(self):
        return self.lock.acquire()

    def release_lock(self):
        self.lock.release()

    def reset_lock(self):
        holder = self.lock.holder()
        self.lock.release()
        structured_logger.info(
            "Import lock reset.",
            event_code="import_lock_reset",
            previous_holder=holder["holder"] if holder else None,
        )

    def reset_status(self):
        """
        Return the migration tasks left running by a crashed import to idle so
        the next import is not refused.
        """
        count = self.engine.reset_status(self.settings.migrate_group)
        structured_logger.info(
            "Migration status reset.",
            event_code="import_status_reset",
            group=self.settings.migrate_group,
            reset=count,
        )
        return count

    def check_migrations_status(self):
        return check_migrations_status(self.engine, self.settings.migrate_group)

    def get_json_directories_list(self):
        """
        Return the snapshot directories that have not been imported yet, oldest
        first.

        Only directories named like ``20240131235959`` count. Hidden
        directories, which the fetcher is still writing, are ignored.
        """
        root = self.settings.json_directory
        if not root or not os.path.isdir(root):
            logger.info("Snapshot directory %s does not exist", root)
            return []

        with os.scandir(root) as entries:
            names = sorted(
                entry.name
                for entry in entries
                if entry.is_dir() and SNAPSHOT_DIRECTORY_PATTERN.match(entry.name)
            )
        directories = [os.path.join(root, name) for name in names]

        completed = set(
            SnapshotImport.objects.filter(
                directory__in=directories, completed__isnull=False
            ).values_list("directory", flat=True)
        )
        return [directory for directory in directories if directory not in completed]

    def directory_import(self, directory, sync=False):
        """
        Run the migration engine on one snapshot directory, recording the
        outcome on its ``SnapshotImport``.

        Errors from the engine are recorded and re-raised.
        """
        snapshot, created = SnapshotImport.objects.get_or_create(directory=directory)
        snapshot.sync = sync
        snapshot.mark_started()

        structured_logger.info(
            "Snapshot import started.",
            event_code="snapshot_import_started",
            snapshot=snapshot,
            sync=sync,
        )

        try:
            self.engine.run(directory, sync=sync, group=self.settings.migrate_group)
        except Exception as exc:
            snapshot.mark_failed(exc)
            structured_logger.error(
                "Snapshot import failed.",
                event_code="snapshot_import_failed",
                reason=str(exc),
                reason_code=exc.__class__.__name__,
                snapshot=snapshot,
            )
            raise

        snapshot.mark_completed()
        structured_logger.info(
            "Snapshot import completed.",
            event_code="snapshot_import_completed",
            snapshot=snapshot,
        )
        return True

    def run_import(self, sync=False, directories=None):
        """
        Import every pending snapshot directory, or only ``directories`` when
        given.

        Returns True when at least one directory was handed to the migration
        engine, even if some of them failed, and False when the run was
        skipped.
        """
        if not self.is_enabled():
            structured_logger.info(
                "Traction Rec import is not enabled.",
                event_code="import_disabled",
            )
            return False

        with import_lock(self.lock) as acquired:
            if not acquired:
                holder = self.lock.holder()
                structured_logger.info(
                    "Can't run new import, another import process is already "
                    "in progress.",
                    event_code="import_lock_unavailable",
                    reason_code="lock_held",
                    lock_holder=holder["holder"] if holder else None,
                )
                return False

            if not self.check_migrations_status():
                structured_logger.info(
                    "One or more migrations are still running or stuck.",
                    event_code="import_migrations_busy",
                    reason_code="migrations_not_idle",
                    migration_group=self.settings.migrate_group,
                )
                return False

            if directories is None:
                directories = self.get_json_directories_list()
            if not directories:
                structured_logger.info(
                    "Nothing to import.", event_code="import_nothing_to_do"
                )
                return False

            structured_logger.info(
                "Starting Traction Rec import.",
                event_code="import_started",
                directory_count=len(directories),
                sync=sync,
            )
            failures = 0
            for directory in directories:
                try:
                    self.directory_import(directory, sync=sync)
                except Exception:
                    failures += 1
                    structured_logger.exception(
                        "Snapshot directory import failed, continuing with the "
                        "next directory.",
                        event_code="import_directory_failed",
                        snapshot_directory=directory,
                    )

            structured_logger.info(
                "Traction Rec import done.",
                event_code="import_finished",
                directory_count=len(directories),
                failures=failures,
            )
            return True

    def rollback(self):
        """
        Roll back every migration in the configured group. Errors are logged,
        never raised.
        """
        group = self.settings.migrate_group
        try:
            self.engine.rollback(group)
        except Exception as exc:
            structured_logger.error(
                "Rollback failed.",
                event_code="import_rollback_failed",
                reason=str(exc),
                reason_code=exc.__class__.__name__,
                migration_group=group,
            )
            return False

        structured_logger.info(
            "Rollback done.", event_code="import_rollback_finished", migration_group=group
        )
        return True

    def flush_sessions(self):
        """
        Delete every Session. Their schedules are detached and removed later by
        the database clean-up. Returns the number of sessions deleted.
        """
        sessions = Session.objects.all()
        count = sessions.count()
        if not count:
            return 0
        sessions.delete()
        structured_logger.info(
            "Sessions flushed.", event_code="sessions_flushed", deleted=count
        )
        return count

    def queue_cleanup(self):
        from .tasks import process_import_queue_item

        return process_import_queue_item.delay({"type": "cleanup"})

    def queue_sync_import(self, directory):
        from .tasks import process_import_queue_item

        return process_import_queue_item.delay({"type": "sync", "directory": directory})

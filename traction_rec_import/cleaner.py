"""
Housekeeping for the import: pruning old snapshot directories and deleting
session times that no longer belong to a session.
"""

import os
import shutil
from logging import getLogger

from django.db import DatabaseError

from catalog.models import SessionTime
from traction_rec.logging import TractionRecLogger
from traction_rec.middleware import is_batch_context

from .config import ORPHAN_BATCH_SIZE, ORPHAN_CLEANUP_LIMIT, ImportSettings

logger = getLogger(__name__)
structured_logger = TractionRecLogger.get_logger(__name__)


def _chunks(values, size):
    for i in range(0, len(values), size):
        yield values[i : i + size]


class Cleaner:
    def __init__(self, import_settings=None):
        if import_settings is None:
            import_settings = ImportSettings.load()
        self.settings = import_settings

    def clean_backup_files(self):
        return self.prune_backups(self.settings.backup_limit)

    def list_backups(self):
        """
        Return the entries of the backup directory, newest first.

        Entries are ordered by modification time, ties broken by name, and
        names starting with a dot are skipped.
        """
        root = self.settings.json_directory
        if not root or not os.path.isdir(root):
            return []

        with os.scandir(root) as it:
            entries = [
                (entry.stat(follow_symlinks=False).st_mtime, entry.name)
                for entry in it
                if not entry.name.startswith(".")
            ]
        entries.sort(reverse=True)
        return [os.path.join(root, name) for mtime, name in entries]

    def prune_backups(self, keep_limit):
        """
        Keep the ``keep_limit`` most recent entries of the backup directory and
        delete the rest.

        Does nothing unless backups are enabled and the process is not serving
        a web request. The first deletion failure is logged and ends the sweep.

        Returns the list of deleted paths.
        """
        if not self.settings.backup_enabled:
            logger.info("JSON backups are disabled, nothing to prune")
            return []

        if not is_batch_context():
            structured_logger.warning(
                "Backup pruning skipped.",
                event_code="backup_prune_skipped",
                reason="Backup pruning only runs outside of web requests.",
                reason_code="not_batch_context",
            )
            return []

        if keep_limit < 1:
            structured_logger.warning(
                "Backup pruning skipped.",
                event_code="backup_prune_skipped",
                reason="Invalid backup limit %r." % keep_limit,
                reason_code="invalid_backup_limit",
            )
            return []

        deleted = []
        for path in self.list_backups()[keep_limit:]:
            try:
                if os.path.isdir(path) and not os.path.islink(path):
                    shutil.rmtree(path)
                else:
                    os.remove(path)
            except OSError as exc:
                structured_logger.warning(
                    "Impossible to remove JSON files.",
                    event_code="backup_prune_failed",
                    reason=str(exc),
                    reason_code="delete_failed",
                    path=path,
                )
                break
            deleted.append(path)

        if deleted:
            structured_logger.info(
                "Old JSON backups removed.",
                event_code="backup_prune_finished",
                deleted=len(deleted),
                kept=keep_limit,
            )
        return deleted

    def clean_database(self, limit=ORPHAN_CLEANUP_LIMIT):
        return self.delete_orphaned_paragraphs(limit)

    def _delete_batch(self, ids):
        return SessionTime.objects.filter(pk__in=ids).delete()[0]

    def delete_orphaned_paragraphs(self, limit=ORPHAN_CLEANUP_LIMIT):
        """
        Delete up to ``limit`` session times whose parent fields are both
        empty, in batches of ``ORPHAN_BATCH_SIZE``.

        Returns False when there is nothing to delete, otherwise the number of
        rows deleted. A database error is logged and ends the pass; batches
        already deleted stay deleted.
        """
        if limit < 1:
            structured_logger.warning(
                "Session time clean up skipped.",
                event_code="orphan_cleanup_skipped",
                reason="Invalid clean up limit %r." % limit,
                reason_code="invalid_limit",
            )
            return False

        deleted = 0
        try:
            ids = list(
                SessionTime.objects.filter(
                    parent_id__isnull=True, parent_type__isnull=True
                )
                .order_by("pk")
                .values_list("pk", flat=True)[:limit]
            )
            if not ids:
                return False

            for batch in _chunks(ids, ORPHAN_BATCH_SIZE):
                deleted += self._delete_batch(batch)
        except DatabaseError as exc:
            structured_logger.error(
                "Session time clean up error.",
                event_code="orphan_cleanup_failed",
                reason=str(exc),
                reason_code="database_error",
                deleted=deleted,
            )
            return deleted

        structured_logger.info(
            "Orphaned session times removed.",
            event_code="orphan_cleanup_finished",
            deleted=deleted,
        )
        return deleted

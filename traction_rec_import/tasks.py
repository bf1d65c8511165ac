from logging import getLogger

from traction_rec.celery import app as celery_app
from traction_rec.logging import TractionRecLogger

from .cleaner import Cleaner
from .config import ORPHAN_CLEANUP_LIMIT, ImportSettings
from .fetcher import TractionRecFetcher
from .importer import Importer

logger = getLogger(__name__)
structured_logger = TractionRecLogger.get_logger(__name__)


@celery_app.task(acks_late=True)
def process_import_queue_item(data):
    """
    Consume one item from the import queue.

    ``{"type": "cleanup"}`` prunes old snapshots and deletes orphaned session
    times. ``{"type": "sync", "directory": ...}`` imports that directory with
    deletion of records missing from it. Anything else is logged and dropped.
    """
    item_type = (data or {}).get("type")
    import_settings = ImportSettings.load()

    if item_type == "cleanup":
        cleaner = Cleaner(import_settings)
        cleaner.clean_backup_files()
        cleaner.clean_database()
        return True

    if item_type == "sync":
        directory = data.get("directory")
        if not directory:
            structured_logger.warning(
                "Dropping sync queue item.",
                event_code="queue_item_dropped",
                reason="Sync queue item has no directory.",
                reason_code="missing_directory",
            )
            return False
        return Importer(import_settings).run_import(sync=True, directories=[directory])

    structured_logger.warning(
        "Dropping queue item.",
        event_code="queue_item_dropped",
        reason="Unknown queue item type %r." % item_type,
        reason_code="unknown_item_type",
    )
    return False


@celery_app.task(ignore_result=True)
def fetch_all():
    fetcher = TractionRecFetcher()
    if not fetcher.is_enabled():
        logger.info("Traction Rec fetcher is disabled")
        return None
    return fetcher.fetch()


@celery_app.task(ignore_result=True)
def run_import(sync=False):
    return Importer().run_import(sync=sync)


@celery_app.task(ignore_result=True)
def clean_up():
    return Cleaner().clean_backup_files()


@celery_app.task(ignore_result=True)
def db_clean_up(limit=ORPHAN_CLEANUP_LIMIT):
    return Cleaner().clean_database(limit)

from logging import getLogger

from traction_rec.logging import TractionRecLogger

logger = getLogger(__name__)
structured_logger = TractionRecLogger.get_logger(__name__)

IDLE = "idle"


def check_migrations_status(engine, group):
    """
    Report whether every migration task in ``group`` is idle.

    Returns False when any task is running or stuck, and also when the engine
    cannot report a status at all. Nothing is changed.
    """
    try:
        statuses = engine.status(group)
    except Exception as exc:
        structured_logger.error(
            "Unable to read migration status.",
            event_code="migration_status_failed",
            reason=str(exc),
            reason_code="migration_status_unavailable",
            migration_group=group,
        )
        return False

    busy = {name: status for name, status in statuses.items() if status != IDLE}
    if busy:
        for name, status in sorted(busy.items()):
            structured_logger.warning(
                "Migration task is not idle.",
                event_code="migration_not_idle",
                reason="Migration %s reports status %s." % (name, status),
                reason_code="migration_%s" % status,
                migration_name=name,
                migration_group=group,
            )
        return False

    logger.debug("All %d migration tasks in %s are idle", len(statuses), group)
    return True

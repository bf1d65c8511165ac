import logging

from celery import current_task


class CeleryTaskIDFilter(logging.Filter):
    """
    Adds ``task_id`` and ``task_name`` to every record so the log formats can
    show which Celery task emitted it. Records from management commands and
    other non-worker processes get empty strings.
    """

    def filter(self, record):
        task = current_task
        task_id = task.request.id if task else None
        if task_id:
            record.task_id = f"/[{task_id}]"
            record.task_name = task.name or ""
        else:
            record.task_id = ""
            record.task_name = ""
        return True

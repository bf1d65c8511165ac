"""
See the module-level docstring for implementation details
"""

from logging import getLogger

from django.db import models
from django.utils import timezone

logger = getLogger(__name__)


class TaskStatusModel(models.Model):
    created = models.DateTimeField(auto_now_add=True)
    modified = models.DateTimeField(auto_now=True)

    last_started = models.DateTimeField(
        help_text="Last time when a process started working on this record",
        null=True,
        blank=True,
    )
    completed = models.DateTimeField(
        help_text="Time when the work completed without error", null=True, blank=True
    )
    failed = models.DateTimeField(
        help_text="Time when the work failed due to an error", null=True, blank=True
    )

    status = models.TextField(
        help_text="Status message, if any, from the last run", blank=True, default=""
    )

    class Meta:
        abstract = True

    def mark_started(self, status="Started", do_save=True):
        self.last_started = timezone.now()
        self.completed = None
        self.failed = None
        self.status = status
        if do_save:
            self.save()

    def mark_completed(self, status="Completed", do_save=True):
        self.completed = timezone.now()
        self.failed = None
        self.status = status
        if do_save:
            self.save()

    def mark_failed(self, exc, do_save=True):
        self.failed = timezone.now()
        self.completed = None
        self.status = "Unhandled exception: {}".format(exc).strip()
        if do_save:
            self.save()


class SnapshotImport(TaskStatusModel):
    """
    Record of one snapshot directory's trip through the migration engine.

    A directory with ``completed`` set is not offered for import again; a
    failed one is retried on the next run.
    """

    directory = models.CharField(max_length=500, unique=True)
    sync = models.BooleanField(
        default=False,
        help_text="Whether the last run deleted catalog records missing "
        "from this snapshot",
    )

    class Meta:
        ordering = ["-created"]

    def __str__(self):
        return "SnapshotImport(directory=%s)" % self.directory


class MigrationTask(models.Model):
    """
    Status of one named migration in the default migration engine.

    Only ``idle`` and ``running`` are ever stored. A task that has been
    ``running`` for longer than the configured threshold is reported as
    ``stuck`` by ``reported_status``.
    """

    class Status(models.TextChoices):
        IDLE = "idle", "Idle"
        RUNNING = "running", "Running"
        STUCK = "stuck", "Stuck"

    name = models.CharField(max_length=100, unique=True)
    group = models.CharField(max_length=100, db_index=True)
    weight = models.IntegerField(default=0, help_text="Run order within the group")

    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.IDLE
    )
    last_started = models.DateTimeField(null=True, blank=True)
    last_finished = models.DateTimeField(null=True, blank=True)
    last_message = models.TextField(blank=True, default="")

    processed = models.PositiveIntegerField(
        default=0, help_text="Source records imported by the last run"
    )
    deleted = models.PositiveIntegerField(
        default=0, help_text="Destination records deleted by the last run"
    )

    class Meta:
        ordering = ["group", "weight", "name"]

    def __str__(self):
        return "MigrationTask(name=%s, group=%s)" % (self.name, self.group)

    def reported_status(self, stuck_before):
        if self.status == self.Status.RUNNING and (
            self.last_started is None or self.last_started < stuck_before
        ):
            return self.Status.STUCK
        return self.status

    def claim(self):
        """
        Atomically move the task from idle to running.

        Returns True if this call made the transition, False if the task was
        not idle.
        """
        started = timezone.now()
        claimed = (
            MigrationTask.objects.filter(pk=self.pk, status=self.Status.IDLE).update(
                status=self.Status.RUNNING, last_started=started
            )
            == 1
        )
        if claimed:
            self.status = self.Status.RUNNING
            self.last_started = started
        return claimed

    def finish(self, message, processed=0, deleted=0):
        self.status = self.Status.IDLE
        self.last_finished = timezone.now()
        self.last_message = message
        self.processed = processed
        self.deleted = deleted
        self.save(
            update_fields=[
                "status",
                "last_finished",
                "last_message",
                "processed",
                "deleted",
            ]
        )
        logger.debug("%s finished: %s", self, message)

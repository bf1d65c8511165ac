"""
Content records imported from Traction Rec.

Every imported model carries the Traction Rec record ``Id`` in ``source_id``
so re-running a migration updates rows instead of duplicating them.

Session schedules are stored as ``SessionTime`` rows, which are attached to
their parent through the loose ``parent_type`` / ``parent_id`` pair rather
than a foreign key. Replacing or deleting a session detaches its times (both
parent fields set to NULL) and the database clean-up job removes them later.
"""

from django.db import models


class ImportedModel(models.Model):
    source_id = models.CharField(
        max_length=18,
        unique=True,
        help_text="Traction Rec record Id this row was imported from",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    created = models.DateTimeField(auto_now_add=True)
    modified = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["title"]

    def __str__(self):
        return self.title


class Program(ImportedModel):
    available = models.BooleanField(default=True)


class ProgramCategory(ImportedModel):
    program = models.ForeignKey(
        Program,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="categories",
    )

    class Meta(ImportedModel.Meta):
        verbose_name_plural = "program categories"


class ProgramClass(ImportedModel):
    category = models.ForeignKey(
        ProgramCategory,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="classes",
    )

    class Meta(ImportedModel.Meta):
        verbose_name_plural = "program classes"


class Session(ImportedModel):
    PARENT_TYPE = "session"

    program_class = models.ForeignKey(
        ProgramClass,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="sessions",
    )
    location = models.CharField(max_length=255, blank=True, default="")
    capacity = models.PositiveIntegerField(null=True, blank=True)
    spots_available = models.IntegerField(null=True, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    registration_url = models.URLField(max_length=500, blank=True, default="")

    @property
    def times(self):
        return SessionTime.objects.filter(
            parent_type=self.PARENT_TYPE, parent_id=str(self.pk)
        )

    def detach_times(self):
        """
        Unlink every SessionTime of this session, leaving them as orphans.

        Returns the number of rows detached.
        """
        return self.times.update(parent_type=None, parent_id=None)

    def replace_times(self, times):
        """
        Detach the current schedule and attach new SessionTime rows built from
        ``times``, an iterable of dicts of SessionTime field values.
        """
        self.detach_times()
        return SessionTime.objects.bulk_create(
            [
                SessionTime(
                    parent_type=self.PARENT_TYPE,
                    parent_id=str(self.pk),
                    parent_field_name="times",
                    **values,
                )
                for values in times
            ]
        )


class SessionTime(models.Model):
    """
    A paragraph-like schedule fragment for a Session.
    """

    parent_type = models.CharField(max_length=32, null=True, blank=True)
    parent_id = models.CharField(max_length=32, null=True, blank=True)
    parent_field_name = models.CharField(max_length=32, blank=True, default="")

    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    days = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Semicolon separated week days, e.g. Monday;Wednesday",
    )

    created = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(
                fields=["parent_type", "parent_id"], name="sessiontime_parent_idx"
            )
        ]

    def __str__(self):
        return "SessionTime(parent=%s:%s, days=%s)" % (
            self.parent_type,
            self.parent_id,
            self.days,
        )

    @property
    def is_orphaned(self):
        return self.parent_id is None and self.parent_type is None

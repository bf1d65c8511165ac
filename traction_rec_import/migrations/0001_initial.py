from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MigrationTask",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=100, unique=True)),
                ("group", models.CharField(db_index=True, max_length=100)),
                (
                    "weight",
                    models.IntegerField(
                        default=0, help_text="Run order within the group"
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("idle", "Idle"),
                            ("running", "Running"),
                            ("stuck", "Stuck"),
                        ],
                        default="idle",
                        max_length=10,
                    ),
                ),
                ("last_started", models.DateTimeField(blank=True, null=True)),
                ("last_finished", models.DateTimeField(blank=True, null=True)),
                ("last_message", models.TextField(blank=True, default="")),
                (
                    "processed",
                    models.PositiveIntegerField(
                        default=0, help_text="Source records imported by the last run"
                    ),
                ),
                (
                    "deleted",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Destination records deleted by the last run",
                    ),
                ),
            ],
            options={"ordering": ["group", "weight", "name"]},
        ),
        migrations.CreateModel(
            name="SnapshotImport",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("modified", models.DateTimeField(auto_now=True)),
                (
                    "last_started",
                    models.DateTimeField(
                        blank=True,
                        help_text="Last time when a process started working on this record",
                        null=True,
                    ),
                ),
                (
                    "completed",
                    models.DateTimeField(
                        blank=True,
                        help_text="Time when the work completed without error",
                        null=True,
                    ),
                ),
                (
                    "failed",
                    models.DateTimeField(
                        blank=True,
                        help_text="Time when the work failed due to an error",
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Status message, if any, from the last run",
                    ),
                ),
                ("directory", models.CharField(max_length=500, unique=True)),
                (
                    "sync",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the last run deleted catalog records "
                        "missing from this snapshot",
                    ),
                ),
            ],
            options={"ordering": ["-created"]},
        ),
    ]

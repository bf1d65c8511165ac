import django.db.models.deletion
from django.db import migrations, models


def imported_fields():
    return [
        (
            "id",
            models.AutoField(
                auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
            ),
        ),
        (
            "source_id",
            models.CharField(
                help_text="Traction Rec record Id this row was imported from",
                max_length=18,
                unique=True,
            ),
        ),
        ("title", models.CharField(max_length=255)),
        ("description", models.TextField(blank=True, default="")),
        ("created", models.DateTimeField(auto_now_add=True)),
        ("modified", models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Program",
            fields=imported_fields()
            + [("available", models.BooleanField(default=True))],
            options={"ordering": ["title"], "abstract": False},
        ),
        migrations.CreateModel(
            name="ProgramCategory",
            fields=imported_fields()
            + [
                (
                    "program",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="categories",
                        to="catalog.program",
                    ),
                ),
            ],
            options={
                "ordering": ["title"],
                "abstract": False,
                "verbose_name_plural": "program categories",
            },
        ),
        migrations.CreateModel(
            name="ProgramClass",
            fields=imported_fields()
            + [
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="classes",
                        to="catalog.programcategory",
                    ),
                ),
            ],
            options={
                "ordering": ["title"],
                "abstract": False,
                "verbose_name_plural": "program classes",
            },
        ),
        migrations.CreateModel(
            name="Session",
            fields=imported_fields()
            + [
                (
                    "location",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("capacity", models.PositiveIntegerField(blank=True, null=True)),
                ("spots_available", models.IntegerField(blank=True, null=True)),
                (
                    "price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True
                    ),
                ),
                (
                    "registration_url",
                    models.URLField(blank=True, default="", max_length=500),
                ),
                (
                    "program_class",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sessions",
                        to="catalog.programclass",
                    ),
                ),
            ],
            options={"ordering": ["title"], "abstract": False},
        ),
        migrations.CreateModel(
            name="SessionTime",
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
                (
                    "parent_type",
                    models.CharField(blank=True, max_length=32, null=True),
                ),
                ("parent_id", models.CharField(blank=True, max_length=32, null=True)),
                (
                    "parent_field_name",
                    models.CharField(blank=True, default="", max_length=32),
                ),
                ("start_date", models.DateField(blank=True, null=True)),
                ("end_date", models.DateField(blank=True, null=True)),
                ("start_time", models.TimeField(blank=True, null=True)),
                ("end_time", models.TimeField(blank=True, null=True)),
                (
                    "days",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Semicolon separated week days, e.g. Monday;Wednesday",
                        max_length=100,
                    ),
                ),
                ("created", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["parent_type", "parent_id"],
                        name="sessiontime_parent_idx",
                    )
                ],
            },
        ),
    ]

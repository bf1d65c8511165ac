from django.db import migrations


def populate_configuration(apps, schema_editor):
    Configuration = apps.get_model("configuration", "Configuration")

    initial_data = [
        {
            "key": "traction_rec_import_enabled",
            "data_type": "boolean",
            "value": "false",
            "description": "Run the Traction Rec import when the import command or schedule fires.",
        },
        {
            "key": "traction_rec_fetcher_enabled",
            "data_type": "boolean",
            "value": "false",
            "description": "Fetch new JSON snapshots from Traction Rec.",
        },
        {
            "key": "traction_rec_backup_enabled",
            "data_type": "boolean",
            "value": "true",
            "description": "Keep imported JSON snapshots and prune them down to the backup limit during clean-up.",
        },
        {
            "key": "traction_rec_backup_limit",
            "data_type": "number",
            "value": "15",
            "description": "Number of most recent JSON snapshots kept by the clean-up job.",
        },
        {
            "key": "traction_rec_migrate_group",
            "data_type": "text",
            "value": "traction_rec_import",
            "description": "Migration group checked, run and rolled back by the import.",
        },
    ]

    for entry in initial_data:
        Configuration.objects.update_or_create(key=entry["key"], defaults=entry)


def revert_populate_configuration(apps, schema_editor):
    Configuration = apps.get_model("configuration", "Configuration")
    Configuration.objects.filter(key__startswith="traction_rec_").delete()


class Migration(migrations.Migration):

    dependencies = [
        ("configuration", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(populate_configuration, revert_populate_configuration),
    ]

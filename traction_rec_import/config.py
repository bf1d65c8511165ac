"""
Traction Rec import configuration
"""

import re

from django.conf import settings

from configuration.utils import configuration_value

MIGRATE_GROUP = "traction_rec_import"

IMPORT_LOCK_KEY = "traction_rec_import_lock"
IMPORT_LOCK_CACHE_ALIAS = "import_lock"

SNAPSHOT_DIRECTORY_FORMAT = "%Y%m%d%H%M%S"
SNAPSHOT_DIRECTORY_PATTERN = re.compile(r"^\d{14}$")

DEFAULT_BACKUP_LIMIT = 15
ORPHAN_CLEANUP_LIMIT = 5000
ORPHAN_BATCH_SIZE = 50

DEFAULT_MIGRATION_ENGINE = "traction_rec_import.engine.JsonMigrationEngine"
DEFAULT_TOKEN_PROVIDER = "traction_rec_import.client.settings_token_provider"
DEFAULT_STUCK_AFTER = 60 * 60 * 3


def traction_rec_setting(name, default=None):
    return getattr(settings, "TRACTION_REC", {}).get(name, default)


class ImportSettings:
    """
    The tunable values one import, fetch or clean-up run works with.

    Built once at the start of a run, usually through ``load()``, and handed
    to the Importer, Cleaner and fetcher so a run never sees a setting change
    halfway through.
    """

    def __init__(
        self,
        *,
        import_enabled=False,
        fetcher_enabled=False,
        backup_enabled=True,
        backup_limit=DEFAULT_BACKUP_LIMIT,
        migrate_group=MIGRATE_GROUP,
        json_directory=None,
    ):
        self.import_enabled = import_enabled
        self.fetcher_enabled = fetcher_enabled
        self.backup_enabled = backup_enabled
        self.backup_limit = backup_limit
        self.migrate_group = migrate_group
        if json_directory is None:
            json_directory = traction_rec_setting("JSON_DIRECTORY")
        self.json_directory = json_directory

    def __repr__(self):
        return (
            "ImportSettings(import_enabled=%s, fetcher_enabled=%s, "
            "backup_enabled=%s, backup_limit=%s, migrate_group=%s, "
            "json_directory=%s)"
            % (
                self.import_enabled,
                self.fetcher_enabled,
                self.backup_enabled,
                self.backup_limit,
                self.migrate_group,
                self.json_directory,
            )
        )

    @classmethod
    def load(cls):
        """
        Read the current values from the configuration app, falling back to
        the defaults above for keys that have not been created.
        """
        return cls(
            import_enabled=bool(
                configuration_value("traction_rec_import_enabled", default=False)
            ),
            fetcher_enabled=bool(
                configuration_value("traction_rec_fetcher_enabled", default=False)
            ),
            backup_enabled=bool(
                configuration_value("traction_rec_backup_enabled", default=True)
            ),
            backup_limit=int(
                configuration_value(
                    "traction_rec_backup_limit", default=DEFAULT_BACKUP_LIMIT
                )
            ),
            migrate_group=configuration_value(
                "traction_rec_migrate_group", default=MIGRATE_GROUP
            )
            or MIGRATE_GROUP,
        )

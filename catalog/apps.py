from django.apps.config import AppConfig


class CatalogConfig(AppConfig):
    name = "catalog"
    default_auto_field = "django.db.models.AutoField"

    def ready(self):
        from . import signals  # NOQA

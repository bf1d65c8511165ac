from django.apps.config import AppConfig


class TractionRecImportConfig(AppConfig):
    name = "traction_rec_import"
    verbose_name = "Traction Rec import"
    default_auto_field = "django.db.models.AutoField"

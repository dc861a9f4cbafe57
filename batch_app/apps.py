from django.apps import AppConfig


class BatchAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "batch_app"
    verbose_name = "Batches"

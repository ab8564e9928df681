from django.apps import AppConfig


class AppStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "app_store"
    verbose_name = "App Store"

from django.apps import AppConfig


class EventTypesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "event_types"
    verbose_name = "Event Types"

from django.apps import AppConfig  # type: ignore


class StudiosConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.studios"
    label = "studios"

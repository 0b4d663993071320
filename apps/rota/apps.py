from django.apps import AppConfig


class RotaConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.rota"
    label = "rota"

from django.apps import AppConfig


class MarketplaceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.marketplace"
    label = "marketplace"
    verbose_name = "Shift Marketplace"

    def ready(self):
        from apps.marketplace import signals  # noqa: F401

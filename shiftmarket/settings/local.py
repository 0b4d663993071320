"""Local development settings for ShiftMarket."""

from .base import *  # noqa: F401, F403

DEBUG = True
ALLOWED_HOSTS = ["*"]

# Use console email backend so notifications are visible in logs without SMTP
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# No Redis needed for a single runserver process
CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}

LOGGING["root"]["level"] = "DEBUG"  # noqa: F405

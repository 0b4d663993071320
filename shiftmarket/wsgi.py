"""WSGI configuration for ShiftMarket (HTTP only; WebSockets go through asgi.py)."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shiftmarket.settings.local")

application = get_wsgi_application()

"""WebSocket URL routing for ShiftMarket Channels consumers."""

from django.urls import re_path

from core.consumers import NotificationConsumer

websocket_urlpatterns = [
    # Personal notification stream for each user
    re_path(r"ws/notifications/$", NotificationConsumer.as_asgi()),
]

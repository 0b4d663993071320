"""
WebSocket consumers for ShiftMarket's real-time features.

NotificationConsumer delivers each user's marketplace notifications as they
are pushed by the notifications.push_notification Celery task.

Channel group naming convention:
  - user_{user_id}: personal notification stream

Security: anonymous connections are closed immediately with code 4001.
"""

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    Personal WebSocket channel for a specific authenticated user.

    Delivers real-time marketplace events to the user's private stream:
      - Swap proposals addressed to them
      - Claims on their open requests
      - Approvals, rejections and cancellations

    URL: /ws/notifications/
    Group: user_{user_id}
    """

    group_name = None

    async def connect(self) -> None:
        """Accept connection after verifying authentication."""
        self.user = self.scope["user"]

        if not self.user.is_authenticated:
            logger.warning("Unauthenticated WebSocket connection attempt rejected.")
            await self.close(code=4001)
            return

        self.group_name = f"user_{self.user.pk}"
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        logger.info("User %d connected to the notification stream.", self.user.pk)

    async def disconnect(self, close_code: int) -> None:
        """Leave the personal notification group on disconnect."""
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data: str = None, bytes_data: bytes = None) -> None:
        """
        Handle client-to-server messages.

        Currently supports:
          - mark_read: mark a notification as read
        """
        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            logger.warning("Invalid JSON received from user %d", self.user.pk)
            return

        if isinstance(data, dict) and data.get("type") == "mark_read":
            notification_id = data.get("notification_id")
            if notification_id:
                await self._mark_notification_read(notification_id)

    async def notification(self, event: dict) -> None:
        """
        Forward a notification event to the connected client.

        Args:
            event: The notification event dict sent via group_send.
        """
        await self.send(text_data=json.dumps({
            "type": "notification",
            "notification_id": event["notification_id"],
            "notification_type": event["notification_type"],
            "title": event["title"],
            "body": event["body"],
            "data": event.get("data", {}),
        }))

    @database_sync_to_async
    def _mark_notification_read(self, notification_id: int) -> None:
        """
        Mark a notification as read if it belongs to this user.

        Args:
            notification_id: The PK of the notification to mark as read.
        """
        from apps.notifications.models import Notification

        Notification.objects.for_recipient(self.user.pk).filter(pk=notification_id).mark_read()

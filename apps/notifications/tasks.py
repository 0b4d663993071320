"""
Celery tasks for ShiftMarket notifications.

Tasks:
  push_notification  — sends one persisted notification to the recipient's
                       WebSocket group (user_{id}) over the channel layer.

Routed to the "notifications" queue by CELERY_TASK_ROUTES (see settings/base.py).
The task is idempotent: re-pushing a notification only re-sends the same payload.
"""

import logging

from asgiref.sync import async_to_sync
from celery import shared_task
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


@shared_task(name="notifications.push_notification")
def push_notification(notification_id: int) -> dict:
    """
    Push a notification to its recipient's live connections.

    Args:
        notification_id: PK of the Notification to deliver.

    Returns:
        Dict with the delivery outcome.
    """
    from apps.notifications.models import Notification

    notification = Notification.objects.filter(pk=notification_id).first()
    if notification is None:
        logger.warning("Notification %d vanished before it could be pushed.", notification_id)
        return {"pushed": False}

    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning("No channel layer configured; notification %d not pushed.", notification_id)
        return {"pushed": False}

    async_to_sync(channel_layer.group_send)(
        f"user_{notification.recipient_id}",
        {
            "type": "notification",
            "notification_id": notification.pk,
            "notification_type": notification.notification_type,
            "title": notification.title,
            "body": notification.body,
            "data": notification.data,
        },
    )
    logger.info("Pushed notification %d to user %d.", notification.pk, notification.recipient_id)
    return {"pushed": True}

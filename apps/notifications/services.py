"""
Notification service.

notify() is the single entry point for creating notifications. The row is
written in the caller's transaction; the WebSocket push is queued only once
that transaction commits, so a rolled-back transition never reaches a client.
"""

import logging

from django.db import transaction

from apps.notifications.models import Notification

logger = logging.getLogger(__name__)


def notify(recipient_id: int, notification_type: str, title: str, body: str, data: dict = None) -> Notification:
    """
    Persist a notification and schedule its real-time push.

    Args:
        recipient_id: PK of the user to notify.
        notification_type: One of Notification.Type.
        title: Short headline.
        body: Human-readable message.
        data: Context for linking back to the source object.

    Returns:
        The created Notification.
    """
    from apps.notifications.tasks import push_notification

    notification = Notification.objects.create(
        recipient_id=recipient_id,
        notification_type=notification_type,
        title=title,
        body=body,
        data=data or {},
    )
    transaction.on_commit(lambda: push_notification.delay(notification.pk))
    logger.debug("Queued %s notification %d for user %d.", notification_type, notification.pk, recipient_id)
    return notification

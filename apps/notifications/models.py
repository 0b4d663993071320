"""
Notifications models for ShiftMarket.

All user-facing notifications are persisted here. Real-time delivery happens
via WebSocket (Django Channels) after the creating transaction commits.

Notification types map to marketplace events; the type tells the client
which request view to open.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class NotificationQuerySet(models.QuerySet):
    """Inbox filters shared by the HTTP views and the WebSocket consumer."""

    def for_recipient(self, user_id: int):
        return self.filter(recipient_id=user_id)

    def unread(self):
        return self.filter(is_read=False)

    def for_request(self, request_id: int):
        """Notifications that link back to one exchange request."""
        return self.filter(data__request_id=request_id)

    def mark_read(self) -> int:
        """Mark every unread row in the queryset read; returns the number updated."""
        return self.unread().update(is_read=True, read_at=timezone.now())


class Notification(models.Model):
    """
    A persisted notification for a specific user.

    Notifications are created by service functions (never directly by views)
    and delivered through two channels:
      1. In-app: stored here, listed by the notifications API
      2. Push: sent over the user's WebSocket group once the transaction commits

    The `data` JSON field stores context for linking back to the request
    (e.g. request_id).
    """

    class Type(models.TextChoices):
        EXCHANGE_PROPOSED = "exchange_proposed", _("Swap Proposed to You")
        EXCHANGE_CLAIMED = "exchange_claimed", _("Your Shift Was Claimed")
        EXCHANGE_APPROVED = "exchange_approved", _("Exchange Approved")
        EXCHANGE_REJECTED = "exchange_rejected", _("Exchange Rejected")
        EXCHANGE_CANCELLED = "exchange_cancelled", _("Exchange Cancelled")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    notification_type = models.CharField(max_length=30, choices=Type.choices)

    title = models.CharField(max_length=200)
    body = models.TextField()

    # Context data for linking to the relevant object
    data = models.JSONField(default=dict, blank=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx"),
            models.Index(fields=["recipient", "-created_at"], name="notif_recipient_created_idx"),
        ]

    def __str__(self) -> str:
        """Return a brief description of the notification."""
        return f"[{self.get_notification_type_display()}] → {self.recipient.get_short_name()}"

    def mark_read(self) -> None:
        """Mark this notification as read and record the timestamp."""
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=["is_read", "read_at"])

    def as_dict(self) -> dict:
        """Return the JSON representation used by the API and the push channel."""
        return {
            "id": self.pk,
            "notification_type": self.notification_type,
            "title": self.title,
            "body": self.body,
            "data": self.data,
            "is_read": self.is_read,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

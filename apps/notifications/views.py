"""
Notifications views for ShiftMarket.

View inventory:
  NotificationListView → GET: the current user's latest notifications (?unread=1, ?request_id=)
  MarkReadView         → POST: mark one or all notifications read
"""

import json
import logging

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views import View

from apps.notifications.models import Notification
from core.permissions import ApiLoginRequiredMixin

logger = logging.getLogger(__name__)


def _bad_payload(message: str) -> JsonResponse:
    return JsonResponse({"error": message, "code": "BAD_PAYLOAD"}, status=400)


class NotificationListView(ApiLoginRequiredMixin, View):
    """Notification inbox for the current user, newest first."""

    def get(self, request: HttpRequest) -> JsonResponse:
        inbox = Notification.objects.for_recipient(request.user.pk)
        unread_count = inbox.unread().count()

        qs = inbox
        if request.GET.get("unread") in ("1", "true"):
            qs = qs.unread()
        request_id = request.GET.get("request_id")
        if request_id:
            try:
                qs = qs.for_request(int(request_id))
            except ValueError:
                return _bad_payload("request_id must be an integer")

        limit = settings.NOTIFICATIONS_PAGE_SIZE
        return JsonResponse({
            "results": [n.as_dict() for n in qs.order_by("-created_at", "-pk")[:limit]],
            "unread_count": unread_count,
        })


class MarkReadView(ApiLoginRequiredMixin, View):
    """
    Mark one or all notifications as read.

    POST body:
      notification_id: int   → mark a single notification
                       "all" → mark every unread notification
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            payload = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _bad_payload("Request body must be valid JSON.")

        notification_id = payload.get("notification_id") if isinstance(payload, dict) else None
        inbox = Notification.objects.for_recipient(request.user.pk)

        if notification_id == "all":
            updated = inbox.mark_read()
            logger.info("User %d marked all notifications read", request.user.pk)
        elif isinstance(notification_id, int) and not isinstance(notification_id, bool):
            updated = inbox.filter(pk=notification_id).mark_read()
        else:
            return _bad_payload("notification_id must be an id or \"all\".")

        return JsonResponse({"updated": updated})

"""
ShiftMarket root URL configuration.

URL namespaces follow the pattern: app_name:view_name
  - marketplace:   open/my/incoming/approvals lists, dashboard, request actions
  - notifications: inbox, mark-read
"""

from django.contrib import admin
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.urls import include, path
from django.utils import timezone


def health_check(request):
    """
    Lightweight health check endpoint for load balancer probes.

    Returns 200 OK with a JSON body confirming the app and DB are reachable,
    503 if the database connection cannot be established.
    """
    try:
        connection.ensure_connection()
        db_ok = True
    except DatabaseError:
        db_ok = False

    status = 200 if db_ok else 503
    return JsonResponse(
        {
            "status": "ok" if db_ok else "degraded",
            "db": db_ok,
            "timestamp": timezone.now().isoformat(),
        },
        status=status,
    )


urlpatterns = [
    path("health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/marketplace/", include("apps.marketplace.urls", namespace="marketplace")),
    path("api/notifications/", include("apps.notifications.urls", namespace="notifications")),
]

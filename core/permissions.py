"""
Authentication mixins for ShiftMarket's JSON views.

Every API view handles data scoped to the signed-in user, so each one uses
ApiLoginRequiredMixin. It builds on Django's LoginRequiredMixin but answers
with a JSON error instead of redirecting to a login page.

Finer-grained checks (rota-edit permission, ownership, request involvement)
belong to the marketplace service and selectors, not to these mixins.

Usage:
    class MyView(ApiLoginRequiredMixin, View):
        def get(self, request):
            return JsonResponse({"user": request.user.pk})
"""

import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class ApiLoginRequiredMixin(LoginRequiredMixin):
    """Reject anonymous callers with a 401 JSON body."""

    def handle_no_permission(self) -> JsonResponse:
        """
        Build the rejection response.

        Returns:
            401 for anonymous callers, 403 for signed-in users denied by a subclass.
        """
        if self.request.user.is_authenticated:
            logger.warning("User %d denied access to %s.", self.request.user.pk, self.request.path)
            return JsonResponse({"error": "Forbidden", "code": "FORBIDDEN"}, status=403)
        return JsonResponse({"error": "Authentication required", "code": "UNAUTHENTICATED"}, status=401)

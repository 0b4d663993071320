"""
Marketplace JSON views for ShiftMarket.

View inventory:
  OpenRequestsView          → GET: OPEN requests (?role_id=)
  MyRequestsView            → GET: requests the caller made
  IncomingRequestsView      → GET: swap proposals addressed to the caller
  ApprovalQueueView         → GET: PENDING_APPROVAL queue, rota editors only (?role_id=)
  DashboardView             → GET: badge counts
  SwappableShiftsView       → GET: published, owned shifts (?role_id=&year=&month=)
  CreateRequestView         → POST: create a GIVE_AWAY or SWAP request
  RequestDetailView         → GET: one request / DELETE: cancel it
  AcceptRequestView         → POST: claim an OPEN request
  RespondToProposalView     → POST: answer a PROPOSED swap
  AdminDecisionView         → POST: approve or reject a PENDING_APPROVAL request

Views are thin: they parse input, call ExchangeWorkflowService or a selector
with request.user.pk, and render the result. MarketplaceError subclasses are
rendered as {"error", "code"} with the status code the exception carries.
"""

import json
import logging

from django.http import HttpRequest, JsonResponse
from django.views import View

from apps.accounts.permissions import RotaPermissionChecker
from apps.marketplace import selectors
from apps.marketplace.exceptions import BadPayloadError, MarketplaceError
from apps.marketplace.services import ExchangeWorkflowService
from core.permissions import ApiLoginRequiredMixin

logger = logging.getLogger(__name__)


class MarketplaceApiView(ApiLoginRequiredMixin, View):
    """Base view: authentication, JSON parsing and error rendering."""

    permission_checker = RotaPermissionChecker()

    def dispatch(self, request: HttpRequest, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except MarketplaceError as exc:
            logger.info(
                "Marketplace %s %s rejected for user %s: %s (%s)",
                request.method,
                request.path,
                getattr(request.user, "pk", None),
                exc.code,
                exc.message,
            )
            return JsonResponse(exc.as_dict(), status=exc.status_code)

    def get_service(self) -> ExchangeWorkflowService:
        return ExchangeWorkflowService(self.permission_checker)

    def json_body(self) -> dict:
        """
        Decode the request body as a JSON object.

        Raises:
            BadPayloadError: If the body is not a JSON object.
        """
        if not self.request.body:
            return {}
        try:
            payload = json.loads(self.request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise BadPayloadError("Request body must be valid JSON.") from None
        if not isinstance(payload, dict):
            raise BadPayloadError("Request body must be a JSON object.")
        return payload

    def int_param(self, name: str, required: bool = False):
        """Read an integer query parameter; missing optional ones are None."""
        raw = self.request.GET.get(name)
        if raw in (None, ""):
            if required:
                raise BadPayloadError(f"{name} required")
            return None
        try:
            return int(raw)
        except ValueError:
            raise BadPayloadError(f"{name} must be an integer") from None


def _optional_int(payload: dict, key: str):
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise BadPayloadError(f"{key} must be an integer")
    try:
        return int(value)
    except ValueError:
        raise BadPayloadError(f"{key} must be an integer") from None


def _optional_str(payload: dict, key: str):
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise BadPayloadError(f"{key} must be a string")
    return value


def _required_bool(payload: dict, key: str) -> bool:
    value = payload.get(key)
    if not isinstance(value, bool):
        raise BadPayloadError(f"{key} must be true or false")
    return value


def _request_list(queryset) -> JsonResponse:
    return JsonResponse({"results": [selectors.serialize_request(r) for r in queryset]})


# ---------------------------------------------------------------------------
# Read projections
# ---------------------------------------------------------------------------

class OpenRequestsView(MarketplaceApiView):
    """OPEN requests anyone may claim, newest first."""

    def get(self, request: HttpRequest) -> JsonResponse:
        return _request_list(selectors.open_requests(role_id=self.int_param("role_id")))


class MyRequestsView(MarketplaceApiView):
    """Requests the caller made."""

    def get(self, request: HttpRequest) -> JsonResponse:
        return _request_list(selectors.my_requests(request.user.pk))


class IncomingRequestsView(MarketplaceApiView):
    """Swap proposals awaiting the caller's answer."""

    def get(self, request: HttpRequest) -> JsonResponse:
        return _request_list(selectors.incoming_requests(request.user.pk))


class ApprovalQueueView(MarketplaceApiView):
    """Requests awaiting an admin decision, oldest first."""

    def get(self, request: HttpRequest) -> JsonResponse:
        queryset = selectors.pending_approval(
            request.user.pk, self.permission_checker, role_id=self.int_param("role_id")
        )
        return _request_list(queryset)


class DashboardView(MarketplaceApiView):
    def get(self, request: HttpRequest) -> JsonResponse:
        return JsonResponse(selectors.dashboard_counts(request.user.pk))


class SwappableShiftsView(MarketplaceApiView):
    """Shifts of one role and month that could be offered in a swap."""

    def get(self, request: HttpRequest) -> JsonResponse:
        role_id = self.int_param("role_id", required=True)
        year = self.int_param("year", required=True)
        month = self.int_param("month", required=True)
        if not 1 <= month <= 12:
            raise BadPayloadError("month must be between 1 and 12")
        return JsonResponse({"results": selectors.swappable(role_id, year, month)})


# ---------------------------------------------------------------------------
# Workflow actions
# ---------------------------------------------------------------------------

class CreateRequestView(MarketplaceApiView):
    """
    POST body:
      shift_id: uuid             (required)
      type: "GIVE_AWAY" | "SWAP" (required)
      target_user_id: int        (SWAP only)
      target_shift_id: uuid      (SWAP only, optional)
      notes: str                 (optional)
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        payload = self.json_body()
        if not payload.get("shift_id"):
            raise BadPayloadError("shift_id required")

        exchange = self.get_service().create_request(
            request.user.pk,
            payload["shift_id"],
            payload.get("type", ""),
            target_user_id=_optional_int(payload, "target_user_id"),
            target_shift_id=payload.get("target_shift_id") or None,
            notes=_optional_str(payload, "notes"),
        )
        return JsonResponse(selectors.serialize_request(exchange), status=201)


class RequestDetailView(MarketplaceApiView):
    """GET one request; DELETE cancels it."""

    def get(self, request: HttpRequest, request_id: int) -> JsonResponse:
        exchange = selectors.request_detail(request.user.pk, request_id, self.permission_checker)
        return JsonResponse(selectors.serialize_request(exchange))

    def delete(self, request: HttpRequest, request_id: int) -> JsonResponse:
        self.get_service().cancel_request(request.user.pk, request_id)
        return JsonResponse({"success": True, "message": "Request cancelled"})


class AcceptRequestView(MarketplaceApiView):
    """POST body: target_shift_id (optional uuid of a shift offered back)."""

    def post(self, request: HttpRequest, request_id: int) -> JsonResponse:
        payload = self.json_body()
        exchange = self.get_service().accept_open_request(
            request.user.pk,
            request_id,
            offered_shift_id=payload.get("target_shift_id") or None,
        )
        return JsonResponse(selectors.serialize_request(exchange))


class RespondToProposalView(MarketplaceApiView):
    """POST body: accept (bool), target_shift_id (optional uuid)."""

    def post(self, request: HttpRequest, request_id: int) -> JsonResponse:
        payload = self.json_body()
        exchange = self.get_service().respond_to_proposal(
            request.user.pk,
            request_id,
            _required_bool(payload, "accept"),
            offered_shift_id=payload.get("target_shift_id") or None,
        )
        return JsonResponse(selectors.serialize_request(exchange))


class AdminDecisionView(MarketplaceApiView):
    """POST body: approve (bool), notes (optional str)."""

    def post(self, request: HttpRequest, request_id: int) -> JsonResponse:
        payload = self.json_body()
        exchange = self.get_service().admin_decide(
            request.user.pk,
            request_id,
            _required_bool(payload, "approve"),
            notes=_optional_str(payload, "notes"),
        )
        return JsonResponse(selectors.serialize_request(exchange))

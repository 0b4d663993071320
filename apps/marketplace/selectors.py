"""
Read-side projections for the marketplace.

Nothing here writes. Every projection joins the request with its shifts,
role and people in one query (select_related) and filters with bound ORM
parameters only.
"""

from apps.accounts.permissions import PermissionChecker, edit_rota_permission
from apps.marketplace.exceptions import ForbiddenError, RequestNotFoundError
from apps.marketplace.models import ExchangeRequest
from apps.rota.directory import swappable_shifts

Status = ExchangeRequest.Status


def _with_details():
    return ExchangeRequest.objects.select_related(
        "shift__role",
        "shift__owner",
        "requester",
        "target_user",
        "target_shift",
        "candidate",
    )


def open_requests(role_id: int = None):
    """OPEN requests, optionally for one role, newest first."""
    qs = _with_details().filter(status=Status.OPEN)
    if role_id is not None:
        qs = qs.filter(shift__role_id=role_id)
    return qs.order_by("-created_at", "-pk")


def my_requests(caller_id: int):
    """Every request the caller made, newest first."""
    return _with_details().filter(requester_id=caller_id).order_by("-created_at", "-pk")


def incoming_requests(caller_id: int):
    """Swap proposals addressed to the caller that still await an answer."""
    return (
        _with_details()
        .filter(target_user_id=caller_id, status=Status.PROPOSED)
        .order_by("-created_at", "-pk")
    )


def pending_approval(caller_id: int, permissions: PermissionChecker, role_id: int = None):
    """
    The admin review queue, oldest first.

    Raises:
        ForbiddenError: If the caller lacks the rota-edit permission.
    """
    if not permissions.has_permission(caller_id, edit_rota_permission()):
        raise ForbiddenError()
    qs = _with_details().filter(status=Status.PENDING_APPROVAL)
    if role_id is not None:
        qs = qs.filter(shift__role_id=role_id)
    return qs.order_by("created_at", "pk")


def dashboard_counts(caller_id: int) -> dict:
    """Badge counts for the marketplace landing page."""
    return {
        "open": ExchangeRequest.objects.filter(status=Status.OPEN).count(),
        "my": ExchangeRequest.objects.filter(requester_id=caller_id).count(),
        "incoming": incoming_requests(caller_id).count(),
    }


def request_detail(caller_id: int, request_id, permissions: PermissionChecker) -> ExchangeRequest:
    """
    A single request, visible to the people it involves and to rota editors.

    Other callers get RequestNotFoundError so the id's existence is not leaked.
    """
    exchange = _with_details().filter(pk=request_id).first()
    if exchange is None:
        raise RequestNotFoundError(f"Request {request_id} not found")
    involved = {exchange.requester_id, exchange.target_user_id, exchange.candidate_id}
    if caller_id not in involved and not permissions.has_permission(caller_id, edit_rota_permission()):
        raise RequestNotFoundError(f"Request {request_id} not found")
    return exchange


def swappable(role_id: int, year: int, month: int) -> list:
    """Published, owned shifts of a role in one month, serialized for the picker."""
    return [serialize_shift(shift) for shift in swappable_shifts(role_id, year, month)]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _time(value):
    return value.strftime("%H:%M") if value else None


def _iso(value):
    return value.isoformat() if value else None


def serialize_shift(shift) -> dict:
    return {
        "id": str(shift.pk),
        "role_id": shift.role_id,
        "role_name": shift.role.name,
        "date": shift.date.isoformat(),
        "label": shift.label,
        "start": _time(shift.start_time),
        "end": _time(shift.end_time),
        "owner_id": shift.owner_id,
        "owner_name": shift.owner.get_full_name() if shift.owner_id else None,
        "is_published": shift.is_published,
    }


def serialize_request(exchange: ExchangeRequest) -> dict:
    """
    Flatten a request and its display details into one JSON-ready dict.

    Expects the relations loaded by the projections above; other callers
    trigger extra queries but get the same shape.
    """
    shift = exchange.shift
    target_shift = exchange.target_shift
    target_user = exchange.target_user
    candidate = exchange.candidate

    return {
        "id": exchange.pk,
        "shift_id": str(exchange.shift_id),
        "requester_id": exchange.requester_id,
        "type": exchange.kind,
        "status": exchange.status,
        "target_user_id": exchange.target_user_id,
        "target_shift_id": str(exchange.target_shift_id) if exchange.target_shift_id else None,
        "candidate_id": exchange.candidate_id,
        "resolved_by": exchange.resolved_by_id,
        "resolved_at": _iso(exchange.resolved_at),
        "notes": exchange.notes,
        "is_pending": exchange.is_pending,
        "created_at": _iso(exchange.created_at),
        "updated_at": _iso(exchange.updated_at),
        # Display details
        "shift_date": shift.date.isoformat(),
        "shift_label": shift.label,
        "shift_start": _time(shift.start_time),
        "shift_end": _time(shift.end_time),
        "shift_role_id": shift.role_id,
        "shift_role_name": shift.role.name,
        "shift_user_id": shift.owner_id,
        "requester_name": exchange.requester.get_full_name(),
        "requester_short_name": exchange.requester.get_short_name(),
        "target_user_name": target_user.get_full_name() if target_user else None,
        "target_user_short_name": target_user.get_short_name() if target_user else None,
        "target_shift_date": target_shift.date.isoformat() if target_shift else None,
        "target_shift_label": target_shift.label if target_shift else None,
        "target_shift_start": _time(target_shift.start_time) if target_shift else None,
        "target_shift_end": _time(target_shift.end_time) if target_shift else None,
        "candidate_name": candidate.get_full_name() if candidate else None,
        "candidate_short_name": candidate.get_short_name() if candidate else None,
        "role_auto_approve": shift.role.marketplace_auto_approve,
    }

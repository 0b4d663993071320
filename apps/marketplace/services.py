"""
Exchange workflow service for ShiftMarket.

ExchangeWorkflowService is the only writer of ExchangeRequest status,
candidate and resolution fields. Each action:

  1. Loads the request and validates the caller against it
  2. Opens one transaction
  3. Applies the status change as a conditional UPDATE whose WHERE clause
     re-asserts the expected status (and, for claims, that no candidate is
     set yet); zero rows means somebody else moved the request first
  4. On a transition into APPROVED, settles ownership through the rota
     directory in the same transaction

Store failures inside the transaction roll everything back and surface as
TransientError. The service never retries.
"""

import logging
from contextlib import contextmanager

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.accounts.permissions import PermissionChecker, RotaPermissionChecker, edit_rota_permission
from apps.marketplace.exceptions import (
    AlreadyTerminalError,
    BadPayloadError,
    ConflictError,
    DuplicateRequestError,
    ForbiddenError,
    InvalidKindError,
    InvalidTransitionError,
    NoCandidateError,
    NotOpenError,
    NotOwnerError,
    NotPendingApprovalError,
    NotProposedError,
    NotRequesterError,
    NotTargetError,
    RequestNotFoundError,
    SelfDealError,
    ShiftNotEligibleError,
    ShiftNotFoundError,
    TooManyPendingRequestsError,
    TransientError,
)
from apps.marketplace.models import (
    ACTIVE_STATUSES,
    ONE_ACTIVE_PER_SHIFT,
    Action,
    ExchangeRequest,
    Status,
    allowed_from,
    is_allowed,
)
from apps.notifications.models import Notification
from apps.notifications.services import notify
from apps.rota.directory import reassign_shift_owner, role_auto_approves, shift_owner
from apps.rota.models import Shift

logger = logging.getLogger(__name__)

Kind = ExchangeRequest.Kind


def load_request(request_id) -> ExchangeRequest:
    """
    Fetch an exchange request with its shift and requester.

    Raises:
        RequestNotFoundError: If no such request exists.
    """
    try:
        return ExchangeRequest.objects.select_related("shift__role", "requester").get(pk=request_id)
    except ExchangeRequest.DoesNotExist:
        raise RequestNotFoundError(f"Request {request_id} not found") from None


def load_shift(shift_id) -> Shift:
    """
    Fetch a shift by id.

    Raises:
        ShiftNotFoundError: If the id is malformed or no such shift exists.
    """
    try:
        return Shift.objects.select_related("role").get(pk=shift_id)
    except (Shift.DoesNotExist, ValidationError, ValueError):
        raise ShiftNotFoundError(f"Shift {shift_id} not found") from None


def _violates_one_active_per_shift(exc: IntegrityError) -> bool:
    # PostgreSQL names the constraint; SQLite names the indexed column.
    message = str(exc)
    return ONE_ACTIVE_PER_SHIFT in message or (
        "UNIQUE constraint failed" in message and f"{ExchangeRequest._meta.db_table}.shift_id" in message
    )


@contextmanager
def atomic_transition(action: str, request_id=None):
    """
    Run a transition in one transaction, mapping store failures to TransientError.

    A second unresolved request for the same shift surfaces as
    DuplicateRequestError. The transaction has already rolled back by the
    time either is raised.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        if isinstance(exc, IntegrityError) and _violates_one_active_per_shift(exc):
            logger.info("Duplicate %s on request %s rejected by %s.", action, request_id, ONE_ACTIVE_PER_SHIFT)
            raise DuplicateRequestError() from exc
        logger.error(
            "Store failure during %s on request %s; transition rolled back.",
            action,
            request_id,
            exc_info=True,
        )
        raise TransientError() from exc


class ExchangeWorkflowService:
    """
    State machine for marketplace exchange requests.

    Args:
        permissions: Answers has_permission(staff_id, permission). Defaults to
            the database-backed RotaPermissionChecker; tests inject fakes.

    Every public method takes the resolved caller id explicitly and returns
    the request as stored after the action.
    """

    def __init__(self, permissions: PermissionChecker = None):
        self.permissions = permissions or RotaPermissionChecker()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_request(
        self,
        caller_id: int,
        shift_id,
        kind: str,
        target_user_id: int = None,
        target_shift_id=None,
        notes: str = None,
    ) -> ExchangeRequest:
        """
        Offer one of the caller's shifts on the marketplace.

        GIVE_AWAY requests start OPEN for anyone to claim. SWAP requests are
        addressed to target_user_id and start PROPOSED; target_shift_id
        optionally names the target's shift to take back in return.

        Raises:
            InvalidKindError: Unknown kind, SWAP without a target, or GIVE_AWAY with one.
            ShiftNotFoundError: shift_id or target_shift_id does not exist.
            NotOwnerError: The caller does not own the shift, or the target
                does not own target_shift_id.
            SelfDealError: The caller targets themselves.
            ShiftNotEligibleError: A shift is unpublished or both ids are equal.
            DuplicateRequestError: The shift already has an unresolved request.
            TooManyPendingRequestsError: The caller is at the pending limit.
        """
        if str(kind) not in Kind.values:
            raise InvalidKindError(f"Invalid request type: {kind}")
        kind = Kind(str(kind))

        if kind == Kind.SWAP and target_user_id is None:
            raise InvalidKindError("SWAP requests must name a target user.")
        if kind == Kind.GIVE_AWAY and (target_user_id is not None or target_shift_id is not None):
            raise InvalidKindError("GIVE_AWAY requests cannot name a target user or shift.")

        shift = load_shift(shift_id)
        if shift_owner(shift.pk) != caller_id:
            raise NotOwnerError()
        self._check_eligible(shift)

        if target_user_id is not None:
            if target_user_id == caller_id:
                raise SelfDealError("You cannot propose a swap to yourself.")
            if not User.objects.filter(pk=target_user_id, is_active=True).exists():
                raise BadPayloadError(f"Target user {target_user_id} not found")

        if target_shift_id is not None:
            target_shift = load_shift(target_shift_id)
            if target_shift.pk == shift.pk:
                raise ShiftNotEligibleError("A shift cannot be swapped for itself.")
            if shift_owner(target_shift.pk) != target_user_id:
                raise NotOwnerError("The requested shift does not belong to the target user.")
            self._check_eligible(target_shift)

        with atomic_transition("create"):
            if ExchangeRequest.objects.filter(shift_id=shift.pk, status__in=ACTIVE_STATUSES).exists():
                raise DuplicateRequestError()

            limit = settings.MARKETPLACE.get("MAX_PENDING_REQUESTS_PER_STAFF")
            if limit:
                pending = ExchangeRequest.objects.filter(
                    requester_id=caller_id, status__in=ACTIVE_STATUSES
                ).count()
                if pending >= limit:
                    raise TooManyPendingRequestsError(
                        f"You already have {pending} unresolved requests (limit {limit})."
                    )

            exchange = ExchangeRequest.objects.create(
                shift=shift,
                requester_id=caller_id,
                kind=kind,
                status=Status.PROPOSED if kind == Kind.SWAP else Status.OPEN,
                target_user_id=target_user_id,
                target_shift_id=target_shift_id,
                notes=notes or "",
            )

        logger.info(
            "User %d created %s request %d for shift %s.", caller_id, kind, exchange.pk, shift.pk
        )
        return exchange

    # ------------------------------------------------------------------
    # Peer actions
    # ------------------------------------------------------------------

    def accept_open_request(self, caller_id: int, request_id, offered_shift_id=None) -> ExchangeRequest:
        """
        Claim an OPEN request, optionally offering one of the caller's shifts back.

        Moves to APPROVED (and settles) when the shift's role auto-approves,
        otherwise to PENDING_APPROVAL.

        Raises:
            RequestNotFoundError, NotOpenError, SelfDealError, ConflictError,
            TransientError; ShiftNotFoundError / NotOwnerError /
            ShiftNotEligibleError for a bad offered shift.
        """
        exchange = load_request(request_id)
        if str(exchange.status) not in allowed_from(Action.ACCEPT):
            raise NotOpenError(current_status=exchange.status)
        if caller_id == exchange.requester_id:
            raise SelfDealError("Cannot accept your own request.")
        if offered_shift_id is not None:
            self._check_offered_shift(offered_shift_id, caller_id, exchange)

        return self._claim(exchange, Action.ACCEPT, caller_id, offered_shift_id)

    def respond_to_proposal(
        self, caller_id: int, request_id, accept: bool, offered_shift_id=None
    ) -> ExchangeRequest:
        """
        Answer a PROPOSED swap addressed to the caller.

        Declining resolves the request as REJECTED. Accepting makes the caller
        the candidate; offered_shift_id, when given, replaces the shift the
        requester asked for in return.

        Raises:
            RequestNotFoundError, NotProposedError, NotTargetError,
            SelfDealError, ConflictError, TransientError.
        """
        exchange = load_request(request_id)
        if str(exchange.status) not in allowed_from(Action.RESPOND_ACCEPT):
            raise NotProposedError(current_status=exchange.status)
        if exchange.target_user_id != caller_id:
            raise NotTargetError()
        if caller_id == exchange.requester_id:
            raise SelfDealError()

        if not accept:
            with atomic_transition(Action.RESPOND_REJECT, exchange.pk):
                self._apply(
                    exchange,
                    Action.RESPOND_REJECT,
                    Status.REJECTED,
                    resolved_by_id=caller_id,
                    resolved_at=timezone.now(),
                )
                notify(
                    exchange.requester_id,
                    Notification.Type.EXCHANGE_REJECTED,
                    "Swap Declined",
                    f"Your swap proposal for {exchange.shift} was declined.",
                    {"request_id": exchange.pk},
                )
            logger.info("User %d declined swap proposal %d.", caller_id, exchange.pk)
            exchange.refresh_from_db()
            return exchange

        target_shift_id = exchange.target_shift_id
        if offered_shift_id is not None:
            self._check_offered_shift(offered_shift_id, caller_id, exchange)
            target_shift_id = offered_shift_id

        return self._claim(exchange, Action.RESPOND_ACCEPT, caller_id, target_shift_id)

    # ------------------------------------------------------------------
    # Admin and requester actions
    # ------------------------------------------------------------------

    def admin_decide(self, caller_id: int, request_id, approve: bool, notes: str = None) -> ExchangeRequest:
        """
        Approve or reject a PENDING_APPROVAL request.

        The permission check runs before the request is loaded, so callers
        without edit_rota learn nothing about the request.

        Raises:
            ForbiddenError, RequestNotFoundError, NotPendingApprovalError,
            NoCandidateError, SelfDealError, ConflictError, TransientError.
        """
        if not self.permissions.has_permission(caller_id, edit_rota_permission()):
            logger.warning("User %d attempted an admin decision on request %s without permission.",
                           caller_id, request_id)
            raise ForbiddenError()

        exchange = load_request(request_id)
        if str(exchange.status) not in allowed_from(Action.ADMIN_APPROVE):
            raise NotPendingApprovalError(current_status=exchange.status)

        fields = {"resolved_by_id": caller_id, "resolved_at": timezone.now()}
        if notes is not None:
            fields["notes"] = notes

        if approve:
            if exchange.candidate_id is None:
                raise NoCandidateError()
            if exchange.candidate_id == exchange.requester_id:
                raise SelfDealError()

            with atomic_transition(Action.ADMIN_APPROVE, exchange.pk):
                self._apply(
                    exchange,
                    Action.ADMIN_APPROVE,
                    Status.APPROVED,
                    **fields,
                )
                self._settle(exchange, exchange.candidate_id, exchange.target_shift_id)
                self._notify_parties(
                    exchange,
                    [exchange.requester_id, exchange.candidate_id],
                    Notification.Type.EXCHANGE_APPROVED,
                    "Exchange Approved",
                    f"The exchange of {exchange.shift} was approved.",
                )
            logger.info("User %d approved request %d.", caller_id, exchange.pk)
        else:
            with atomic_transition(Action.ADMIN_REJECT, exchange.pk):
                self._apply(exchange, Action.ADMIN_REJECT, Status.REJECTED, **fields)
                self._notify_parties(
                    exchange,
                    [exchange.requester_id, exchange.candidate_id],
                    Notification.Type.EXCHANGE_REJECTED,
                    "Exchange Rejected",
                    f"The exchange of {exchange.shift} was rejected by an administrator.",
                )
            logger.info("User %d rejected request %d.", caller_id, exchange.pk)

        exchange.refresh_from_db()
        return exchange

    def cancel_request(self, caller_id: int, request_id) -> ExchangeRequest:
        """
        Withdraw an unresolved request. Only its requester may cancel it.

        Raises:
            RequestNotFoundError, NotRequesterError, AlreadyTerminalError,
            ConflictError, TransientError.
        """
        exchange = load_request(request_id)
        if exchange.requester_id != caller_id:
            raise NotRequesterError()
        if exchange.is_terminal:
            raise AlreadyTerminalError(current_status=exchange.status)

        with atomic_transition(Action.CANCEL, exchange.pk):
            self._apply(
                exchange,
                Action.CANCEL,
                Status.CANCELLED,
                resolved_by_id=caller_id,
                resolved_at=timezone.now(),
            )
            self._notify_parties(
                exchange,
                [exchange.target_user_id, exchange.candidate_id],
                Notification.Type.EXCHANGE_CANCELLED,
                "Exchange Cancelled",
                f"{exchange.requester.get_full_name()} withdrew the exchange of {exchange.shift}.",
            )

        logger.info("User %d cancelled request %d.", caller_id, exchange.pk)
        exchange.refresh_from_db()
        return exchange

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _claim(self, exchange: ExchangeRequest, action: str, candidate_id: int, target_shift_id) -> ExchangeRequest:
        """Attach a candidate, then settle at once if the role auto-approves."""
        with atomic_transition(action, exchange.pk):
            auto_approve = role_auto_approves(exchange.shift_id)
            fields = {"candidate_id": candidate_id, "target_shift_id": target_shift_id}
            if auto_approve:
                fields.update(resolved_by_id=candidate_id, resolved_at=timezone.now())

            self._apply(
                exchange,
                action,
                Status.APPROVED if auto_approve else Status.PENDING_APPROVAL,
                unclaimed=True,
                **fields,
            )

            if auto_approve:
                self._settle(exchange, candidate_id, target_shift_id)
                self._notify_parties(
                    exchange,
                    [exchange.requester_id, candidate_id],
                    Notification.Type.EXCHANGE_APPROVED,
                    "Exchange Approved",
                    f"The exchange of {exchange.shift} was approved automatically.",
                )
            else:
                notify(
                    exchange.requester_id,
                    Notification.Type.EXCHANGE_CLAIMED,
                    "Exchange Accepted",
                    f"Your request for {exchange.shift} was accepted and awaits admin approval.",
                    {"request_id": exchange.pk},
                )

        logger.info(
            "User %d claimed request %d via %s (auto_approve=%s).",
            candidate_id,
            exchange.pk,
            action,
            auto_approve,
        )
        exchange.refresh_from_db()
        return exchange

    def _apply(self, exchange: ExchangeRequest, action: str, to_status: str, unclaimed: bool = False, **fields) -> None:
        """
        Write a transition as one conditional UPDATE.

        Raises:
            InvalidTransitionError: The transition table does not allow it.
            ConflictError: The stored row no longer matches the snapshot.
        """
        from_status = str(exchange.status)
        if not is_allowed(action, from_status, to_status):
            raise InvalidTransitionError(current_status=from_status)

        rows = ExchangeRequest.objects.filter(pk=exchange.pk, status=from_status)
        if unclaimed:
            rows = rows.filter(candidate__isnull=True)

        updated = rows.update(status=to_status, updated_at=timezone.now(), **fields)
        if not updated:
            logger.warning(
                "Conflict on request %d: %s expected status %s but the row had moved on.",
                exchange.pk,
                action,
                from_status,
            )
            raise ConflictError()

    def _settle(self, exchange: ExchangeRequest, candidate_id: int, target_shift_id) -> None:
        """
        Transfer ownership for an approved exchange.

        Must run inside the transition's transaction. A shift whose owner has
        changed since the request was made aborts the whole transition.
        """
        if not reassign_shift_owner(exchange.shift_id, candidate_id, exchange.requester_id):
            raise ConflictError("The shift no longer belongs to the requester.")
        if target_shift_id is not None and not reassign_shift_owner(
            target_shift_id, exchange.requester_id, candidate_id
        ):
            raise ConflictError("The offered shift no longer belongs to the candidate.")

    def _check_eligible(self, shift: Shift) -> None:
        if settings.MARKETPLACE.get("REQUIRE_PUBLISHED_SHIFTS", True):
            eligible = shift.is_swap_eligible
        else:
            eligible = shift.owner_id is not None
        if not eligible:
            raise ShiftNotEligibleError()

    def _check_offered_shift(self, offered_shift_id, caller_id: int, exchange: ExchangeRequest) -> None:
        """Validate a shift a candidate offers back to the requester."""
        offered = load_shift(offered_shift_id)
        if offered.pk == exchange.shift_id:
            raise ShiftNotEligibleError("A shift cannot be swapped for itself.")
        if shift_owner(offered.pk) != caller_id:
            raise NotOwnerError("You can only offer your own shifts.")
        self._check_eligible(offered)

    @staticmethod
    def _notify_parties(exchange: ExchangeRequest, recipient_ids, notification_type, title: str, body: str) -> None:
        for recipient_id in {pk for pk in recipient_ids if pk is not None}:
            notify(recipient_id, notification_type, title, body, {"request_id": exchange.pk})

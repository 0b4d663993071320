"""
Marketplace models for ShiftMarket.

ExchangeRequest is the unit of work: one proposed give-away or swap of a
shift. Its status moves forward through the table below and nowhere else;
ExchangeWorkflowService (services.py) is the only code that writes status,
candidate or resolution fields.

    OPEN ──accept──────────────► PENDING_APPROVAL ──approve──► APPROVED
      │        └─(auto-approve)──────────────────────────────► APPROVED
      │                                 └────────reject──────► REJECTED
    PROPOSED ──respond(yes)────► PENDING_APPROVAL / APPROVED
      └────────respond(no)─────► REJECTED
    OPEN / PROPOSED / PENDING_APPROVAL ──cancel──► CANCELLED

APPROVED, REJECTED and CANCELLED are terminal. Requests are never deleted.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _


class ExchangeRequest(models.Model):
    """
    A request to give away or swap a shift.

    Fields set at creation (shift, requester, kind, target_user) are immutable.
    candidate is set exactly once, by a claim or an affirmative response.
    resolved_by / resolved_at are set together on reaching a terminal state.
    """

    class Kind(models.TextChoices):
        GIVE_AWAY = "GIVE_AWAY", _("Give Away")
        SWAP = "SWAP", _("Swap")

    class Status(models.TextChoices):
        OPEN = "OPEN", _("Open for Pickup")
        PROPOSED = "PROPOSED", _("Proposed to Colleague")
        PENDING_APPROVAL = "PENDING_APPROVAL", _("Awaiting Admin Approval")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")
        CANCELLED = "CANCELLED", _("Cancelled")

    class Action(models.TextChoices):
        ACCEPT = "accept", _("Accept")
        RESPOND_ACCEPT = "respond_accept", _("Accept Proposal")
        RESPOND_REJECT = "respond_reject", _("Decline Proposal")
        ADMIN_APPROVE = "admin_approve", _("Admin Approve")
        ADMIN_REJECT = "admin_reject", _("Admin Reject")
        CANCEL = "cancel", _("Cancel")

    shift = models.ForeignKey(
        "rota.Shift",
        on_delete=models.PROTECT,
        related_name="exchange_requests",
    )
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="exchange_requests_made",
    )
    kind = models.CharField(max_length=10, choices=Kind.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)

    # The colleague a SWAP is addressed to (null for GIVE_AWAY)
    target_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="exchange_requests_received",
    )
    # Shift handed back to the requester on settlement (null for one-way give-aways)
    target_shift = models.ForeignKey(
        "rota.Shift",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="exchange_requests_offered",
    )
    # Who takes the shift once settled
    candidate = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="exchange_requests_claimed",
    )

    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="exchange_requests_resolved",
    )
    resolved_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "marketplace_exchange_request"
        verbose_name = "Exchange Request"
        verbose_name_plural = "Exchange Requests"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="mkt_req_status_created_idx"),
            models.Index(fields=["requester", "status"], name="mkt_req_requester_status_idx"),
            models.Index(fields=["target_user", "status"], name="mkt_req_target_status_idx"),
            models.Index(fields=["shift"], name="mkt_req_shift_idx"),
        ]
        constraints = [
            # SWAP always names a colleague; GIVE_AWAY never does
            models.CheckConstraint(
                condition=(
                    Q(kind="SWAP", target_user__isnull=False)
                    | Q(kind="GIVE_AWAY", target_user__isnull=True)
                ),
                name="mkt_req_kind_target_consistent",
            ),
            models.CheckConstraint(
                condition=Q(candidate__isnull=True) | ~Q(candidate=models.F("requester")),
                name="mkt_req_no_self_dealing",
            ),
            models.CheckConstraint(
                condition=(
                    Q(resolved_by__isnull=True, resolved_at__isnull=True)
                    | Q(resolved_at__isnull=False)
                ),
                name="mkt_req_resolution_pair",
            ),
            # At most one unresolved request per shift
            models.UniqueConstraint(
                fields=["shift"],
                condition=Q(status__in=["OPEN", "PROPOSED", "PENDING_APPROVAL"]),
                name="mkt_req_one_active_per_shift",
            ),
        ]

    def __str__(self) -> str:
        """Return a readable description of this request."""
        return f"#{self.pk} {self.get_kind_display()} | {self.shift_id} | {self.get_status_display()}"

    @property
    def is_terminal(self) -> bool:
        """Return True once no further transitions are possible."""
        return str(self.status) in TERMINAL_STATUSES

    @property
    def is_pending(self) -> bool:
        """Return True if this request is still awaiting a decision."""
        return str(self.status) in ACTIVE_STATUSES


Status = ExchangeRequest.Status
Action = ExchangeRequest.Action

TERMINAL_STATUSES = frozenset({Status.APPROVED.value, Status.REJECTED.value, Status.CANCELLED.value})
ACTIVE_STATUSES = frozenset({Status.OPEN.value, Status.PROPOSED.value, Status.PENDING_APPROVAL.value})
ONE_ACTIVE_PER_SHIFT = "mkt_req_one_active_per_shift"

# (action, from-status) -> allowed to-statuses. Every write checks this table.
# Keys are plain strings so lookups work with members and raw column values alike.
TRANSITIONS = {
    (Action.ACCEPT.value, Status.OPEN.value): {Status.PENDING_APPROVAL.value, Status.APPROVED.value},
    (Action.RESPOND_ACCEPT.value, Status.PROPOSED.value): {Status.PENDING_APPROVAL.value, Status.APPROVED.value},
    (Action.RESPOND_REJECT.value, Status.PROPOSED.value): {Status.REJECTED.value},
    (Action.ADMIN_APPROVE.value, Status.PENDING_APPROVAL.value): {Status.APPROVED.value},
    (Action.ADMIN_REJECT.value, Status.PENDING_APPROVAL.value): {Status.REJECTED.value},
    (Action.CANCEL.value, Status.OPEN.value): {Status.CANCELLED.value},
    (Action.CANCEL.value, Status.PROPOSED.value): {Status.CANCELLED.value},
    (Action.CANCEL.value, Status.PENDING_APPROVAL.value): {Status.CANCELLED.value},
}


def allowed_from(action: str) -> set:
    """Return the statuses an action may start from."""
    return {frm for (act, frm) in TRANSITIONS if act == str(action)}


def is_allowed(action: str, from_status: str, to_status: str) -> bool:
    """Return True if the table permits from_status -> to_status under action."""
    return str(to_status) in TRANSITIONS.get((str(action), str(from_status)), ())

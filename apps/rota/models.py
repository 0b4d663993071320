"""
Rota models for ShiftMarket.

The shift directory the marketplace trades in. Shift CRUD, templates and
publishing happen elsewhere; the marketplace only reads ownership and role
policy here, and writes ownership when an exchange settles.

  - Role: a team/rota (e.g. "Anaesthetics Registrars") with its marketplace policy
  - Shift: one dated block of work on a role's rota, owned by at most one user
"""

import uuid

from django.conf import settings
from django.db import models


class Role(models.Model):
    """
    A rota role. Its marketplace_auto_approve flag decides whether a peer's
    acceptance settles an exchange immediately or queues it for an admin.
    """

    name = models.CharField(max_length=100, unique=True)
    marketplace_auto_approve = models.BooleanField(
        default=False,
        help_text="Settle exchanges as soon as a peer accepts, without admin review.",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Role"
        verbose_name_plural = "Roles"

    def __str__(self) -> str:
        """Return the role name."""
        return self.name


class Shift(models.Model):
    """
    A dated shift on a role's rota.

    A shift is swap-eligible only when it is published and owned. Date, label
    and times are display attributes; the marketplace never changes them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name="shifts")
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="shifts",
        help_text="Staff member currently working this shift. Unowned shifts cannot be exchanged.",
    )

    date = models.DateField()
    label = models.CharField(max_length=50, help_text="Rota label, e.g. 'Long Day' or 'Nights'.")
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)

    is_published = models.BooleanField(
        default=False,
        help_text="Published shifts are visible to staff and may be exchanged.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Shift"
        verbose_name_plural = "Shifts"
        ordering = ["date", "start_time"]
        indexes = [
            models.Index(fields=["role", "date"], name="rota_shift_role_date_idx"),
            models.Index(fields=["owner"], name="rota_shift_owner_idx"),
        ]

    def __str__(self) -> str:
        """Return a human-readable shift description."""
        return f"{self.role.name} | {self.label} | {self.date.isoformat()}"

    @property
    def is_swap_eligible(self) -> bool:
        """Return True if this shift may be offered on the marketplace."""
        return self.is_published and self.owner_id is not None

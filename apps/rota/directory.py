"""
Shift directory functions used by the marketplace workflow.

These are the only reads and writes the workflow makes against shifts.
Ownership writes are single-row conditional updates so they compose with the
caller's transaction and never blindly overwrite a concurrent change.
"""

import logging
from typing import Optional

from django.db.models import F
from django.utils import timezone

from apps.rota.models import Shift

logger = logging.getLogger(__name__)


def shift_owner(shift_id) -> Optional[int]:
    """
    Return the owning user id of a shift.

    Raises:
        Shift.DoesNotExist: If no such shift exists.
    """
    return Shift.objects.values_list("owner_id", flat=True).get(pk=shift_id)


def role_auto_approves(shift_id) -> bool:
    """Return the marketplace auto-approve flag of the shift's role, read now."""
    return Shift.objects.values_list("role__marketplace_auto_approve", flat=True).get(pk=shift_id)


def reassign_shift_owner(shift_id, new_owner_id: int, expected_owner_id: int) -> bool:
    """
    Move a shift to a new owner if it still belongs to expected_owner_id.

    Must be called inside transaction.atomic() when combined with other writes.

    Returns:
        True if the shift was reassigned, False if its owner had changed.
    """
    updated = Shift.objects.filter(pk=shift_id, owner_id=expected_owner_id).update(
        owner_id=new_owner_id,
        updated_at=timezone.now(),
    )
    if updated:
        logger.info("Shift %s reassigned from user %d to user %d.", shift_id, expected_owner_id, new_owner_id)
    else:
        logger.warning(
            "Shift %s reassignment skipped: owner is no longer user %d.", shift_id, expected_owner_id
        )
    return bool(updated)


def swappable_shifts(role_id: int, year: int, month: int):
    """
    Return the published, owned shifts of a role in one calendar month.

    Ordered by date then start time, as the rota displays them.
    """
    return (
        Shift.objects.filter(
            role_id=role_id,
            date__year=year,
            date__month=month,
            owner__isnull=False,
            is_published=True,
        )
        .select_related("role", "owner")
        .order_by("date", F("start_time").asc(nulls_first=True))
    )

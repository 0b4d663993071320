"""
Permission gate for marketplace decisions.

The workflow service never reaches into request state to decide who may do
what. Callers pass a PermissionChecker; production code uses
RotaPermissionChecker, tests inject a fake.
"""

import logging
from typing import Protocol

from django.conf import settings

from apps.accounts.models import RoleMembership, User

logger = logging.getLogger(__name__)

EDIT_ROTA = "edit_rota"

# Permission name -> RoleMembership boolean column
PERMISSION_FIELDS = {
    EDIT_ROTA: "can_edit_rota",
}


def edit_rota_permission() -> str:
    """Return the permission name guarding admin decisions."""
    return settings.MARKETPLACE.get("EDIT_ROTA_PERMISSION", EDIT_ROTA)


class PermissionChecker(Protocol):
    """Answers "does this staff member hold permission P"."""

    def has_permission(self, staff_id: int, permission: str) -> bool:
        ...


class RotaPermissionChecker:
    """
    Database-backed checker.

    Admins (User.role == ADMIN, or Django superusers) hold every permission.
    Everyone else needs a RoleMembership with the matching flag set.
    Unknown permission names are never granted.
    """

    def has_permission(self, staff_id: int, permission: str) -> bool:
        """
        Check whether a staff member holds a permission.

        Args:
            staff_id: PK of the user being checked.
            permission: Permission name, e.g. "edit_rota".

        Returns:
            True if the permission is held.
        """
        user = (
            User.objects.filter(pk=staff_id, is_active=True)
            .only("role", "is_superuser")
            .first()
        )
        if user is None:
            return False
        if user.is_admin or user.is_superuser:
            return True

        field = PERMISSION_FIELDS.get(permission)
        if field is None:
            logger.warning("Permission check for unknown permission %r (user %d).", permission, staff_id)
            return False

        return RoleMembership.objects.filter(user_id=staff_id, **{field: True}).exists()

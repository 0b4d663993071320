"""
Accounts models for ShiftMarket.

Defines the custom User model (the staff profile the marketplace refers to by
id) and the per-role memberships that grant rota permissions.

Key design decisions:
  - AbstractBaseUser gives us full control over the user model
  - Email is the login identifier; short_name is the compact label shown on rotas
  - ADMIN users hold every permission; everyone else gets permissions through
    RoleMembership rows (one per rota role they belong to)
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Custom manager for the ShiftMarket User model (email-based auth)."""

    use_in_migrations = True

    def create_user(self, email: str, password: str = None, **extra_fields) -> "User":
        """
        Create and save a regular user with the given email and password.

        Args:
            email: The user's email address (used as login identifier).
            password: The raw password (will be hashed).
            **extra_fields: Additional fields to set on the User model.

        Returns:
            The newly created User instance.

        Raises:
            ValueError: If email is not provided.
        """
        if not email:
            raise ValueError(_("The Email field must be set"))
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str, **extra_fields) -> "User":
        """
        Create and save a superuser (admin) with the given email and password.

        Args:
            email: The admin's email address.
            password: The raw password.
            **extra_fields: Additional fields (is_staff and is_superuser forced to True).

        Returns:
            The newly created admin User instance.
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom user model for ShiftMarket.

    Uses email as the unique identifier. Role determines the permission baseline:
      - ADMIN: holds every rota permission on every role
      - STAFF: works shifts; rota permissions come from RoleMembership
    """

    class Role(models.TextChoices):
        ADMIN = "admin", _("Admin")
        STAFF = "staff", _("Staff")

    # Core identity
    email = models.EmailField(_("email address"), unique=True)
    first_name = models.CharField(_("first name"), max_length=150)
    last_name = models.CharField(_("last name"), max_length=150)
    short_name = models.CharField(
        _("short name"),
        max_length=30,
        blank=True,
        help_text="Compact label shown in rota grids (e.g. initials).",
    )

    # Role & status
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.STAFF)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)  # Django admin access

    date_joined = models.DateTimeField(default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    class Meta:
        verbose_name = _("user")
        verbose_name_plural = _("users")
        ordering = ["last_name", "first_name"]

    def __str__(self) -> str:
        """Return the user's full name and role for display."""
        return f"{self.get_full_name()} ({self.get_role_display()})"

    def get_full_name(self) -> str:
        """Return the first_name plus the last_name, with a space in between."""
        return f"{self.first_name} {self.last_name}".strip()

    def get_short_name(self) -> str:
        """Return the rota label, falling back to the first name."""
        return self.short_name or self.first_name

    @property
    def is_admin(self) -> bool:
        """Check if this user has the Admin role."""
        return self.role == self.Role.ADMIN


class RoleMembership(models.Model):
    """
    Grants a user membership of a rota role, with per-role permission flags.

    The marketplace consults can_edit_rota before admin decisions and before
    showing the approval queue. A user may belong to many roles; holding the
    flag on any one of them is enough.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="role_memberships",
    )
    role = models.ForeignKey(
        "rota.Role",
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    can_edit_rota = models.BooleanField(
        default=False,
        help_text="May approve or reject marketplace exchanges and edit the rota.",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Role Membership"
        verbose_name_plural = "Role Memberships"
        constraints = [
            models.UniqueConstraint(fields=["user", "role"], name="unique_user_role_membership"),
        ]

    def __str__(self) -> str:
        """Return a description of this membership."""
        flag = " [rota editor]" if self.can_edit_rota else ""
        return f"{self.user.get_full_name()} @ {self.role.name}{flag}"

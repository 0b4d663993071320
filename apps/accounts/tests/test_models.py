from django.db import IntegrityError, transaction
from django.test import TestCase
from apps.accounts.models import RoleMembership, User
from apps.rota.models import Role


class UserModelTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="Test@Example.com",
            password="pass123",
            first_name="Test",
            last_name="User",
            role=User.Role.STAFF,
        )

    def test_user_str(self):
        self.assertIn("Test User", str(self.user))

    def test_email_domain_normalized(self):
        self.assertEqual(self.user.email, "Test@example.com")

    def test_role_properties(self):
        self.assertFalse(self.user.is_admin)
        admin = User.objects.create_superuser(
            email="root@example.com", password="pass123", first_name="Root", last_name="Admin"
        )
        self.assertTrue(admin.is_admin)
        self.assertTrue(admin.is_staff)

    def test_get_full_and_short_name(self):
        self.assertEqual(self.user.get_full_name(), "Test User")
        self.assertEqual(self.user.get_short_name(), "Test")
        self.user.short_name = "TU"
        self.assertEqual(self.user.get_short_name(), "TU")

    def test_email_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="pass123")


class RoleMembershipTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="member@example.com", password="pass123", first_name="Mem", last_name="Ber"
        )
        self.role = Role.objects.create(name="Registrars")

    def test_str_flags_editors(self):
        membership = RoleMembership.objects.create(user=self.user, role=self.role, can_edit_rota=True)
        self.assertIn("Registrars", str(membership))
        self.assertIn("rota editor", str(membership))

    def test_one_membership_per_role(self):
        RoleMembership.objects.create(user=self.user, role=self.role)
        with self.assertRaises(IntegrityError), transaction.atomic():
            RoleMembership.objects.create(user=self.user, role=self.role)

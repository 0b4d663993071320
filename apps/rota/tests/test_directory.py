from datetime import date

from django.test import TestCase

from apps.accounts.models import User
from apps.rota import directory
from apps.rota.models import Role, Shift


class DirectoryTests(TestCase):
    def setUp(self):
        self.role = Role.objects.create(name="Fellows", marketplace_auto_approve=True)
        self.alice = User.objects.create_user(email="a@example.com", first_name="Alice", last_name="A")
        self.bob = User.objects.create_user(email="b@example.com", first_name="Bob", last_name="B")
        self.shift = Shift.objects.create(
            role=self.role, owner=self.alice, date=date(2026, 6, 1), label="Long Day", is_published=True
        )

    def test_shift_owner(self):
        self.assertEqual(directory.shift_owner(self.shift.pk), self.alice.pk)

    def test_shift_owner_missing(self):
        with self.assertRaises(Shift.DoesNotExist):
            directory.shift_owner("00000000-0000-0000-0000-000000000000")

    def test_role_auto_approves(self):
        self.assertTrue(directory.role_auto_approves(self.shift.pk))
        Role.objects.filter(pk=self.role.pk).update(marketplace_auto_approve=False)
        self.assertFalse(directory.role_auto_approves(self.shift.pk))

    def test_reassign_when_owner_matches(self):
        self.assertTrue(directory.reassign_shift_owner(self.shift.pk, self.bob.pk, self.alice.pk))
        self.shift.refresh_from_db()
        self.assertEqual(self.shift.owner_id, self.bob.pk)

    def test_reassign_refuses_stale_owner(self):
        self.assertFalse(directory.reassign_shift_owner(self.shift.pk, self.alice.pk, self.bob.pk))
        self.shift.refresh_from_db()
        self.assertEqual(self.shift.owner_id, self.alice.pk)

    def test_swap_eligibility(self):
        self.assertTrue(self.shift.is_swap_eligible)
        self.shift.owner = None
        self.assertFalse(self.shift.is_swap_eligible)

"""
Seed ShiftMarket with two rotas, a handful of staff and sample exchanges.

Scenarios included:
  1. Published shifts for the current and next month on both rotas
  2. An OPEN give-away on the admin-reviewed rota (claim it to see PENDING_APPROVAL)
  3. A PROPOSED swap on the auto-approve rota (accept it to settle immediately)
  4. A rota editor on the admin-reviewed rota who can work the approval queue

Usage:
    python manage.py seed_marketplace
    python manage.py seed_marketplace --reset
"""

from datetime import date, time, timedelta

from django.core.management.base import BaseCommand
from django.db import transaction

PASSWORD = "ShiftMarket2026!"

STAFF = [
    # email, first, last, short, role key
    ("amy@example.org", "Amy", "Adeyemi", "AA", "regs"),
    ("ben@example.org", "Ben", "Brook", "BB", "regs"),
    ("cara@example.org", "Cara", "Chen", "CC", "regs"),
    ("dev@example.org", "Dev", "Desai", "DD", "fellows"),
    ("eli@example.org", "Eli", "Evans", "EE", "fellows"),
]

PATTERN = [
    # label, start, end
    ("Long Day", time(8, 0), time(20, 30)),
    ("Night", time(20, 0), time(8, 30)),
]


class Command(BaseCommand):
    help = "Seed ShiftMarket with demo rotas, staff, shifts and exchange requests"

    def add_arguments(self, parser):
        parser.add_argument("--reset", action="store_true",
                            help="Delete existing marketplace and rota data first (DESTRUCTIVE).")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            self.stdout.write(self.style.WARNING("Resetting marketplace data..."))
            self._reset_data()

        self.stdout.write("Seeding ShiftMarket demo data...")

        roles = self._create_roles()
        admin = self._create_admin()
        staff = self._create_staff(roles)
        shifts = self._create_shifts(roles, staff)
        self._create_requests(staff, shifts)

        self.stdout.write(self.style.SUCCESS("\nSeed complete!\n"))
        self.stdout.write("=" * 55)
        self.stdout.write(f"ADMIN:  {admin.email} / {PASSWORD}")
        self.stdout.write(f"STAFF:  {', '.join(email for email, *_ in STAFF)}")
        self.stdout.write(f"        (all / {PASSWORD}; ben@ edits the Registrars rota)")
        self.stdout.write("=" * 55)

    # ------------------------------------------------------------------
    def _reset_data(self):
        from apps.accounts.models import RoleMembership, User
        from apps.marketplace.models import ExchangeRequest
        from apps.notifications.models import Notification
        from apps.rota.models import Role, Shift

        for model in [Notification, ExchangeRequest, Shift, RoleMembership, Role]:
            model.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        self.stdout.write(self.style.WARNING("  Cleared existing data."))

    # ------------------------------------------------------------------
    def _create_roles(self) -> dict:
        from apps.rota.models import Role

        roles = {}
        for key, name, auto_approve in [
            ("regs", "Anaesthetics Registrars", False),
            ("fellows", "Clinical Fellows", True),
        ]:
            obj, created = Role.objects.get_or_create(
                name=name, defaults={"marketplace_auto_approve": auto_approve}
            )
            roles[key] = obj
            if created:
                self.stdout.write(f"  + Role: {name} (auto-approve={auto_approve})")
        return roles

    # ------------------------------------------------------------------
    def _create_admin(self):
        from apps.accounts.models import User

        admin, created = User.objects.get_or_create(
            email="admin@example.org",
            defaults={"first_name": "Rota", "last_name": "Admin",
                      "role": User.Role.ADMIN, "is_staff": True},
        )
        if created:
            admin.set_password(PASSWORD)
            admin.save()
            self.stdout.write(f"  + Admin: {admin.email}")
        return admin

    # ------------------------------------------------------------------
    def _create_staff(self, roles: dict) -> dict:
        from apps.accounts.models import RoleMembership, User

        staff = {}
        for email, first, last, short, role_key in STAFF:
            user, created = User.objects.get_or_create(
                email=email,
                defaults={"first_name": first, "last_name": last, "short_name": short},
            )
            if created:
                user.set_password(PASSWORD)
                user.save()
                self.stdout.write(f"  + Staff: {first} {last}")
            RoleMembership.objects.get_or_create(
                user=user,
                role=roles[role_key],
                defaults={"can_edit_rota": email == "ben@example.org"},
            )
            staff[first.lower()] = user
        return staff

    # ------------------------------------------------------------------
    def _create_shifts(self, roles: dict, staff: dict) -> dict:
        """Give every member of each rota one published shift per week for eight weeks."""
        from apps.rota.models import Shift

        first_day = date.today().replace(day=1)
        members = {
            "regs": [staff["amy"], staff["ben"], staff["cara"]],
            "fellows": [staff["dev"], staff["eli"]],
        }

        shifts = {}
        created_count = 0
        for role_key, people in members.items():
            for week in range(8):
                for offset, user in enumerate(people):
                    label, start, end = PATTERN[(week + offset) % len(PATTERN)]
                    shift, created = Shift.objects.get_or_create(
                        role=roles[role_key],
                        owner=user,
                        date=first_day + timedelta(weeks=week, days=offset),
                        defaults={"label": label, "start_time": start, "end_time": end,
                                  "is_published": True},
                    )
                    created_count += int(created)
                    shifts.setdefault(user.first_name.lower(), []).append(shift)
        self.stdout.write(f"  + Shifts: {created_count} created")
        return shifts

    # ------------------------------------------------------------------
    def _create_requests(self, staff: dict, shifts: dict):
        from apps.accounts.permissions import RotaPermissionChecker
        from apps.marketplace.exceptions import DuplicateRequestError
        from apps.marketplace.models import ExchangeRequest
        from apps.marketplace.services import ExchangeWorkflowService

        service = ExchangeWorkflowService(RotaPermissionChecker())

        scenarios = [
            ("Amy gives away a Long Day", dict(
                caller_id=staff["amy"].pk,
                shift_id=shifts["amy"][1].pk,
                kind=ExchangeRequest.Kind.GIVE_AWAY,
                notes="Family wedding",
            )),
            ("Dev proposes a swap to Eli", dict(
                caller_id=staff["dev"].pk,
                shift_id=shifts["dev"][2].pk,
                kind=ExchangeRequest.Kind.SWAP,
                target_user_id=staff["eli"].pk,
                target_shift_id=shifts["eli"][3].pk,
            )),
        ]
        for title, kwargs in scenarios:
            try:
                service.create_request(**kwargs)
            except DuplicateRequestError:
                self.stdout.write(f"  = {title} (already seeded)")
            else:
                self.stdout.write(f"  + {title}")

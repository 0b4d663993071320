from datetime import date, time

from django.test import TestCase

from apps.marketplace import selectors
from apps.marketplace.exceptions import ForbiddenError, RequestNotFoundError
from apps.marketplace.models import ExchangeRequest
from apps.marketplace.services import ExchangeWorkflowService
from apps.marketplace.tests.factories import FakePermissionChecker, make_role, make_shift, make_user

Kind = ExchangeRequest.Kind
Status = ExchangeRequest.Status


class SelectorTestCase(TestCase):
    def setUp(self):
        self.regs = make_role(name="Registrars")
        self.fellows = make_role(name="Fellows", auto_approve=True)
        self.alice = make_user(first_name="Alice", last_name="Adams", short_name="AA")
        self.bob = make_user(first_name="Bob", last_name="Brown")
        self.carol = make_user(first_name="Carol")
        self.admin = make_user(first_name="Admin")
        self.checker = FakePermissionChecker({(self.admin.pk, "edit_rota")})
        self.service = ExchangeWorkflowService(self.checker)

        self.a1 = make_shift(self.regs, owner=self.alice, day=date(2026, 3, 10))
        self.a2 = make_shift(self.fellows, owner=self.alice, day=date(2026, 3, 11))
        self.b1 = make_shift(self.regs, owner=self.bob, day=date(2026, 3, 12), label="Night",
                             start_time=time(20, 0), end_time=time(8, 30))

        self.open_regs = self.service.create_request(self.alice.pk, self.a1.pk, Kind.GIVE_AWAY)
        self.open_fellows = self.service.create_request(self.alice.pk, self.a2.pk, Kind.GIVE_AWAY)
        self.swap = self.service.create_request(
            self.bob.pk, self.b1.pk, Kind.SWAP, target_user_id=self.carol.pk
        )


class TestListProjections(SelectorTestCase):
    def test_open_newest_first(self):
        self.assertEqual(list(selectors.open_requests()), [self.open_fellows, self.open_regs])

    def test_open_filtered_by_role(self):
        self.assertEqual(list(selectors.open_requests(role_id=self.regs.pk)), [self.open_regs])

    def test_mine(self):
        self.assertEqual(list(selectors.my_requests(self.alice.pk)), [self.open_fellows, self.open_regs])
        self.assertEqual(list(selectors.my_requests(self.carol.pk)), [])

    def test_incoming_only_proposed(self):
        self.assertEqual(list(selectors.incoming_requests(self.carol.pk)), [self.swap])
        self.service.respond_to_proposal(self.carol.pk, self.swap.pk, accept=False)
        self.assertEqual(list(selectors.incoming_requests(self.carol.pk)), [])

    def test_pending_approval_oldest_first(self):
        self.service.accept_open_request(self.bob.pk, self.open_regs.pk)
        b2 = make_shift(self.regs, owner=self.bob)
        later = self.service.create_request(self.bob.pk, b2.pk, Kind.GIVE_AWAY)
        self.service.accept_open_request(self.carol.pk, later.pk)

        queue = list(selectors.pending_approval(self.admin.pk, self.checker))
        self.assertEqual(queue, [self.open_regs, later])

    def test_pending_approval_requires_permission(self):
        with self.assertRaises(ForbiddenError):
            selectors.pending_approval(self.bob.pk, self.checker)

    def test_dashboard_counts(self):
        self.assertEqual(
            selectors.dashboard_counts(self.carol.pk), {"open": 2, "my": 0, "incoming": 1}
        )
        self.assertEqual(
            selectors.dashboard_counts(self.alice.pk), {"open": 2, "my": 2, "incoming": 0}
        )


class TestRequestDetail(SelectorTestCase):
    def test_visible_to_parties_and_editors(self):
        for user in (self.bob, self.carol, self.admin):
            with self.subTest(user=user.first_name):
                self.assertEqual(selectors.request_detail(user.pk, self.swap.pk, self.checker), self.swap)

    def test_hidden_from_everyone_else(self):
        with self.assertRaises(RequestNotFoundError):
            selectors.request_detail(self.alice.pk, self.swap.pk, self.checker)

    def test_unknown_id(self):
        with self.assertRaises(RequestNotFoundError):
            selectors.request_detail(self.admin.pk, 424242, self.checker)


class TestSerialization(SelectorTestCase):
    def test_enriched_row(self):
        row = selectors.serialize_request(selectors.open_requests(role_id=self.regs.pk).get())

        self.assertEqual(row["id"], self.open_regs.pk)
        self.assertEqual(row["type"], "GIVE_AWAY")
        self.assertEqual(row["status"], "OPEN")
        self.assertEqual(row["shift_id"], str(self.a1.pk))
        self.assertEqual(row["shift_date"], "2026-03-10")
        self.assertEqual(row["shift_start"], "08:00")
        self.assertEqual(row["shift_role_name"], "Registrars")
        self.assertEqual(row["shift_user_id"], self.alice.pk)
        self.assertEqual(row["requester_name"], "Alice Adams")
        self.assertEqual(row["requester_short_name"], "AA")
        self.assertIsNone(row["target_user_name"])
        self.assertIsNone(row["candidate_name"])
        self.assertFalse(row["role_auto_approve"])

    def test_swap_row_names_target(self):
        row = selectors.serialize_request(self.swap)
        self.assertEqual(row["target_user_id"], self.carol.pk)
        self.assertEqual(row["target_user_short_name"], "Carol")
        self.assertEqual(row["shift_label"], "Night")
        self.assertEqual(row["shift_end"], "08:30")


class TestSwappableShifts(TestCase):
    def test_published_owned_shifts_of_the_month_in_order(self):
        role = make_role()
        owner = make_user()
        late = make_shift(role, owner=owner, day=date(2026, 4, 20), start_time=time(20, 0))
        early = make_shift(role, owner=owner, day=date(2026, 4, 20), start_time=time(8, 0))
        first = make_shift(role, owner=owner, day=date(2026, 4, 3))
        make_shift(role, owner=None, day=date(2026, 4, 5))
        make_shift(role, owner=owner, day=date(2026, 4, 6), published=False)
        make_shift(role, owner=owner, day=date(2026, 5, 1))
        make_shift(make_role(), owner=owner, day=date(2026, 4, 7))

        rows = selectors.swappable(role.pk, 2026, 4)
        self.assertEqual([r["id"] for r in rows], [str(first.pk), str(early.pk), str(late.pk)])
        self.assertEqual(rows[0]["owner_id"], owner.pk)

from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase

from apps.marketplace.models import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    Action,
    ExchangeRequest,
    Status,
    allowed_from,
    is_allowed,
)
from apps.marketplace.tests.factories import make_role, make_shift, make_user

Kind = ExchangeRequest.Kind


class TestTransitionTable(SimpleTestCase):
    def test_every_status_is_active_or_terminal(self):
        self.assertEqual(ACTIVE_STATUSES | TERMINAL_STATUSES, set(Status.values))
        self.assertFalse(ACTIVE_STATUSES & TERMINAL_STATUSES)

    def test_nothing_leaves_a_terminal_status(self):
        for action, from_status in TRANSITIONS:
            self.assertNotIn(from_status, TERMINAL_STATUSES, (action, from_status))

    def test_nothing_returns_to_a_start_status(self):
        for targets in TRANSITIONS.values():
            self.assertNotIn(Status.OPEN, targets)
            self.assertNotIn(Status.PROPOSED, targets)

    def test_claims_may_auto_approve(self):
        self.assertTrue(is_allowed(Action.ACCEPT, Status.OPEN, Status.APPROVED))
        self.assertTrue(is_allowed(Action.ACCEPT, Status.OPEN, Status.PENDING_APPROVAL))
        self.assertTrue(is_allowed(Action.RESPOND_ACCEPT, Status.PROPOSED, Status.APPROVED))

    def test_unlisted_pairs_are_refused(self):
        self.assertFalse(is_allowed(Action.ACCEPT, Status.PROPOSED, Status.PENDING_APPROVAL))
        self.assertFalse(is_allowed(Action.ADMIN_APPROVE, Status.OPEN, Status.APPROVED))
        self.assertFalse(is_allowed(Action.CANCEL, Status.APPROVED, Status.CANCELLED))
        self.assertFalse(is_allowed(Action.RESPOND_REJECT, Status.PROPOSED, Status.CANCELLED))

    def test_plain_strings_match_members(self):
        self.assertTrue(is_allowed("cancel", "OPEN", "CANCELLED"))
        self.assertEqual(allowed_from("cancel"), set(ACTIVE_STATUSES))
        self.assertEqual(allowed_from(Action.ADMIN_REJECT), {Status.PENDING_APPROVAL.value})


class TestExchangeRequestModel(TestCase):
    def setUp(self):
        self.role = make_role(name="Registrars")
        self.alice = make_user(first_name="Alice")
        self.bob = make_user(first_name="Bob")
        self.shift = make_shift(self.role, owner=self.alice)

    def test_defaults(self):
        exchange = ExchangeRequest.objects.create(shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY)
        self.assertEqual(exchange.status, Status.OPEN)
        self.assertTrue(exchange.is_pending)
        self.assertFalse(exchange.is_terminal)
        self.assertIn("Give Away", str(exchange))
        self.assertIn("Open for Pickup", str(exchange))

    def test_terminal_property(self):
        exchange = ExchangeRequest.objects.create(
            shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY, status=Status.CANCELLED
        )
        self.assertTrue(exchange.is_terminal)
        self.assertFalse(exchange.is_pending)

    def test_swap_requires_target(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            ExchangeRequest.objects.create(shift=self.shift, requester=self.alice, kind=Kind.SWAP)

    def test_give_away_forbids_target(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            ExchangeRequest.objects.create(
                shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY, target_user=self.bob
            )

    def test_candidate_cannot_be_requester(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            ExchangeRequest.objects.create(
                shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY, candidate=self.alice
            )

    def test_resolved_by_requires_resolved_at(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            ExchangeRequest.objects.create(
                shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY, resolved_by=self.bob
            )

    def test_one_unresolved_request_per_shift(self):
        ExchangeRequest.objects.create(shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY)
        with self.assertRaises(IntegrityError), transaction.atomic():
            ExchangeRequest.objects.create(shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY)

    def test_resolved_requests_do_not_block_a_new_one(self):
        ExchangeRequest.objects.create(
            shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY, status=Status.CANCELLED
        )
        ExchangeRequest.objects.create(
            shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY, status=Status.REJECTED
        )
        ExchangeRequest.objects.create(shift=self.shift, requester=self.alice, kind=Kind.GIVE_AWAY)
        self.assertEqual(ExchangeRequest.objects.filter(shift=self.shift).count(), 3)

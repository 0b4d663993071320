from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from apps.marketplace.models import ExchangeRequest
from apps.rota.models import Role, Shift


class SeedMarketplaceCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_marketplace", stdout=StringIO())
        counts = (Role.objects.count(), Shift.objects.count(), ExchangeRequest.objects.count())

        call_command("seed_marketplace", stdout=StringIO())
        self.assertEqual(
            (Role.objects.count(), Shift.objects.count(), ExchangeRequest.objects.count()), counts
        )

    def test_seed_creates_sample_requests(self):
        call_command("seed_marketplace", stdout=StringIO())
        statuses = set(ExchangeRequest.objects.values_list("status", flat=True))
        self.assertEqual(statuses, {ExchangeRequest.Status.OPEN, ExchangeRequest.Status.PROPOSED})

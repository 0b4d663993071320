import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("rota", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ExchangeRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(choices=[("GIVE_AWAY", "Give Away"), ("SWAP", "Swap")], max_length=10),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("OPEN", "Open for Pickup"),
                            ("PROPOSED", "Proposed to Colleague"),
                            ("PENDING_APPROVAL", "Awaiting Admin Approval"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="OPEN",
                        max_length=20,
                    ),
                ),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "candidate",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exchange_requests_claimed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "requester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exchange_requests_made",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "resolved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="exchange_requests_resolved",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "shift",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exchange_requests",
                        to="rota.shift",
                    ),
                ),
                (
                    "target_shift",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exchange_requests_offered",
                        to="rota.shift",
                    ),
                ),
                (
                    "target_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exchange_requests_received",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Exchange Request",
                "verbose_name_plural": "Exchange Requests",
                "db_table": "marketplace_exchange_request",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="mkt_req_status_created_idx"),
                    models.Index(fields=["requester", "status"], name="mkt_req_requester_status_idx"),
                    models.Index(fields=["target_user", "status"], name="mkt_req_target_status_idx"),
                    models.Index(fields=["shift"], name="mkt_req_shift_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("kind", "SWAP"), ("target_user__isnull", False))
                        | models.Q(("kind", "GIVE_AWAY"), ("target_user__isnull", True)),
                        name="mkt_req_kind_target_consistent",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("candidate__isnull", True))
                        | models.Q(("candidate", models.F("requester")), _negated=True),
                        name="mkt_req_no_self_dealing",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("resolved_by__isnull", True), ("resolved_at__isnull", True))
                        | models.Q(("resolved_at__isnull", False)),
                        name="mkt_req_resolution_pair",
                    ),
                ],
            },
        ),
    ]

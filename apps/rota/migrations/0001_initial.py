import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Role",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                (
                    "marketplace_auto_approve",
                    models.BooleanField(
                        default=False,
                        help_text="Settle exchanges as soon as a peer accepts, without admin review.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Role",
                "verbose_name_plural": "Roles",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Shift",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField()),
                ("label", models.CharField(help_text="Rota label, e.g. 'Long Day' or 'Nights'.", max_length=50)),
                ("start_time", models.TimeField(blank=True, null=True)),
                ("end_time", models.TimeField(blank=True, null=True)),
                (
                    "is_published",
                    models.BooleanField(
                        default=False,
                        help_text="Published shifts are visible to staff and may be exchanged.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        help_text="Staff member currently working this shift. Unowned shifts cannot be exchanged.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="shifts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "role",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts",
                        to="rota.role",
                    ),
                ),
            ],
            options={
                "verbose_name": "Shift",
                "verbose_name_plural": "Shifts",
                "ordering": ["date", "start_time"],
            },
        ),
        migrations.AddIndex(
            model_name="shift",
            index=models.Index(fields=["role", "date"], name="rota_shift_role_date_idx"),
        ),
        migrations.AddIndex(
            model_name="shift",
            index=models.Index(fields=["owner"], name="rota_shift_owner_idx"),
        ),
    ]

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("marketplace", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="exchangerequest",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status__in", ["OPEN", "PROPOSED", "PENDING_APPROVAL"])),
                fields=("shift",),
                name="mkt_req_one_active_per_shift",
            ),
        ),
    ]

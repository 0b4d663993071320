from django.db.models.signals import post_save
from django.dispatch import receiver
from apps.marketplace.models import ExchangeRequest
from apps.notifications.models import Notification
from apps.notifications.services import notify


@receiver(post_save, sender=ExchangeRequest)
def notify_swap_proposed(sender, instance, created, **kwargs):
    """Tell the target colleague when a swap is proposed to them."""
    if created and instance.kind == ExchangeRequest.Kind.SWAP and instance.target_user_id:
        notify(
            instance.target_user_id,
            Notification.Type.EXCHANGE_PROPOSED,
            "Swap Proposed",
            f"{instance.requester.get_full_name()} proposed a swap for {instance.shift}",
            {"request_id": instance.pk},
        )

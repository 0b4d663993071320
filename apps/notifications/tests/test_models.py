import datetime
from django.test import TestCase
from apps.accounts.models import User
from apps.notifications.models import Notification


class TestNotificationModel(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="notify@example.com",
            password="pass123",
            first_name="Notify",
            last_name="Tester",
            short_name="NT",
        )
        self.other = User.objects.create_user(
            email="other@example.com", password="pass123", first_name="Other", last_name="Person"
        )

    def _notify(self, recipient, notification_type=Notification.Type.EXCHANGE_CLAIMED, **data):
        return Notification.objects.create(
            recipient=recipient,
            notification_type=notification_type,
            title=notification_type.label,
            body="Body",
            data=data,
        )

    def test_str_shows_type_and_rota_label(self):
        notif = self._notify(self.user, Notification.Type.EXCHANGE_PROPOSED, request_id=1)
        self.assertFalse(notif.is_read)
        self.assertEqual(str(notif), "[Swap Proposed to You] → NT")

    def test_mark_read_keeps_first_timestamp(self):
        notif = self._notify(self.user, Notification.Type.EXCHANGE_APPROVED)
        notif.mark_read()
        first_read_at = notif.read_at
        self.assertTrue(notif.is_read)
        self.assertLessEqual(first_read_at, datetime.datetime.now(datetime.timezone.utc))

        notif.mark_read()
        notif.refresh_from_db()
        self.assertEqual(notif.read_at, first_read_at)

    def test_as_dict(self):
        notif = self._notify(self.user, Notification.Type.EXCHANGE_CANCELLED, request_id=7)
        payload = notif.as_dict()
        self.assertEqual(payload["id"], notif.pk)
        self.assertEqual(payload["notification_type"], "exchange_cancelled")
        self.assertEqual(payload["data"], {"request_id": 7})
        self.assertIsNone(payload["read_at"])


class TestNotificationQuerySet(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email="inbox@example.com", password="pass123", first_name="In", last_name="Box"
        )
        self.other = User.objects.create_user(
            email="else@example.com", password="pass123", first_name="Some", last_name="One"
        )
        self.linked = Notification.objects.create(
            recipient=self.user,
            notification_type=Notification.Type.EXCHANGE_REJECTED,
            title="Rejected",
            body="Body",
            data={"request_id": 3},
        )
        self.plain = Notification.objects.create(
            recipient=self.user,
            notification_type=Notification.Type.EXCHANGE_CLAIMED,
            title="Claimed",
            body="Body",
        )
        self.foreign = Notification.objects.create(
            recipient=self.other,
            notification_type=Notification.Type.EXCHANGE_CLAIMED,
            title="Claimed",
            body="Body",
            data={"request_id": 3},
        )

    def test_inbox_filters(self):
        inbox = Notification.objects.for_recipient(self.user.pk)
        self.assertEqual(set(inbox), {self.linked, self.plain})
        self.assertEqual(list(inbox.for_request(3)), [self.linked])

    def test_bulk_mark_read_only_touches_unread(self):
        self.plain.mark_read()
        updated = Notification.objects.for_recipient(self.user.pk).mark_read()
        self.assertEqual(updated, 1)
        self.assertFalse(Notification.objects.for_recipient(self.user.pk).unread().exists())
        self.assertTrue(Notification.objects.for_recipient(self.other.pk).unread().exists())

# apps/communication/tests.py

from unittest import mock

from asgiref.sync import async_to_sync
from channels.testing import WebsocketCommunicator
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core import mail
from django.test import SimpleTestCase, TestCase

from .consumers import NotificationConsumer
from .models import Notification
from .services import NotificationService, notification_group_name

User = get_user_model()


class NotificationServiceTestCase(TestCase):
    """Test cases for notification delivery"""

    def setUp(self):
        self.student = User.objects.create_user(
            email='student@example.com',
            password='testpass123',
            first_name='Sam',
            last_name='Lee',
            is_student=True,
        )

    def test_notification_waits_for_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            NotificationService.notify(self.student, 'Detention assigned', 'See you Monday')
        self.assertEqual(len(callbacks), 1)
        self.assertFalse(Notification.objects.exists())

    def test_notification_is_stored_emailed_and_pushed(self):
        with self.captureOnCommitCallbacks(execute=True):
            NotificationService.notify(
                self.student,
                'Detention assigned',
                'See you Monday',
                notification_type=Notification.NotificationType.DETENTION_ASSIGNED,
            )

        notification = Notification.objects.get(recipient=self.student)
        self.assertEqual(notification.notification_type, Notification.NotificationType.DETENTION_ASSIGNED)
        self.assertTrue(notification.email_sent)
        self.assertTrue(notification.push_sent)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, 'Detention assigned')
        self.assertEqual(mail.outbox[0].to, ['student@example.com'])

    def test_email_can_be_suppressed(self):
        with self.captureOnCommitCallbacks(execute=True):
            NotificationService.notify(self.student, 'Term activated', 'Term 1 started', send_email=False)
        self.assertEqual(len(mail.outbox), 0)
        self.assertFalse(Notification.objects.get(recipient=self.student).email_sent)

    def test_no_recipient_is_a_no_op(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            NotificationService.notify(None, 'Nobody', 'Nothing')
        self.assertEqual(callbacks, [])

    def test_email_failure_does_not_propagate(self):
        with mock.patch('apps.communication.services.send_mail', side_effect=OSError('smtp down')):
            with self.assertLogs('apps.communication.services', 'ERROR'):
                notification = NotificationService.deliver(
                    self.student, 'Detention booked', 'Booked', Notification.NotificationType.DETENTION_BOOKED,
                )
        self.assertFalse(notification.email_sent)
        self.assertTrue(notification.push_sent)

    def test_mark_as_read(self):
        notification = NotificationService.deliver(
            self.student, 'Hello', 'World', Notification.NotificationType.GENERAL, send_email=False,
        )
        notification.mark_as_read()
        notification.refresh_from_db()
        self.assertTrue(notification.is_read)
        self.assertIsNotNone(notification.read_at)

    def test_group_name(self):
        self.assertEqual(notification_group_name(self.student.id), f'notifications_{self.student.id}')


class NotificationConsumerTestCase(SimpleTestCase):
    """Test cases for the notification WebSocket"""

    def test_anonymous_connection_is_rejected(self):
        async def connect():
            communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), '/ws/notifications/')
            communicator.scope['user'] = AnonymousUser()
            connected, _ = await communicator.connect()
            await communicator.disconnect()
            return connected

        self.assertFalse(async_to_sync(connect)())

"""
Notification dispatch for the communication app.

Callers hand over an event; delivery happens after the surrounding
transaction commits and a delivery failure never propagates back into the
scheduling code that raised the event.
"""

import logging
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import transaction

from .models import Notification

logger = logging.getLogger(__name__)
User = get_user_model()


def notification_group_name(user_id) -> str:
    return f'notifications_{user_id}'


class NotificationService:
    """
    Service class for creating and delivering notifications.
    """

    @staticmethod
    def notify(
        recipient: User,
        title: str,
        message: str,
        notification_type: str = Notification.NotificationType.GENERAL,
        send_email: Optional[bool] = None,
    ) -> None:
        """
        Queue a notification for ``recipient`` once the current transaction commits.

        Args:
            recipient: User receiving the notification
            title: Short title, also used as the email subject
            message: Notification body
            notification_type: One of ``Notification.NotificationType``
            send_email: Force email delivery on/off (defaults to the
                ``NOTIFICATIONS_EMAIL_ENABLED`` setting)
        """
        if recipient is None:
            return
        if send_email is None:
            send_email = getattr(settings, 'NOTIFICATIONS_EMAIL_ENABLED', True)

        transaction.on_commit(
            lambda: NotificationService.deliver(recipient, title, message, notification_type, send_email)
        )

    @staticmethod
    def deliver(
        recipient: User,
        title: str,
        message: str,
        notification_type: str,
        send_email: bool = True,
    ) -> Optional[Notification]:
        """
        Persist and deliver a notification. Returns ``None`` if it could not be stored.
        """
        try:
            notification = Notification.objects.create(
                recipient=recipient,
                notification_type=notification_type,
                title=title,
                message=message,
            )
        except Exception as e:
            logger.error(f"Failed to store notification for {recipient}: {e}")
            return None

        if send_email and recipient.email:
            notification.email_sent = NotificationService._send_email(recipient, title, message)
        notification.push_sent = NotificationService._push(notification)
        notification.save(update_fields=['email_sent', 'push_sent', 'updated_at'])
        return notification

    @staticmethod
    def _send_email(recipient: User, subject: str, message: str) -> bool:
        try:
            sent = send_mail(
                subject=subject,
                message=message,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient.email],
            )
        except Exception as e:
            logger.error(f"Error sending email to {recipient.email}: {e}")
            return False

        if sent:
            logger.info(f"Email sent successfully to {recipient.email}")
        return bool(sent)

    @staticmethod
    def _push(notification: Notification) -> bool:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return False
        try:
            async_to_sync(channel_layer.group_send)(
                notification_group_name(notification.recipient_id),
                {
                    'type': 'send_notification',
                    'notification': notification.as_payload(),
                },
            )
        except Exception as e:
            logger.error(f"Failed to push notification {notification.id}: {e}")
            return False
        return True

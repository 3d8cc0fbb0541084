# apps/communication/models.py

from django.db import models
from django.conf import settings
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from apps.core.models import CoreBaseModel


class Notification(CoreBaseModel):
    """
    Notification delivered to a user in-app, by email and over WebSocket.
    """
    class NotificationType(models.TextChoices):
        DETENTION_ASSIGNED = 'detention_assigned', _('Detention Assigned')
        DETENTION_BOOKED = 'detention_booked', _('Detention Booked')
        DETENTION_RESOLVED = 'detention_resolved', _('Detention Resolved')
        TERM_ACTIVATED = 'term_activated', _('Term Activated')
        GENERAL = 'general', _('General')

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
        verbose_name=_('recipient')
    )
    notification_type = models.CharField(
        _('notification type'),
        max_length=30,
        choices=NotificationType.choices,
        default=NotificationType.GENERAL
    )
    title = models.CharField(_('title'), max_length=200)
    message = models.TextField(_('message'))
    is_read = models.BooleanField(_('is read'), default=False)
    read_at = models.DateTimeField(_('read at'), null=True, blank=True)

    # Delivery tracking
    email_sent = models.BooleanField(_('email sent'), default=False)
    push_sent = models.BooleanField(_('push notification sent'), default=False)

    class Meta:
        verbose_name = _('Notification')
        verbose_name_plural = _('Notifications')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.recipient}"

    def mark_as_read(self):
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=['is_read', 'read_at', 'updated_at'])

    def as_payload(self):
        """Format notification for WebSocket transmission."""
        return {
            'id': str(self.id),
            'type': self.notification_type,
            'title': self.title,
            'message': self.message,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

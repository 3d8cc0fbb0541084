# apps/audit/models.py

from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _
from apps.core.models import CoreBaseModel


class AuditLog(CoreBaseModel):
    """
    Operation log for scheduling and booking actions.
    """
    class ActionType(models.TextChoices):
        CREATE = 'create', _('Create')
        UPDATE = 'update', _('Update')
        DELETE = 'delete', _('Delete')
        OTHER = 'other', _('Other')

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name=_('user')
    )
    action = models.CharField(_('action'), max_length=20, choices=ActionType.choices)
    model_name = models.CharField(_('model name'), max_length=100)
    object_id = models.CharField(_('object id'), max_length=100, blank=True)
    details = models.JSONField(_('details'), default=dict, blank=True)
    timestamp = models.DateTimeField(_('timestamp'), auto_now_add=True)

    class Meta:
        verbose_name = _('Audit Log')
        verbose_name_plural = _('Audit Logs')
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='audit_user_time_idx'),
            models.Index(fields=['model_name', 'object_id'], name='audit_model_object_idx'),
            models.Index(fields=['action', 'timestamp'], name='audit_action_time_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.action} - {self.model_name} - {self.timestamp}"

# apps/followups/models.py

from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


class FollowupQuerySet(models.QuerySet):
    def outstanding(self):
        return self.filter(is_completed=False)

    def overdue(self, today):
        return self.outstanding().filter(due_date__lt=today)


class Followup(CoreBaseModel):
    """
    An issue an administrator has to come back to by a due date.
    """
    issue = models.TextField(_('issue'))
    solution = models.TextField(_('solution'), blank=True)
    due_date = models.DateField(_('due date'))
    is_completed = models.BooleanField(_('is completed'), default=False)
    completed_at = models.DateTimeField(_('completed at'), null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='followups',
        verbose_name=_('created by')
    )

    objects = FollowupQuerySet.as_manager()

    class Meta:
        verbose_name = _('Follow-up')
        verbose_name_plural = _('Follow-ups')
        ordering = ['due_date']
        indexes = [
            models.Index(fields=['is_completed', 'due_date'], name='followup_done_due_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(is_completed=False) | models.Q(completed_at__isnull=False),
                name='completed_followup_has_time'
            ),
        ]

    def __str__(self):
        return self.issue[:50]

# apps/followups/services.py

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.audit.models import AuditLog
from apps.audit.services import record_operation
from apps.core.exceptions import NotFound

from .models import Followup

logger = logging.getLogger(__name__)


class FollowupService:
    """
    Service class for follow-up changes. ``completed_at`` always tracks
    ``is_completed``.
    """

    UPDATABLE_FIELDS = ('issue', 'solution', 'due_date', 'is_completed')

    @staticmethod
    def _lock(followup_id):
        try:
            return Followup.objects.select_for_update().get(pk=followup_id)
        except Followup.DoesNotExist:
            raise NotFound.for_model(Followup, followup_id)

    @classmethod
    def update(cls, followup_id, actor=None, **changes):
        unknown = set(changes) - set(cls.UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(_('Unknown follow-up fields: %(fields)s'), params={'fields': ', '.join(sorted(unknown))})

        with transaction.atomic():
            followup = cls._lock(followup_id)
            was_completed = followup.is_completed
            for field_name, value in changes.items():
                setattr(followup, field_name, value)

            if followup.is_completed and not was_completed:
                followup.completed_at = timezone.now()
            elif not followup.is_completed:
                followup.completed_at = None
            followup.save()

            record_operation(actor, AuditLog.ActionType.UPDATE, 'Followup', followup.pk, fields=sorted(changes))
        return followup

    @classmethod
    def mark_complete(cls, followup_id, actor=None):
        followup = cls.update(followup_id, actor=actor, is_completed=True)
        logger.info(f"Follow-up {followup.pk} completed by {actor or 'system'}")
        return followup

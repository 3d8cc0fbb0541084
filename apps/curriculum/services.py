# apps/curriculum/services.py

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from apps.audit.models import AuditLog
from apps.audit.services import record_operation
from apps.core.exceptions import NotFound

from .models import Progress, ProgressWeek

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Service class for editing the weekly content of progress plans.
    """

    WEEK_FIELDS = ('topics', 'test', 'comments')

    @classmethod
    def update_week(cls, progress_id, week, actor=None, **changes):
        """
        Create or update the content planned for ``week``.

        Only the fields passed in ``changes`` are touched; passing
        ``test=None`` clears the week's test.
        """
        unknown = set(changes) - set(cls.WEEK_FIELDS)
        if unknown:
            raise ValidationError(_('Unknown week fields: %(fields)s'), params={'fields': ', '.join(sorted(unknown))})

        with transaction.atomic():
            try:
                progress = Progress.objects.select_for_update().get(pk=progress_id)
            except Progress.DoesNotExist:
                raise NotFound.for_model(Progress, progress_id)

            if not isinstance(week, int) or not 1 <= week <= progress.term.weeks:
                raise ValidationError(
                    _('Week %(week)s is outside %(term)s.'),
                    code='invalid_week',
                    params={'week': week, 'term': progress.term.name},
                )

            progress_week, created = ProgressWeek.objects.get_or_create(progress=progress, week=week)
            if 'test' in changes:
                progress_week.test = changes['test']
            if 'comments' in changes:
                progress_week.comments = changes['comments'] or ''
            progress_week.save()
            if 'topics' in changes:
                progress_week.topics.set(changes['topics'] or [])

            record_operation(
                actor, AuditLog.ActionType.CREATE if created else AuditLog.ActionType.UPDATE,
                'Progress', progress.pk, operation='update_week', week=week, fields=sorted(changes),
            )

        logger.info(f"Progress {progress.name} week {week} updated")
        return progress_week

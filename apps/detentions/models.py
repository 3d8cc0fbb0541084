# apps/detentions/models.py

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel
from apps.academics.models import Term, Classroom, Class


class DetentionSlotQuerySet(models.QuerySet):
    def available(self):
        """Slots with at least one free seat."""
        return self.filter(booked_count__lt=models.F('capacity'))

    def on_date(self, day):
        return self.filter(date=day)


class DetentionSlot(CoreBaseModel):
    """
    A bookable detention session in a classroom. Capacity is copied from the
    classroom when the slot is created.
    """
    date = models.DateField(_('date'))
    start_time = models.TimeField(_('start time'))
    end_time = models.TimeField(_('end time'))
    classroom = models.ForeignKey(
        Classroom,
        on_delete=models.PROTECT,
        related_name='detention_slots',
        verbose_name=_('classroom')
    )
    term = models.ForeignKey(
        Term,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='detention_slots',
        verbose_name=_('term')
    )
    week = models.PositiveSmallIntegerField(
        _('week'),
        null=True,
        blank=True,
        validators=[MinValueValidator(1)]
    )
    capacity = models.PositiveIntegerField(_('capacity'), validators=[MinValueValidator(1)])
    booked_count = models.PositiveIntegerField(_('booked count'), default=0)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_detention_slots',
        verbose_name=_('created by')
    )

    objects = DetentionSlotQuerySet.as_manager()

    class Meta:
        verbose_name = _('Detention Slot')
        verbose_name_plural = _('Detention Slots')
        ordering = ['date', 'start_time']
        indexes = [
            models.Index(fields=['date', 'classroom'], name='slot_date_room_idx'),
            models.Index(fields=['date', 'booked_count'], name='slot_date_booked_idx'),
            models.Index(fields=['term', 'classroom', 'week'], name='slot_term_room_week_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(booked_count__lte=models.F('capacity')),
                name='slot_booked_within_capacity'
            ),
            models.CheckConstraint(
                condition=models.Q(capacity__gte=1),
                name='slot_capacity_positive'
            ),
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='slot_ends_after_start'
            ),
            models.CheckConstraint(
                condition=models.Q(week__isnull=True) | models.Q(week__gte=1),
                name='slot_week_positive'
            ),
            models.UniqueConstraint(
                fields=['term', 'classroom', 'week', 'date', 'start_time', 'end_time'],
                condition=models.Q(term__isnull=False),
                name='unique_slot_coordinate'
            ),
        ]

    def __str__(self):
        return f"{self.classroom.name} {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def seats_left(self):
        return max(self.capacity - self.booked_count, 0)

    @property
    def is_full(self):
        return self.booked_count >= self.capacity


class Detention(CoreBaseModel):
    """
    A detention assigned to a student for a class week, optionally booked
    into a detention slot.
    """
    class Status(models.TextChoices):
        ASSIGNED = 'assigned', _('Assigned')
        BOOKED = 'booked', _('Booked')
        COMPLETED = 'completed', _('Completed')

    class CompletionStatus(models.TextChoices):
        COMPLETE = 'complete', _('Complete')
        INCOMPLETE = 'incomplete', _('Incomplete')
        ABSENT = 'absent', _('Absent')

    class_ref = models.ForeignKey(
        Class,
        on_delete=models.PROTECT,
        related_name='detentions',
        verbose_name=_('class')
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='detentions',
        verbose_name=_('student')
    )
    week = models.PositiveSmallIntegerField(_('week'), validators=[MinValueValidator(1)])
    reason = models.TextField(_('reason'))
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=Status.choices,
        default=Status.ASSIGNED
    )
    booked_slot = models.ForeignKey(
        DetentionSlot,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='detentions',
        verbose_name=_('booked slot')
    )
    completion_status = models.CharField(
        _('completion status'),
        max_length=20,
        choices=CompletionStatus.choices,
        blank=True,
        null=True
    )
    attempts = models.PositiveIntegerField(_('attempts'), default=0)
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='assigned_detentions',
        verbose_name=_('assigned by')
    )
    assigned_at = models.DateTimeField(_('assigned at'), default=timezone.now)

    class Meta:
        verbose_name = _('Detention')
        verbose_name_plural = _('Detentions')
        ordering = ['-assigned_at']
        indexes = [
            models.Index(fields=['student', 'status'], name='detention_student_status_idx'),
            models.Index(fields=['status', '-assigned_at'], name='detention_status_time_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(week__gte=1),
                name='detention_week_positive'
            ),
            models.CheckConstraint(
                condition=~models.Q(status='booked') | models.Q(booked_slot__isnull=False),
                name='booked_detention_has_slot'
            ),
        ]

    def __str__(self):
        return f"{self.student} - {self.class_ref} week {self.week} ({self.get_status_display()})"

# apps/curriculum/models.py

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel
from apps.users.models import User


class TermLabel(models.TextChoices):
    """School term a topic or test is written for, independent of calendar terms."""
    T1 = 'T1', _('Term 1')
    T2 = 'T2', _('Term 2')
    T3 = 'T3', _('Term 3')
    T4 = 'T4', _('Term 4')


class Topic(CoreBaseModel):
    """
    A unit of teaching content for one year level and school term.
    """
    name = models.CharField(_('topic name'), max_length=200)
    content = models.TextField(_('content'), blank=True)
    year = models.CharField(_('year level'), max_length=10, choices=User.YearLevel.choices)
    term_label = models.CharField(_('term'), max_length=2, choices=TermLabel.choices)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_topics',
        verbose_name=_('created by')
    )

    class Meta:
        verbose_name = _('Topic')
        verbose_name_plural = _('Topics')
        ordering = ['year', 'term_label', 'name']
        indexes = [
            models.Index(fields=['year', 'term_label'], name='topic_year_term_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.year} {self.term_label})"


class ClassTest(CoreBaseModel):
    """
    A test sat in class, reused across classes of the same year level.
    """
    name = models.CharField(_('test name'), max_length=200)
    year = models.CharField(_('year level'), max_length=10, choices=User.YearLevel.choices)
    term_label = models.CharField(_('term'), max_length=2, choices=TermLabel.choices)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tests',
        verbose_name=_('created by')
    )

    class Meta:
        verbose_name = _('Test')
        verbose_name_plural = _('Tests')
        ordering = ['year', 'term_label', 'name']
        indexes = [
            models.Index(fields=['year', 'term_label'], name='test_year_term_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.year} {self.term_label})"


class Progress(CoreBaseModel):
    """
    Week-by-week teaching plan for a year level during a term.
    """
    name = models.CharField(_('name'), max_length=200)
    term = models.ForeignKey(
        'academics.Term',
        on_delete=models.CASCADE,
        related_name='progress_plans',
        verbose_name=_('term')
    )
    year = models.CharField(_('year level'), max_length=10, choices=User.YearLevel.choices)

    class Meta:
        verbose_name = _('Progress Plan')
        verbose_name_plural = _('Progress Plans')
        ordering = ['-term__start_date', 'year']
        indexes = [
            models.Index(fields=['term', 'year'], name='progress_term_year_idx'),
        ]

    def __str__(self):
        return self.name


class ProgressWeek(CoreBaseModel):
    progress = models.ForeignKey(
        Progress,
        on_delete=models.CASCADE,
        related_name='weeks',
        verbose_name=_('progress plan')
    )
    week = models.PositiveSmallIntegerField(_('week'), validators=[MinValueValidator(1)])
    topics = models.ManyToManyField(
        Topic,
        related_name='progress_weeks',
        blank=True,
        verbose_name=_('topics')
    )
    test = models.ForeignKey(
        ClassTest,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='progress_weeks',
        verbose_name=_('test')
    )
    comments = models.TextField(_('comments'), blank=True)

    class Meta:
        verbose_name = _('Progress Week')
        verbose_name_plural = _('Progress Weeks')
        ordering = ['progress', 'week']
        constraints = [
            models.UniqueConstraint(fields=['progress', 'week'], name='unique_progress_week'),
            models.CheckConstraint(condition=models.Q(week__gte=1), name='progress_week_positive'),
        ]

    def __str__(self):
        return f"{self.progress} - Week {self.week}"

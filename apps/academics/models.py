# apps/academics/models.py

from datetime import timedelta

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils.translation import gettext_lazy as _
from django.core.exceptions import ValidationError

from apps.core.models import CoreBaseModel
from apps.core.timeutils import minute_range, format_hhmm
from apps.users.models import User


class Term(CoreBaseModel):
    """
    A fixed-length scheduling period (school term or holiday) anchored to a
    Saturday start date. Weeks run Saturday to Friday.
    """
    class TermType(models.TextChoices):
        SCHOOL_TERM = 'school_term', _('School Term')
        HOLIDAY = 'holiday', _('Holiday')

    DEFAULT_WEEKS = {
        TermType.SCHOOL_TERM: 10,
        TermType.HOLIDAY: 2,
    }

    # date.weekday() value every term starts on
    START_WEEKDAY = 5

    name = models.CharField(_('term name'), max_length=100, unique=True)
    term_type = models.CharField(
        _('term type'),
        max_length=20,
        choices=TermType.choices,
        default=TermType.SCHOOL_TERM
    )
    start_date = models.DateField(_('start date'))
    weeks = models.PositiveSmallIntegerField(
        _('number of weeks'),
        validators=[MinValueValidator(1), MaxValueValidator(52)],
        blank=True,
        help_text=_('Defaults to 10 for school terms and 2 for holidays.')
    )
    is_first_term_of_year = models.BooleanField(
        _('is first term of year'),
        default=False,
        help_text=_('Activating this term advances every active student by one year level.')
    )
    is_current = models.BooleanField(_('is current term'), default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_terms',
        verbose_name=_('created by')
    )

    class Meta:
        verbose_name = _('Term')
        verbose_name_plural = _('Terms')
        ordering = ['-start_date']
        constraints = [
            models.UniqueConstraint(
                fields=['is_current'],
                condition=models.Q(is_current=True),
                name='single_current_term'
            ),
            models.CheckConstraint(
                condition=models.Q(weeks__gte=1) & models.Q(weeks__lte=52),
                name='term_weeks_range'
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.start_date and self.start_date.weekday() != self.START_WEEKDAY:
            raise ValidationError({
                'start_date': ValidationError(_('Terms must start on a Saturday.'), code='start_not_saturday'),
            })

    def save(self, *args, **kwargs):
        if not self.weeks:
            self.weeks = self.DEFAULT_WEEKS.get(self.term_type, 10)
        super().save(*args, **kwargs)

    @property
    def end_date(self):
        """Last day (Friday) of the term."""
        return self.start_date + timedelta(days=self.weeks * 7 - 1)

    @property
    def is_holiday(self):
        return self.term_type == self.TermType.HOLIDAY


class Classroom(CoreBaseModel):
    """
    Physical room shared by classes and detention sessions.
    """
    name = models.CharField(_('classroom name'), max_length=100)
    capacity = models.PositiveIntegerField(
        _('capacity'),
        validators=[MinValueValidator(1)]
    )
    is_active = models.BooleanField(_('is active'), default=True)

    class Meta:
        verbose_name = _('Classroom')
        verbose_name_plural = _('Classrooms')
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(capacity__gte=1),
                name='classroom_capacity_positive'
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.capacity})"


class Class(CoreBaseModel):
    """
    A recurring weekly class held in one classroom during one term.
    """
    name = models.CharField(_('class name'), max_length=200)
    year = models.CharField(
        _('year level'),
        max_length=10,
        choices=User.YearLevel.choices
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='teaching_classes',
        verbose_name=_('teacher')
    )
    classroom = models.ForeignKey(
        Classroom,
        on_delete=models.PROTECT,
        related_name='classes',
        verbose_name=_('classroom')
    )
    term = models.ForeignKey(
        Term,
        on_delete=models.CASCADE,
        related_name='classes',
        verbose_name=_('term')
    )
    students = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through='Enrollment',
        related_name='enrolled_classes',
        blank=True,
        verbose_name=_('students')
    )
    progress = models.ForeignKey(
        'curriculum.Progress',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='classes',
        verbose_name=_('progress plan')
    )
    copy_to_next_term = models.BooleanField(_('copy to next term'), default=False)
    is_active = models.BooleanField(_('is active'), default=True)

    class Meta:
        verbose_name = _('Class')
        verbose_name_plural = _('Classes')
        ordering = ['name']
        indexes = [
            models.Index(fields=['term', 'teacher'], name='class_term_teacher_idx'),
            models.Index(fields=['term', 'is_active'], name='class_term_active_idx'),
            models.Index(fields=['classroom', 'term', 'is_active'], name='class_room_term_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def schedule(self):
        return list(self.schedule_entries.all())


class Enrollment(CoreBaseModel):
    """
    A student's place in a class.
    """
    class_ref = models.ForeignKey(
        Class,
        on_delete=models.CASCADE,
        related_name='enrollments',
        verbose_name=_('class')
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='enrollments',
        verbose_name=_('student')
    )
    joined_week = models.PositiveSmallIntegerField(
        _('joined in week'),
        default=1,
        validators=[MinValueValidator(1)]
    )
    school_test_results = models.CharField(_('school test results'), max_length=255, blank=True)

    class Meta:
        verbose_name = _('Enrollment')
        verbose_name_plural = _('Enrollments')
        ordering = ['class_ref', 'student']
        constraints = [
            models.UniqueConstraint(fields=['class_ref', 'student'], name='unique_enrollment'),
            models.CheckConstraint(condition=models.Q(joined_week__gte=1), name='enrollment_joined_week_positive'),
        ]

    def __str__(self):
        return f"{self.student} in {self.class_ref}"


class ClassScheduleEntry(CoreBaseModel):
    """
    One weekly meeting of a class: a weekday, a start time and a duration.
    """
    class DayOfWeek(models.IntegerChoices):
        SUNDAY = 0, _('Sunday')
        MONDAY = 1, _('Monday')
        TUESDAY = 2, _('Tuesday')
        WEDNESDAY = 3, _('Wednesday')
        THURSDAY = 4, _('Thursday')
        FRIDAY = 5, _('Friday')
        SATURDAY = 6, _('Saturday')

    class_ref = models.ForeignKey(
        Class,
        on_delete=models.CASCADE,
        related_name='schedule_entries',
        verbose_name=_('class')
    )
    order = models.PositiveSmallIntegerField(_('order'), default=0)
    day_of_week = models.PositiveSmallIntegerField(
        _('day of week'),
        choices=DayOfWeek.choices,
        validators=[MaxValueValidator(6)]
    )
    start_time = models.TimeField(_('start time'))
    duration_minutes = models.PositiveIntegerField(
        _('duration (minutes)'),
        validators=[MinValueValidator(30)]
    )

    class Meta:
        verbose_name = _('Class Schedule Entry')
        verbose_name_plural = _('Class Schedule Entries')
        ordering = ['class_ref', 'order']
        indexes = [
            models.Index(fields=['day_of_week', 'start_time'], name='schedule_day_start_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(day_of_week__lte=6),
                name='schedule_day_of_week_range'
            ),
            models.CheckConstraint(
                condition=models.Q(duration_minutes__gte=30),
                name='schedule_min_duration'
            ),
        ]

    def __str__(self):
        return f"{self.class_ref} - {self.get_day_of_week_display()} {format_hhmm(self.start_time)}"

    def clean(self):
        if self.duration_minutes is not None and self.duration_minutes < 30:
            raise ValidationError(_('Classes must run for at least 30 minutes.'))
        if self.start_time and self.duration_minutes and minute_range(self.start_time, self.duration_minutes).end > 24 * 60:
            raise ValidationError(_('A class cannot run past midnight.'))

    @property
    def minute_range(self):
        return minute_range(self.start_time, self.duration_minutes)


class ClassWeek(CoreBaseModel):
    """
    What happened in one week of a class: attendance, homework and test marks.
    """
    class_ref = models.ForeignKey(
        Class,
        on_delete=models.CASCADE,
        related_name='weeks',
        verbose_name=_('class')
    )
    week = models.PositiveSmallIntegerField(_('week'), validators=[MinValueValidator(1)])
    test = models.ForeignKey(
        'curriculum.ClassTest',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='class_weeks',
        verbose_name=_('test')
    )

    class Meta:
        verbose_name = _('Class Week')
        verbose_name_plural = _('Class Weeks')
        ordering = ['class_ref', 'week']
        constraints = [
            models.UniqueConstraint(fields=['class_ref', 'week'], name='unique_class_week'),
            models.CheckConstraint(condition=models.Q(week__gte=1), name='class_week_positive'),
        ]

    def __str__(self):
        return f"{self.class_ref} - Week {self.week}"


class AttendanceRecord(CoreBaseModel):
    class Status(models.TextChoices):
        ARRIVED = 'arrived', _('Arrived')
        ABSENT = 'absent', _('Absent')

    class_week = models.ForeignKey(
        ClassWeek,
        on_delete=models.CASCADE,
        related_name='attendance',
        verbose_name=_('class week')
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='attendance_records',
        verbose_name=_('student')
    )
    status = models.CharField(_('status'), max_length=10, choices=Status.choices)

    class Meta:
        verbose_name = _('Attendance Record')
        verbose_name_plural = _('Attendance Records')
        ordering = ['class_week', 'student']
        constraints = [
            models.UniqueConstraint(fields=['class_week', 'student'], name='unique_attendance_record'),
            models.CheckConstraint(condition=models.Q(status__in=['arrived', 'absent']), name='attendance_status_valid'),
        ]

    def __str__(self):
        return f"{self.student} {self.status} ({self.class_week})"


class HomeworkGrade(CoreBaseModel):
    class Grade(models.TextChoices):
        A = 'A', 'A'
        B = 'B', 'B'
        C = 'C', 'C'
        D = 'D', 'D'
        E = 'E', 'E'
        INCOMPLETE = 'incomplete', _('Incomplete')
        MISSING = 'missing', _('Missing')
        ABSENT = 'absent', _('Absent')

    class_week = models.ForeignKey(
        ClassWeek,
        on_delete=models.CASCADE,
        related_name='homework',
        verbose_name=_('class week')
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='homework_grades',
        verbose_name=_('student')
    )
    grade = models.CharField(_('grade'), max_length=10, choices=Grade.choices)
    comments = models.TextField(_('comments'), blank=True)

    class Meta:
        verbose_name = _('Homework Grade')
        verbose_name_plural = _('Homework Grades')
        ordering = ['class_week', 'student']
        constraints = [
            models.UniqueConstraint(fields=['class_week', 'student'], name='unique_homework_grade'),
            models.CheckConstraint(
                condition=models.Q(grade__in=['A', 'B', 'C', 'D', 'E', 'incomplete', 'missing', 'absent']),
                name='homework_grade_valid'
            ),
        ]

    def __str__(self):
        return f"{self.student} {self.grade} ({self.class_week})"


class ClassTestMark(CoreBaseModel):
    """
    A student's mark in the test sat during a class week.
    """
    class_week = models.ForeignKey(
        ClassWeek,
        on_delete=models.CASCADE,
        related_name='test_marks',
        verbose_name=_('class week')
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='test_marks',
        verbose_name=_('student')
    )
    mark = models.DecimalField(
        _('mark'),
        max_digits=6,
        decimal_places=2,
        validators=[MinValueValidator(0)]
    )

    class Meta:
        verbose_name = _('Test Mark')
        verbose_name_plural = _('Test Marks')
        ordering = ['class_week', 'student']
        constraints = [
            models.UniqueConstraint(fields=['class_week', 'student'], name='unique_test_mark'),
            models.CheckConstraint(condition=models.Q(mark__gte=0), name='test_mark_non_negative'),
        ]

    def __str__(self):
        return f"{self.student} {self.mark} ({self.class_week})"

# apps/academics/services.py
"""
Timetable services: weekly conflict detection, class writes and the term clock.
"""

import logging
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import ProtectedError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.audit.models import AuditLog
from apps.audit.services import record_operation
from apps.communication.models import Notification
from apps.communication.services import NotificationService
from apps.core.exceptions import (
    CurrentTermInvariantViolation,
    NotFound,
    ScheduleConflict,
)
from apps.core.timeutils import format_12h, minute_range, overlaps, parse_hhmm
from apps.users.models import User

from .models import (
    AttendanceRecord, Class, ClassScheduleEntry, Classroom, ClassTestMark, ClassWeek, Enrollment,
    HomeworkGrade, Term,
)

logger = logging.getLogger(__name__)

DAY_ABBREVIATIONS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

# Allowed number of weekly entries per class, by term type.
SCHEDULE_SHAPE = {
    Term.TermType.SCHOOL_TERM: (1, 1),
    Term.TermType.HOLIDAY: (1, 3),
}

MAX_TEST_MARK = Decimal('9999.99')


@dataclass(frozen=True)
class ScheduleSlot:
    """A candidate weekly interval: weekday (0=Sunday), start time and duration."""
    day_of_week: int
    start_time: time
    duration_minutes: int

    @classmethod
    def coerce(cls, value):
        """
        Build a validated slot from a ``ScheduleSlot``, a ``ClassScheduleEntry``
        or a mapping with ``day_of_week``, ``start_time`` and ``duration_minutes``.
        """
        if isinstance(value, cls):
            data = {
                'day_of_week': value.day_of_week,
                'start_time': value.start_time,
                'duration_minutes': value.duration_minutes,
            }
        elif isinstance(value, ClassScheduleEntry):
            data = {
                'day_of_week': value.day_of_week,
                'start_time': value.start_time,
                'duration_minutes': value.duration_minutes,
            }
        else:
            try:
                data = {
                    'day_of_week': value['day_of_week'],
                    'start_time': value['start_time'],
                    'duration_minutes': value['duration_minutes'],
                }
            except (KeyError, TypeError):
                raise ValidationError(
                    _('Each schedule entry needs day_of_week, start_time and duration_minutes.'),
                    code='invalid_interval',
                )

        try:
            day_of_week = int(data['day_of_week'])
            duration = int(data['duration_minutes'])
        except (TypeError, ValueError):
            raise ValidationError(_('Weekday and duration must be whole numbers.'), code='invalid_interval')

        if not 0 <= day_of_week <= 6:
            raise ValidationError(_('Weekday must be between 0 (Sunday) and 6 (Saturday).'), code='invalid_interval')
        if duration < 30:
            raise ValidationError(_('Classes must run for at least 30 minutes.'), code='invalid_interval')

        start = parse_hhmm(data['start_time'])
        if minute_range(start, duration).end > 24 * 60:
            raise ValidationError(_('A class cannot run past midnight.'), code='invalid_interval')

        return cls(day_of_week=day_of_week, start_time=start, duration_minutes=duration)

    @property
    def minute_range(self):
        return minute_range(self.start_time, self.duration_minutes)


@dataclass(frozen=True)
class ConflictResult:
    conflict: bool
    conflicting_class_name: Optional[str] = None


@dataclass
class RolloverReport:
    advanced: int = 0
    graduated: int = 0
    failures: List[dict] = field(default_factory=list)

    def as_dict(self):
        return {
            'advanced': self.advanced,
            'graduated': self.graduated,
            'failures': self.failures,
        }


@dataclass
class ActivationResult:
    term: Term
    rollover: Optional[RolloverReport] = None


class ScheduleConflictChecker:
    """
    Detects overlapping weekly intervals between classes sharing a classroom
    in the same term. Read-only.
    """

    @staticmethod
    def check_conflict(candidate_intervals, classroom_id, term_id, exclude_class_id=None) -> ConflictResult:
        """
        Compare each candidate interval against the active classes already
        scheduled in the classroom for the term.

        Returns the first conflict found. Intervals that merely touch do not
        conflict.
        """
        slots = [ScheduleSlot.coerce(candidate) for candidate in candidate_intervals]

        if not Classroom.objects.filter(pk=classroom_id).exists():
            raise NotFound.for_model(Classroom, classroom_id)
        if not Term.objects.filter(pk=term_id).exists():
            raise NotFound.for_model(Term, term_id)

        for slot in slots:
            entries = ClassScheduleEntry.objects.filter(
                class_ref__classroom_id=classroom_id,
                class_ref__term_id=term_id,
                class_ref__is_active=True,
                day_of_week=slot.day_of_week,
            ).select_related('class_ref')
            if exclude_class_id is not None:
                entries = entries.exclude(class_ref_id=exclude_class_id)

            candidate = slot.minute_range
            for entry in entries:
                if overlaps(candidate, entry.minute_range):
                    return ConflictResult(conflict=True, conflicting_class_name=entry.class_ref.name)

        return ConflictResult(conflict=False)


class ClassService:
    """
    Service class for creating and changing timetabled classes.

    Writes lock the classroom row so two classes can never be placed into
    the same free interval concurrently.
    """

    UPDATABLE_FIELDS = ('name', 'year', 'teacher', 'classroom', 'term', 'progress', 'copy_to_next_term', 'is_active')

    @staticmethod
    def validate_schedule(term, schedule):
        """Coerce ``schedule`` into slots and enforce the per-term-type shape."""
        slots = [ScheduleSlot.coerce(entry) for entry in schedule or []]

        minimum, maximum = SCHEDULE_SHAPE.get(term.term_type, (1, 1))
        if not minimum <= len(slots) <= maximum:
            if term.term_type == Term.TermType.HOLIDAY:
                message = _('Holiday classes meet on 1 to 3 weekdays.')
            else:
                message = _('School term classes meet on exactly one weekday.')
            raise ValidationError(message, code='invalid_schedule')

        for index, slot in enumerate(slots):
            for other in slots[index + 1:]:
                if slot.day_of_week == other.day_of_week and overlaps(slot.minute_range, other.minute_range):
                    raise ValidationError(_('Schedule entries of one class overlap each other.'), code='invalid_schedule')
        return slots

    @staticmethod
    def generate_name(teacher, year, slots):
        primary = slots[0]
        return f"{teacher.display_name} {year} {DAY_ABBREVIATIONS[primary.day_of_week]} {format_12h(primary.start_time)}"

    @staticmethod
    def _lock_classrooms(*classroom_ids):
        """Lock classroom rows in a stable order."""
        locked = {}
        for classroom_id in sorted({str(pk) for pk in classroom_ids if pk is not None}):
            try:
                locked[classroom_id] = Classroom.objects.select_for_update().get(pk=classroom_id)
            except Classroom.DoesNotExist:
                raise NotFound.for_model(Classroom, classroom_id)
        return locked

    @staticmethod
    def _ensure_free(slots, classroom_id, term_id, exclude_class_id=None):
        result = ScheduleConflictChecker.check_conflict(slots, classroom_id, term_id, exclude_class_id)
        if result.conflict:
            logger.info(f"Rejected schedule in classroom {classroom_id}: conflicts with {result.conflicting_class_name}")
            raise ScheduleConflict(result.conflicting_class_name)

    @staticmethod
    def _write_schedule(klass, slots):
        klass.schedule_entries.all().delete()
        ClassScheduleEntry.objects.bulk_create([
            ClassScheduleEntry(
                class_ref=klass,
                order=order,
                day_of_week=slot.day_of_week,
                start_time=slot.start_time,
                duration_minutes=slot.duration_minutes,
            )
            for order, slot in enumerate(slots)
        ])

    @classmethod
    def create_class(cls, *, term, classroom, teacher, year, schedule, students=None,
                     name=None, progress=None, copy_to_next_term=False, is_active=True, actor=None):
        slots = cls.validate_schedule(term, schedule)

        with transaction.atomic():
            cls._lock_classrooms(classroom.pk)
            if is_active:
                cls._ensure_free(slots, classroom.pk, term.pk)

            klass = Class.objects.create(
                name=name or cls.generate_name(teacher, year, slots),
                year=year,
                teacher=teacher,
                classroom=classroom,
                term=term,
                progress=progress,
                copy_to_next_term=copy_to_next_term,
                is_active=is_active,
            )
            cls._write_schedule(klass, slots)
            if students:
                klass.students.set(students)

            record_operation(actor, AuditLog.ActionType.CREATE, 'Class', klass.pk, name=klass.name)

        logger.info(f"Class {klass.name} created in {classroom.name} for {term.name}")
        return klass

    @classmethod
    def update_class(cls, class_id, *, schedule=None, students=None, actor=None, **changes):
        unknown = set(changes) - set(cls.UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(_('Unknown class fields: %(fields)s'), params={'fields': ', '.join(sorted(unknown))})

        with transaction.atomic():
            try:
                klass = Class.objects.select_for_update().get(pk=class_id)
            except Class.DoesNotExist:
                raise NotFound.for_model(Class, class_id)

            previous_classroom_id = klass.classroom_id
            for field_name, value in changes.items():
                setattr(klass, field_name, value)

            term = klass.term
            if schedule is not None:
                slots = cls.validate_schedule(term, schedule)
            else:
                slots = [ScheduleSlot.coerce(entry) for entry in klass.schedule_entries.all()]
                if 'term' in changes:
                    cls.validate_schedule(term, slots)

            cls._lock_classrooms(previous_classroom_id, klass.classroom_id)
            if klass.is_active:
                cls._ensure_free(slots, klass.classroom_id, klass.term_id, exclude_class_id=klass.pk)

            if not klass.name:
                klass.name = cls.generate_name(klass.teacher, klass.year, slots)
            klass.save()
            if schedule is not None:
                cls._write_schedule(klass, slots)
            if students is not None:
                klass.students.set(students)

            record_operation(
                actor, AuditLog.ActionType.UPDATE, 'Class', klass.pk,
                fields=sorted(list(changes) + (['schedule'] if schedule is not None else [])),
            )

        return klass

    @classmethod
    def copy_to_next_term(cls, class_id, next_term_id, actor=None):
        """
        Copy a class with its schedule and roster into another term.
        The copy is conflict-checked in the target term.
        """
        try:
            original = Class.objects.select_related('term', 'teacher', 'classroom').get(pk=class_id)
        except Class.DoesNotExist:
            raise NotFound.for_model(Class, class_id)
        try:
            next_term = Term.objects.get(pk=next_term_id)
        except Term.DoesNotExist:
            raise NotFound.for_model(Term, next_term_id)

        copy = cls.create_class(
            term=next_term,
            classroom=original.classroom,
            teacher=original.teacher,
            year=original.year,
            schedule=list(original.schedule_entries.all()),
            students=list(original.students.all()),
            name=original.name,
            copy_to_next_term=original.copy_to_next_term,
            actor=actor,
        )
        logger.info(f"Copied class {original.name} from {original.term.name} to {next_term.name}")
        return copy

    @staticmethod
    def _get_class(class_id, lock=False):
        queryset = Class.objects.select_for_update() if lock else Class.objects.all()
        try:
            return queryset.get(pk=class_id)
        except Class.DoesNotExist:
            raise NotFound.for_model(Class, class_id)

    @staticmethod
    def _check_week(term, week):
        if isinstance(week, bool) or not isinstance(week, int) or not 1 <= week <= term.weeks:
            raise ValidationError(
                _('Week %(week)s is outside %(term)s.'),
                code='invalid_week',
                params={'week': week, 'term': term.name},
            )

    @classmethod
    def add_student(cls, class_id, student, joined_week=1, school_test_results=''):
        with transaction.atomic():
            klass = cls._get_class(class_id, lock=True)
            if not student.is_student:
                raise ValidationError(_('Only students can be enrolled in a class.'), code='not_a_student')
            if klass.enrollments.filter(student=student).exists():
                raise ValidationError(_('Student already in this class.'), code='already_enrolled')
            cls._check_week(klass.term, joined_week)
            Enrollment.objects.create(
                class_ref=klass,
                student=student,
                joined_week=joined_week,
                school_test_results=school_test_results or '',
            )
        return klass

    @classmethod
    def update_enrollment(cls, class_id, student, joined_week=None, school_test_results=None):
        """Change the week a student joined in or their recorded school results."""
        with transaction.atomic():
            klass = cls._get_class(class_id, lock=True)
            try:
                enrollment = klass.enrollments.select_for_update().get(student=student)
            except Enrollment.DoesNotExist:
                raise ValidationError(_('Student is not in this class.'), code='not_enrolled')

            if joined_week is not None:
                cls._check_week(klass.term, joined_week)
                enrollment.joined_week = joined_week
            if school_test_results is not None:
                enrollment.school_test_results = school_test_results
            enrollment.save()
        return enrollment

    @classmethod
    def remove_student(cls, class_id, student):
        klass = cls._get_class(class_id)
        klass.students.remove(student)
        return klass

    @classmethod
    def _class_week(cls, class_id, week):
        klass = cls._get_class(class_id, lock=True)
        cls._check_week(klass.term, week)
        class_week, _created = ClassWeek.objects.get_or_create(class_ref=klass, week=week)
        return class_week

    @staticmethod
    def _roster_entries(class_week, entries):
        """
        Pair each entry with its student id. Every student must be enrolled
        in the class and appear at most once.
        """
        enrolled = {
            str(pk) for pk in Enrollment.objects.filter(class_ref_id=class_week.class_ref_id).values_list('student_id', flat=True)
        }
        seen = set()
        paired = []
        for entry in entries:
            student = entry.get('student')
            student_id = str(getattr(student, 'pk', student))
            if student_id not in enrolled:
                raise ValidationError(
                    _('Student %(student)s is not in this class.'),
                    code='not_enrolled',
                    params={'student': student_id},
                )
            if student_id in seen:
                raise ValidationError(
                    _('Student %(student)s appears more than once.'),
                    code='duplicate_student',
                    params={'student': student_id},
                )
            seen.add(student_id)
            paired.append((student_id, entry))
        return paired

    @classmethod
    def mark_attendance(cls, class_id, week, records, actor=None):
        """
        Replace the attendance taken for ``week`` with ``records``, a list of
        ``{'student': ..., 'status': 'arrived' | 'absent'}``.
        """
        with transaction.atomic():
            class_week = cls._class_week(class_id, week)
            rows = []
            for student_id, entry in cls._roster_entries(class_week, records):
                status = entry.get('status')
                if status not in AttendanceRecord.Status.values:
                    raise ValidationError(
                        _('Unknown attendance status %(status)s.'),
                        code='invalid_attendance_status',
                        params={'status': status},
                    )
                rows.append(AttendanceRecord(class_week=class_week, student_id=student_id, status=status))

            class_week.attendance.all().delete()
            AttendanceRecord.objects.bulk_create(rows)
            record_operation(
                actor, AuditLog.ActionType.UPDATE, 'Class', class_week.class_ref_id,
                operation='mark_attendance', week=week, count=len(rows),
            )

        logger.info(f"Attendance for class {class_week.class_ref_id} week {week} recorded ({len(rows)} students)")
        return class_week

    @classmethod
    def grade_homework(cls, class_id, week, grades, actor=None):
        with transaction.atomic():
            class_week = cls._class_week(class_id, week)
            rows = []
            for student_id, entry in cls._roster_entries(class_week, grades):
                grade = entry.get('grade')
                if grade not in HomeworkGrade.Grade.values:
                    raise ValidationError(
                        _('Unknown homework grade %(grade)s.'),
                        code='invalid_grade',
                        params={'grade': grade},
                    )
                rows.append(HomeworkGrade(
                    class_week=class_week,
                    student_id=student_id,
                    grade=grade,
                    comments=entry.get('comments') or '',
                ))

            class_week.homework.all().delete()
            HomeworkGrade.objects.bulk_create(rows)
            record_operation(
                actor, AuditLog.ActionType.UPDATE, 'Class', class_week.class_ref_id,
                operation='grade_homework', week=week, count=len(rows),
            )

        logger.info(f"Homework for class {class_week.class_ref_id} week {week} graded ({len(rows)} students)")
        return class_week

    @classmethod
    def enter_test_marks(cls, class_id, week, test, marks, actor=None):
        """
        Record the test sat in ``week`` and replace its marks. Marks are
        decimals between 0 and 9999.99.
        """
        with transaction.atomic():
            class_week = cls._class_week(class_id, week)
            rows = []
            for student_id, entry in cls._roster_entries(class_week, marks):
                try:
                    mark = Decimal(str(entry.get('mark')))
                except InvalidOperation:
                    mark = None
                if mark is None or not mark.is_finite() or not 0 <= mark <= MAX_TEST_MARK:
                    raise ValidationError(
                        _('Invalid mark %(mark)s.'),
                        code='invalid_mark',
                        params={'mark': entry.get('mark')},
                    )
                rows.append(ClassTestMark(
                    class_week=class_week,
                    student_id=student_id,
                    mark=mark.quantize(Decimal('0.01')),
                ))

            class_week.test = test
            class_week.save(update_fields=['test', 'updated_at'])
            class_week.test_marks.all().delete()
            ClassTestMark.objects.bulk_create(rows)
            record_operation(
                actor, AuditLog.ActionType.UPDATE, 'Class', class_week.class_ref_id,
                operation='enter_test_marks', week=week, count=len(rows),
                test=str(test.pk) if test is not None else None,
            )

        logger.info(f"Test marks for class {class_week.class_ref_id} week {week} entered ({len(rows)} students)")
        return class_week

    @classmethod
    def weekly_records(cls, class_id):
        klass = cls._get_class(class_id)
        return (
            klass.weeks.select_related('test')
            .prefetch_related('attendance', 'homework', 'test_marks')
            .order_by('week')
        )

    @staticmethod
    def todays_classes(today=None):
        """Active classes of the current term meeting on today's weekday."""
        term = TermClock.current_term()
        if term is None:
            return Class.objects.none()

        today = today or timezone.localdate()
        # date.weekday() counts from Monday; schedule entries count from Sunday.
        day_of_week = (today.weekday() + 1) % 7
        return (
            Class.objects.filter(term=term, is_active=True, schedule_entries__day_of_week=day_of_week)
            .select_related('teacher', 'classroom', 'term')
            .prefetch_related('students', 'schedule_entries')
            .distinct()
        )


class TermClock:
    """
    Current term, current week and term activation.
    """

    @staticmethod
    def current_term() -> Optional[Term]:
        return Term.objects.filter(is_current=True).first()

    @staticmethod
    def current_week(term=None, today=None) -> Optional[int]:
        """
        Week number of ``today`` within ``term`` (the current term by default),
        clamped to ``[1, term.weeks]``.
        """
        term = term or TermClock.current_term()
        if term is None:
            return None
        today = today or timezone.localdate()
        week = (today - term.start_date).days // 7 + 1
        return min(max(week, 1), term.weeks)

    @staticmethod
    def week_info(today=None):
        """
        Describe where ``today`` falls: the current term (with its week number
        for school terms), otherwise the next upcoming term, otherwise nothing.
        """
        today = today or timezone.localdate()
        term = TermClock.current_term()
        if term is not None:
            info = {'status': 'current', 'term': term, 'week': None}
            if term.term_type == Term.TermType.SCHOOL_TERM:
                info['week'] = TermClock.current_week(term, today)
            return info

        upcoming = Term.objects.filter(start_date__gt=today).order_by('start_date').first()
        if upcoming is not None:
            return {'status': 'upcoming', 'term': upcoming, 'week': None}
        return {'status': 'none', 'term': None, 'week': None}

    @classmethod
    def activate(cls, term_id, initiated_by=None) -> ActivationResult:
        """
        Make ``term_id`` the single current term.

        When the term is the first of a school year, student year levels are
        rolled over once the activation has committed.
        """
        with transaction.atomic():
            try:
                term = Term.objects.select_for_update().get(pk=term_id)
            except Term.DoesNotExist:
                raise NotFound.for_model(Term, term_id)

            Term.objects.filter(is_current=True).exclude(pk=term.pk).update(is_current=False, updated_at=timezone.now())
            if not term.is_current:
                term.is_current = True
                term.save(update_fields=['is_current', 'updated_at'])

            record_operation(initiated_by, AuditLog.ActionType.UPDATE, 'Term', term.pk, operation='activate', name=term.name)

        logger.info(f"Term {term.name} activated by {initiated_by or 'system'}")

        for user in User.objects.filter(is_active=True, is_admin=True):
            NotificationService.notify(
                user,
                title=f'{term.name} is now the current term',
                message=f'{term.name} starts on {term.start_date:%d %b %Y} and runs for {term.weeks} weeks.',
                notification_type=Notification.NotificationType.TERM_ACTIVATED,
                send_email=False,
            )

        rollover = None
        if term.is_first_term_of_year:
            rollover = cls.rollover_student_years(initiated_by=initiated_by)
        return ActivationResult(term=term, rollover=rollover)

    @staticmethod
    def rollover_student_years(initiated_by=None) -> RolloverReport:
        """
        Advance every active student one year level. Students at a final
        year level graduate and are deactivated.

        Each student is updated in its own savepoint; a failure is recorded in
        the report and does not stop the run.
        """
        report = RolloverReport()

        for student in User.objects.active_students().order_by('pk'):
            try:
                graduates, next_year = student.next_year_level()
            except KeyError:
                logger.warning(f"Rollover skipped {student.email}: unknown year level '{student.year}'")
                report.failures.append({'student_id': str(student.pk), 'error': f"Unknown year level '{student.year}'"})
                continue

            try:
                with transaction.atomic():
                    if graduates:
                        student.is_active = False
                        student.save(update_fields=['is_active'])
                    else:
                        student.year = next_year
                        student.save(update_fields=['year'])
            except DatabaseError as e:
                logger.error(f"Rollover failed for {student.email}: {e}")
                report.failures.append({'student_id': str(student.pk), 'error': str(e)})
                continue

            if graduates:
                report.graduated += 1
            else:
                report.advanced += 1

        record_operation(
            initiated_by, AuditLog.ActionType.UPDATE, 'User',
            operation='rollover_student_years', **report.as_dict(),
        )
        logger.info(
            f"Student year rollover complete: {report.advanced} advanced, "
            f"{report.graduated} graduated, {len(report.failures)} failed"
        )
        return report

    @staticmethod
    def delete_term(term_id, actor=None):
        with transaction.atomic():
            try:
                term = Term.objects.select_for_update().get(pk=term_id)
            except Term.DoesNotExist:
                raise NotFound.for_model(Term, term_id)
            if term.is_current:
                raise CurrentTermInvariantViolation()
            name = term.name
            try:
                term.delete()
            except ProtectedError:
                raise ValidationError(_('Term still has detentions referencing its classes.'), code='term_in_use')
            record_operation(actor, AuditLog.ActionType.DELETE, 'Term', term_id, name=name)
        logger.info(f"Term {name} deleted")


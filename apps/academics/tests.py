# apps/academics/tests.py

from datetime import date, time
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DataError, IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from apps.audit.models import AuditLog
from apps.core.exceptions import CurrentTermInvariantViolation, NotFound, ScheduleConflict
from apps.curriculum.models import ClassTest
from apps.users.models import User
from .models import Term, Classroom, Class, ClassScheduleEntry, ClassWeek, Enrollment
from .services import ScheduleConflictChecker, ClassService, TermClock

# 3 January 2026 is a Saturday.
TERM_START = date(2026, 1, 3)


def slot(day_of_week, start_time, duration_minutes):
    return {'day_of_week': day_of_week, 'start_time': start_time, 'duration_minutes': duration_minutes}


class AcademicsFixtureMixin:
    """Shared users, a term and a classroom."""

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@example.com', password='testpass123', first_name='Ada', last_name='Admin', is_admin=True
        )
        self.teacher = User.objects.create_user(
            email='teacher@example.com', password='testpass123', first_name='Jane', last_name='Smith', is_teacher=True
        )
        self.student = User.objects.create_user(
            email='student@example.com', password='testpass123', first_name='Sam', is_student=True, year='Y9'
        )
        self.term = Term.objects.create(name='2026 Term 1', start_date=TERM_START)
        self.classroom = Classroom.objects.create(name='Room 1', capacity=2)

    def make_class(self, schedule, name=None, term=None, classroom=None, **kwargs):
        return ClassService.create_class(
            term=term or self.term,
            classroom=classroom or self.classroom,
            teacher=self.teacher,
            year='Y9',
            schedule=schedule,
            name=name,
            **kwargs
        )


class TermModelTestCase(TestCase):
    """Test cases for Term defaults and constraints"""

    def test_weeks_default_by_term_type(self):
        school_term = Term.objects.create(name='T1', start_date=TERM_START)
        holiday = Term.objects.create(name='H1', start_date=TERM_START, term_type=Term.TermType.HOLIDAY)

        self.assertEqual(school_term.weeks, 10)
        self.assertEqual(holiday.weeks, 2)
        self.assertEqual(holiday.end_date, date(2026, 1, 16))

    def test_explicit_weeks_kept(self):
        term = Term.objects.create(name='T1', start_date=TERM_START, weeks=11)
        self.assertEqual(term.weeks, 11)

    def test_start_date_must_be_a_saturday(self):
        # 5 January 2026 is a Monday.
        with self.assertRaises(ValidationError) as ctx:
            Term(name='T1', start_date=date(2026, 1, 5)).clean()
        self.assertIn('start_date', ctx.exception.message_dict)

        Term(name='T1', start_date=TERM_START).clean()

    def test_database_rejects_second_current_term(self):
        Term.objects.create(name='T1', start_date=TERM_START, is_current=True)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Term.objects.create(name='T2', start_date=date(2026, 4, 25), is_current=True)


class ScheduleConflictCheckerTestCase(AcademicsFixtureMixin, TestCase):
    """Test cases for weekly interval conflict detection"""

    def setUp(self):
        super().setUp()
        self.existing = self.make_class([slot(1, '16:00', 90)], name='Monday Maths')

    def check(self, *candidates, **kwargs):
        return ScheduleConflictChecker.check_conflict(list(candidates), self.classroom.pk, self.term.pk, **kwargs)

    def test_overlapping_interval_reports_class_name(self):
        result = self.check(slot(1, '17:00', 60))
        self.assertTrue(result.conflict)
        self.assertEqual(result.conflicting_class_name, 'Monday Maths')

    def test_touching_intervals_do_not_conflict(self):
        self.assertFalse(self.check(slot(1, '17:30', 60)).conflict)
        self.assertFalse(self.check(slot(1, '15:00', 60)).conflict)

    def test_enclosing_interval_conflicts(self):
        self.assertTrue(self.check(slot(1, '15:00', 240)).conflict)

    def test_other_weekday_is_free(self):
        self.assertFalse(self.check(slot(2, '16:00', 90)).conflict)

    def test_other_classroom_and_term_are_free(self):
        other_room = Classroom.objects.create(name='Room 2', capacity=10)
        other_term = Term.objects.create(name='2026 Term 2', start_date=date(2026, 4, 25))

        self.assertFalse(
            ScheduleConflictChecker.check_conflict([slot(1, '16:00', 90)], other_room.pk, self.term.pk).conflict
        )
        self.assertFalse(
            ScheduleConflictChecker.check_conflict([slot(1, '16:00', 90)], self.classroom.pk, other_term.pk).conflict
        )

    def test_inactive_classes_are_ignored(self):
        Class.objects.filter(pk=self.existing.pk).update(is_active=False)
        self.assertFalse(self.check(slot(1, '16:30', 60)).conflict)

    def test_excluded_class_is_ignored(self):
        self.assertFalse(self.check(slot(1, '16:30', 60), exclude_class_id=self.existing.pk).conflict)

    def test_second_candidate_can_conflict(self):
        result = self.check(slot(3, '10:00', 60), slot(1, '16:45', 30))
        self.assertTrue(result.conflict)

    def test_unknown_classroom_raises_not_found(self):
        with self.assertRaises(NotFound):
            ScheduleConflictChecker.check_conflict([slot(1, '16:00', 60)], '00000000-0000-0000-0000-000000000000', self.term.pk)

    def test_malformed_intervals_raise_validation_error(self):
        for candidate in (slot(1, '25:00', 60), slot(7, '16:00', 60), slot(1, '16:00', 20), {'day_of_week': 1}):
            with self.assertRaises(ValidationError):
                self.check(candidate)


class ClassServiceTestCase(AcademicsFixtureMixin, TestCase):
    """Test cases for class creation, updates and copying"""

    def test_name_generated_from_teacher_year_and_first_slot(self):
        klass = self.make_class([slot(1, '16:00', 90)])
        self.assertEqual(klass.name, 'Jane Smith Y9 Mon 4:00pm')

    def test_schedule_entries_persisted_in_order(self):
        holiday = Term.objects.create(name='Summer', start_date=date(2025, 12, 20), term_type=Term.TermType.HOLIDAY)
        klass = self.make_class([slot(1, '09:00', 120), slot(3, '09:00', 120), slot(5, '13:00', 60)], term=holiday)

        entries = list(klass.schedule_entries.order_by('order'))
        self.assertEqual([e.day_of_week for e in entries], [1, 3, 5])
        self.assertEqual(entries[2].start_time, time(13, 0))

    def test_school_term_class_needs_exactly_one_weekday(self):
        with self.assertRaises(ValidationError) as ctx:
            self.make_class([slot(1, '16:00', 60), slot(2, '16:00', 60)])
        self.assertEqual(ctx.exception.code, 'invalid_schedule')

        with self.assertRaises(ValidationError):
            self.make_class([])

    def test_holiday_class_allows_at_most_three_weekdays(self):
        holiday = Term.objects.create(name='Summer', start_date=date(2025, 12, 20), term_type=Term.TermType.HOLIDAY)
        with self.assertRaises(ValidationError):
            self.make_class([slot(d, '09:00', 60) for d in range(1, 5)], term=holiday)

    def test_conflicting_class_is_rejected(self):
        self.make_class([slot(1, '16:00', 90)], name='Monday Maths')

        with self.assertRaises(ScheduleConflict) as ctx:
            self.make_class([slot(1, '17:00', 60)])
        self.assertEqual(ctx.exception.conflicting_class_name, 'Monday Maths')
        self.assertEqual(Class.objects.count(), 1)

    def test_inactive_class_skips_conflict_check(self):
        self.make_class([slot(1, '16:00', 90)], name='Monday Maths')
        klass = self.make_class([slot(1, '16:00', 90)], name='Draft', is_active=False)
        self.assertFalse(klass.is_active)

    def test_update_does_not_conflict_with_itself(self):
        klass = self.make_class([slot(1, '16:00', 90)])
        updated = ClassService.update_class(klass.pk, schedule=[slot(1, '16:30', 90)])
        self.assertEqual(updated.schedule_entries.get().start_time, time(16, 30))

    def test_update_into_occupied_interval_is_rejected(self):
        self.make_class([slot(1, '16:00', 90)], name='Monday Maths')
        klass = self.make_class([slot(2, '16:00', 90)])

        with self.assertRaises(ScheduleConflict):
            ClassService.update_class(klass.pk, schedule=[slot(1, '16:00', 60)])
        self.assertEqual(klass.schedule_entries.get().day_of_week, 2)

    def test_reactivating_into_conflict_is_rejected(self):
        self.make_class([slot(1, '16:00', 90)], name='Monday Maths')
        draft = self.make_class([slot(1, '16:00', 90)], name='Draft', is_active=False)

        with self.assertRaises(ScheduleConflict):
            ClassService.update_class(draft.pk, is_active=True)

    def test_update_unknown_class_raises_not_found(self):
        with self.assertRaises(NotFound):
            ClassService.update_class('00000000-0000-0000-0000-000000000000', name='x')

    def test_copy_to_next_term_copies_schedule_and_roster(self):
        klass = self.make_class([slot(1, '16:00', 90)], students=[self.student], copy_to_next_term=True)
        next_term = Term.objects.create(name='2026 Term 2', start_date=date(2026, 4, 25))

        copy = ClassService.copy_to_next_term(klass.pk, next_term.pk)

        self.assertNotEqual(copy.pk, klass.pk)
        self.assertEqual(copy.term, next_term)
        self.assertEqual(copy.name, klass.name)
        self.assertEqual(list(copy.students.all()), [self.student])
        self.assertEqual(copy.schedule_entries.get().start_time, time(16, 0))

    def test_add_and_remove_student(self):
        klass = self.make_class([slot(1, '16:00', 90)])
        ClassService.add_student(klass.pk, self.student)
        self.assertTrue(klass.students.filter(pk=self.student.pk).exists())

        with self.assertRaises(ValidationError):
            ClassService.add_student(klass.pk, self.student)

        ClassService.remove_student(klass.pk, self.student)
        self.assertFalse(klass.students.exists())

    def test_todays_classes_uses_current_term_and_weekday(self):
        monday = self.make_class([slot(1, '16:00', 90)], name='Monday Maths')
        self.make_class([slot(2, '16:00', 90)], name='Tuesday Maths')
        TermClock.activate(self.term.pk)

        # 5 January 2026 is a Monday.
        self.assertEqual(list(ClassService.todays_classes(today=date(2026, 1, 5))), [monday])

    def test_todays_classes_empty_without_current_term(self):
        self.make_class([slot(1, '16:00', 90)])
        self.assertFalse(ClassService.todays_classes(today=date(2026, 1, 5)).exists())


class TermClockTestCase(AcademicsFixtureMixin, TestCase):
    """Test cases for the current term, current week and activation"""

    def test_current_week_is_clamped(self):
        self.assertEqual(TermClock.current_week(self.term, today=date(2026, 1, 12)), 2)
        self.assertEqual(TermClock.current_week(self.term, today=date(2025, 12, 1)), 1)
        self.assertEqual(TermClock.current_week(self.term, today=date(2026, 12, 1)), 10)

    def test_current_week_without_term(self):
        self.assertIsNone(TermClock.current_week())

    def test_activation_leaves_single_current_term(self):
        other = Term.objects.create(name='2026 Term 2', start_date=date(2026, 4, 25))
        TermClock.activate(self.term.pk)
        TermClock.activate(other.pk)

        self.assertEqual(list(Term.objects.filter(is_current=True)), [other])
        self.assertEqual(TermClock.current_term(), other)

    def test_activating_current_term_again_is_harmless(self):
        TermClock.activate(self.term.pk)
        result = TermClock.activate(self.term.pk)
        self.assertTrue(result.term.is_current)
        self.assertEqual(Term.objects.filter(is_current=True).count(), 1)

    def test_activation_without_first_term_flag_skips_rollover(self):
        result = TermClock.activate(self.term.pk)
        self.assertIsNone(result.rollover)
        self.student.refresh_from_db()
        self.assertEqual(self.student.year, 'Y9')

    def test_activate_unknown_term_raises_not_found(self):
        with self.assertRaises(NotFound):
            TermClock.activate('00000000-0000-0000-0000-000000000000')

    def test_first_term_of_year_rolls_students_over(self):
        first_term = Term.objects.create(name='2027 Term 1', start_date=date(2027, 1, 30), is_first_term_of_year=True)
        year_six = User.objects.create_user(email='y6@example.com', is_student=True, year='Y6')
        year_eleven = User.objects.create_user(email='y11@example.com', is_student=True, year='Y11')
        year_twelve = User.objects.create_user(email='y12@example.com', is_student=True, year='Y12')
        extension_one = User.objects.create_user(email='y12x1@example.com', is_student=True, year='Y12 3U')
        extension = User.objects.create_user(email='y12x@example.com', is_student=True, year='Y12 4U')
        departed = User.objects.create_user(email='gone@example.com', is_student=True, year='Y8', is_active=False)

        result = TermClock.activate(first_term.pk, initiated_by=self.admin)

        for user in (year_six, year_eleven, year_twelve, extension_one, extension, departed, self.student):
            user.refresh_from_db()
        self.assertEqual(year_six.year, 'Y7')
        self.assertEqual(self.student.year, 'Y10')
        self.assertEqual(year_eleven.year, 'Y12')
        self.assertTrue(year_eleven.is_active)
        self.assertFalse(year_twelve.is_active)
        self.assertFalse(extension_one.is_active)
        self.assertEqual(extension_one.year, 'Y12 3U')
        self.assertFalse(extension.is_active)
        self.assertEqual(departed.year, 'Y8')
        self.assertEqual(result.rollover.advanced, 3)
        self.assertEqual(result.rollover.graduated, 3)
        self.assertEqual(result.rollover.failures, [])
        self.assertTrue(
            AuditLog.objects.filter(details__operation='rollover_student_years', user=self.admin).exists()
        )

    def test_rollover_records_unknown_year_as_failure(self):
        no_year = User.objects.create_user(email='noyear@example.com', is_student=True)

        report = TermClock.rollover_student_years()

        self.assertEqual(report.advanced, 1)
        self.assertEqual(len(report.failures), 1)
        self.assertEqual(report.failures[0]['student_id'], str(no_year.pk))
        no_year.refresh_from_db()
        self.assertTrue(no_year.is_active)

    def test_rollover_continues_past_a_database_error(self):
        year_six = User.objects.create_user(email='y6@example.com', is_student=True, year='Y6')
        year_seven = User.objects.create_user(email='y7@example.com', is_student=True, year='Y7')
        year_eight = User.objects.create_user(email='y8@example.com', is_student=True, year='Y8')
        real_save = User.save

        def save_or_fail(user, *args, **kwargs):
            if user.pk == year_seven.pk:
                raise DataError('value too long for type character varying(10)')
            return real_save(user, *args, **kwargs)

        with mock.patch.object(User, 'save', autospec=True, side_effect=save_or_fail):
            report = TermClock.rollover_student_years()

        for user in (year_six, year_seven, year_eight):
            user.refresh_from_db()
        self.assertEqual(year_six.year, 'Y7')
        self.assertEqual(year_seven.year, 'Y7')
        self.assertEqual(year_eight.year, 'Y9')
        self.assertEqual(report.advanced, 3)
        self.assertEqual([failure['student_id'] for failure in report.failures], [str(year_seven.pk)])

    def test_current_term_cannot_be_deleted(self):
        TermClock.activate(self.term.pk)
        with self.assertRaises(CurrentTermInvariantViolation):
            TermClock.delete_term(self.term.pk)
        self.assertTrue(Term.objects.filter(pk=self.term.pk).exists())

    def test_non_current_term_can_be_deleted(self):
        TermClock.delete_term(self.term.pk)
        self.assertFalse(Term.objects.filter(pk=self.term.pk).exists())

    def test_week_info(self):
        info = TermClock.week_info(today=date(2025, 12, 1))
        self.assertEqual(info['status'], 'upcoming')
        self.assertEqual(info['term'], self.term)

        TermClock.activate(self.term.pk)
        info = TermClock.week_info(today=date(2026, 1, 12))
        self.assertEqual(info['status'], 'current')
        self.assertEqual(info['week'], 2)

    def test_week_info_none(self):
        self.assertEqual(TermClock.week_info(today=date(2027, 1, 1))['status'], 'none')


class AcademicsAPITestCase(AcademicsFixtureMixin, TestCase):
    """Test cases for the academics REST endpoints"""

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_create_class_generates_name(self):
        response = self.client.post('/api/academics/classes/', {
            'year': 'Y9',
            'teacher': str(self.teacher.pk),
            'classroom': str(self.classroom.pk),
            'term': str(self.term.pk),
            'schedule': [slot(1, '16:00', 90)],
            'students': [str(self.student.pk)],
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['name'], 'Jane Smith Y9 Mon 4:00pm')
        self.assertEqual(response.data['schedule'][0]['start_time'], '16:00')

    def test_conflicting_class_returns_409(self):
        self.make_class([slot(1, '16:00', 90)], name='Monday Maths')

        response = self.client.post('/api/academics/classes/', {
            'year': 'Y9',
            'teacher': str(self.teacher.pk),
            'classroom': str(self.classroom.pk),
            'term': str(self.term.pk),
            'schedule': [slot(1, '17:00', 60)],
        }, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'schedule_conflict')
        self.assertEqual(response.data['conflicting_class_name'], 'Monday Maths')

    def test_invalid_schedule_shape_returns_400(self):
        response = self.client.post('/api/academics/classes/', {
            'year': 'Y9',
            'teacher': str(self.teacher.pk),
            'classroom': str(self.classroom.pk),
            'term': str(self.term.pk),
            'schedule': [slot(1, '16:00', 60), slot(3, '16:00', 60)],
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'invalid_schedule')

    def test_check_conflict_endpoint(self):
        self.make_class([slot(1, '16:00', 90)], name='Monday Maths')

        response = self.client.post('/api/academics/classes/check-conflict/', {
            'classroom': str(self.classroom.pk),
            'term': str(self.term.pk),
            'schedule': [slot(1, '17:30', 60)],
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data['conflict'])

    def test_current_term_missing_returns_404(self):
        response = self.client.get('/api/academics/terms/current/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['code'], 'not_found')

    def test_activate_and_delete_current_term(self):
        response = self.client.post(f'/api/academics/terms/{self.term.pk}/activate/')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['term']['is_current'])

        response = self.client.delete(f'/api/academics/terms/{self.term.pk}/')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'current_term')

    def test_students_cannot_activate_terms(self):
        client = APIClient()
        client.force_authenticate(self.student)

        response = client.post(f'/api/academics/terms/{self.term.pk}/activate/')
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Term.objects.get(pk=self.term.pk).is_current)

    def test_create_term_defaults_weeks(self):
        response = self.client.post('/api/academics/terms/', {
            'name': 'Winter break',
            'term_type': 'holiday',
            'start_date': '2026-06-27',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['weeks'], 2)
        self.assertEqual(response.data['created_by'], self.admin.pk)

    def test_create_term_rejects_start_off_saturday(self):
        response = self.client.post('/api/academics/terms/', {
            'name': '2026 Term 2',
            'start_date': '2026-04-27',
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('start_date', response.data)
        self.assertFalse(Term.objects.filter(name='2026 Term 2').exists())

    def test_class_schedule_entry_str(self):
        klass = self.make_class([slot(1, '16:00', 90)], name='Monday Maths')
        self.assertEqual(str(ClassScheduleEntry.objects.get(class_ref=klass)), 'Monday Maths - Monday 16:00')


class ClassWeekRecordsTestCase(AcademicsFixtureMixin, TestCase):
    """Test cases for enrolment details and weekly attendance, homework and test marks"""

    def setUp(self):
        super().setUp()
        self.other_student = User.objects.create_user(
            email='other@example.com', password='testpass123', first_name='Olive', is_student=True, year='Y9'
        )
        self.klass = self.make_class([slot(1, '16:00', 90)], name='Monday Maths')
        ClassService.add_student(self.klass.pk, self.student, joined_week=3, school_test_results='Band 5')
        ClassService.add_student(self.klass.pk, self.other_student)

    def test_enrolment_records_joined_week_and_results(self):
        enrollment = Enrollment.objects.get(class_ref=self.klass, student=self.student)
        self.assertEqual(enrollment.joined_week, 3)
        self.assertEqual(enrollment.school_test_results, 'Band 5')
        self.assertEqual(Enrollment.objects.get(class_ref=self.klass, student=self.other_student).joined_week, 1)

        ClassService.update_enrollment(self.klass.pk, self.student, school_test_results='Band 6')
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.joined_week, 3)
        self.assertEqual(enrollment.school_test_results, 'Band 6')

    def test_joined_week_must_fall_within_the_term(self):
        with self.assertRaises(ValidationError) as ctx:
            ClassService.update_enrollment(self.klass.pk, self.student, joined_week=11)
        self.assertEqual(ctx.exception.code, 'invalid_week')

    def test_mark_attendance_replaces_the_week(self):
        ClassService.mark_attendance(self.klass.pk, 2, [
            {'student': self.student, 'status': 'arrived'},
            {'student': self.other_student, 'status': 'arrived'},
        ], actor=self.teacher)
        class_week = ClassService.mark_attendance(self.klass.pk, 2, [
            {'student': self.student, 'status': 'absent'},
        ], actor=self.teacher)

        self.assertEqual(ClassWeek.objects.filter(class_ref=self.klass).count(), 1)
        self.assertEqual(
            list(class_week.attendance.values_list('student_id', 'status')),
            [(self.student.pk, 'absent')],
        )
        self.assertTrue(
            AuditLog.objects.filter(details__operation='mark_attendance', user=self.teacher).exists()
        )

    def test_attendance_only_for_enrolled_students(self):
        outsider = User.objects.create_user(email='outsider@example.com', is_student=True, year='Y9')
        with self.assertRaises(ValidationError) as ctx:
            ClassService.mark_attendance(self.klass.pk, 1, [
                {'student': self.student, 'status': 'arrived'},
                {'student': outsider, 'status': 'arrived'},
            ])
        self.assertEqual(ctx.exception.code, 'not_enrolled')
        self.assertFalse(ClassWeek.objects.filter(class_ref=self.klass).exists())

    def test_attendance_rejects_repeated_student(self):
        with self.assertRaises(ValidationError) as ctx:
            ClassService.mark_attendance(self.klass.pk, 1, [
                {'student': self.student, 'status': 'arrived'},
                {'student': self.student.pk, 'status': 'absent'},
            ])
        self.assertEqual(ctx.exception.code, 'duplicate_student')

    def test_attendance_rejects_unknown_status_and_week(self):
        with self.assertRaises(ValidationError) as ctx:
            ClassService.mark_attendance(self.klass.pk, 1, [{'student': self.student, 'status': 'late'}])
        self.assertEqual(ctx.exception.code, 'invalid_attendance_status')

        with self.assertRaises(ValidationError) as ctx:
            ClassService.mark_attendance(self.klass.pk, 11, [{'student': self.student, 'status': 'arrived'}])
        self.assertEqual(ctx.exception.code, 'invalid_week')

    def test_grade_homework(self):
        class_week = ClassService.grade_homework(self.klass.pk, 4, [
            {'student': self.student, 'grade': 'B', 'comments': 'Show working'},
            {'student': self.other_student, 'grade': 'missing'},
        ])

        grades = {grade.student_id: grade for grade in class_week.homework.all()}
        self.assertEqual(grades[self.student.pk].grade, 'B')
        self.assertEqual(grades[self.student.pk].comments, 'Show working')
        self.assertEqual(grades[self.other_student.pk].comments, '')

        with self.assertRaises(ValidationError) as ctx:
            ClassService.grade_homework(self.klass.pk, 4, [{'student': self.student, 'grade': 'F'}])
        self.assertEqual(ctx.exception.code, 'invalid_grade')
        self.assertEqual(class_week.homework.count(), 2)

    def test_enter_test_marks(self):
        quiz = ClassTest.objects.create(name='Algebra quiz', year='Y9', term_label='T1')

        class_week = ClassService.enter_test_marks(self.klass.pk, 5, quiz, [
            {'student': self.student, 'mark': '17.5'},
            {'student': self.other_student, 'mark': 12},
        ])

        self.assertEqual(class_week.test, quiz)
        marks = dict(class_week.test_marks.values_list('student_id', 'mark'))
        self.assertEqual(marks[self.student.pk], Decimal('17.50'))
        self.assertEqual(marks[self.other_student.pk], Decimal('12.00'))

    def test_enter_test_marks_rejects_invalid_marks(self):
        for mark in (-1, 'ten', '10000'):
            with self.assertRaises(ValidationError) as ctx:
                ClassService.enter_test_marks(self.klass.pk, 5, None, [{'student': self.student, 'mark': mark}])
            self.assertEqual(ctx.exception.code, 'invalid_mark')
        self.assertFalse(ClassWeek.objects.filter(class_ref=self.klass, test_marks__isnull=False).exists())

    def test_weekly_records_are_ordered_by_week(self):
        ClassService.mark_attendance(self.klass.pk, 3, [{'student': self.student, 'status': 'arrived'}])
        ClassService.grade_homework(self.klass.pk, 1, [{'student': self.student, 'grade': 'A'}])

        self.assertEqual([week.week for week in ClassService.weekly_records(self.klass.pk)], [1, 3])

    def test_weekly_records_unknown_class(self):
        with self.assertRaises(NotFound):
            ClassService.weekly_records('00000000-0000-0000-0000-000000000000')


class ClassWeekAPITestCase(AcademicsFixtureMixin, TestCase):
    """Test cases for the weekly record and enrolment endpoints"""

    def setUp(self):
        super().setUp()
        self.klass = self.make_class([slot(1, '16:00', 90)], name='Monday Maths')
        ClassService.add_student(self.klass.pk, self.student)
        self.client = APIClient()
        self.client.force_authenticate(self.teacher)

    def test_teacher_marks_attendance(self):
        response = self.client.post(f'/api/academics/classes/{self.klass.pk}/attendance/', {
            'week': 2,
            'records': [{'student': str(self.student.pk), 'status': 'arrived'}],
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['week'], 2)
        self.assertEqual(response.data['attendance'][0]['status'], 'arrived')

    def test_students_cannot_record_weeks(self):
        client = APIClient()
        client.force_authenticate(self.student)

        response = client.post(f'/api/academics/classes/{self.klass.pk}/homework/', {
            'week': 2,
            'grades': [{'student': str(self.student.pk), 'grade': 'A'}],
        }, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertFalse(ClassWeek.objects.exists())

    def test_test_marks_endpoint_and_weeks_listing(self):
        quiz = ClassTest.objects.create(name='Algebra quiz', year='Y9', term_label='T1')

        response = self.client.post(f'/api/academics/classes/{self.klass.pk}/test-marks/', {
            'week': 5,
            'test': str(quiz.pk),
            'marks': [{'student': str(self.student.pk), 'mark': '18.00'}],
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['test_name'], 'Algebra quiz')

        response = self.client.get(f'/api/academics/classes/{self.klass.pk}/weeks/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['test_marks'][0]['mark'], '18.00')

    def test_week_outside_term_returns_400(self):
        response = self.client.post(f'/api/academics/classes/{self.klass.pk}/attendance/', {
            'week': 12,
            'records': [{'student': str(self.student.pk), 'status': 'arrived'}],
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'invalid_week')

    def test_admin_updates_enrolment(self):
        client = APIClient()
        client.force_authenticate(self.admin)

        response = client.patch(f'/api/academics/classes/{self.klass.pk}/students/', {
            'student': str(self.student.pk),
            'joined_week': 4,
            'school_test_results': 'Band 4',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['enrollments'][0]['joined_week'], 4)
        self.assertEqual(response.data['enrollments'][0]['school_test_results'], 'Band 4')

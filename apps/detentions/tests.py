# apps/detentions/tests.py

import threading
from collections import namedtuple
from datetime import date, time
from unittest import mock

from django.core import mail
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import IntegrityError, connection, transaction
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings
from rest_framework.test import APIClient

from apps.academics.models import Term, Classroom
from apps.academics.services import ClassService
from apps.audit.models import AuditLog
from apps.communication.models import Notification
from apps.core.exceptions import NotFound, SlotFull, SlotInUse
from apps.users.models import User
from . import slots
from .models import DetentionSlot, Detention
from .services import DetentionSlotStore, DetentionLifecycle

# 3 January 2026 is a Saturday.
TERM_START = date(2026, 1, 3)

TermLike = namedtuple('TermLike', ['term_type', 'start_date'])


class SlotResolverTestCase(SimpleTestCase):
    """Test cases for mapping grid coordinates onto dates and windows"""

    school_term = TermLike('school_term', TERM_START)
    holiday = TermLike('holiday', TERM_START)

    def test_week_two_monday_first_slot(self):
        window = slots.resolve(self.school_term, 2, 1, 0)
        self.assertEqual(window.date, date(2026, 1, 12))
        self.assertEqual((window.start_time, window.end_time), (time(16, 0), time(18, 30)))

    def test_weeks_run_saturday_to_friday(self):
        self.assertEqual(slots.resolve(self.school_term, 1, 6, 0).date, TERM_START)
        self.assertEqual(slots.resolve(self.school_term, 1, 0, 0).date, date(2026, 1, 4))
        self.assertEqual(slots.resolve(self.school_term, 1, 5, 0).date, date(2026, 1, 9))

    def test_second_school_term_window(self):
        window = slots.resolve(self.school_term, 1, 3, 1)
        self.assertEqual((window.start_time, window.end_time), (time(18, 30), time(21, 0)))

    def test_holiday_windows(self):
        self.assertEqual(slots.resolve(self.holiday, 1, 1, 0)[1:], (time(9, 0), time(12, 0)))
        self.assertEqual(slots.resolve(self.holiday, 1, 1, 1)[1:], (time(12, 30), time(15, 30)))

    def test_unknown_slot_number(self):
        with self.assertRaises(ValidationError) as ctx:
            slots.resolve(self.school_term, 1, 1, 2)
        self.assertEqual(ctx.exception.code, 'invalid_slot_number')

    def test_invalid_week_and_weekday(self):
        with self.assertRaises(ValidationError):
            slots.resolve(self.school_term, 0, 1, 0)
        with self.assertRaises(ValidationError):
            slots.resolve(self.school_term, 1, 7, 0)

    @override_settings(DETENTION_SLOT_WINDOWS={'school_term': [('15:00', '16:00')]})
    def test_windows_can_be_configured(self):
        window = slots.resolve(self.school_term, 1, 1, 0)
        self.assertEqual((window.start_time, window.end_time), (time(15, 0), time(16, 0)))
        with self.assertRaises(ValidationError):
            slots.resolve(self.school_term, 1, 1, 1)


class DetentionFixtureMixin:
    """Users, a term, a two-seat classroom and a class."""

    def setUp(self):
        self.admin = User.objects.create_user(email='admin@example.com', password='testpass123', is_admin=True)
        self.teacher = User.objects.create_user(
            email='teacher@example.com', password='testpass123', first_name='Jane', last_name='Smith', is_teacher=True
        )
        self.students = [
            User.objects.create_user(email=f'student{i}@example.com', password='testpass123', is_student=True, year='Y9')
            for i in range(3)
        ]
        self.term = Term.objects.create(name='2026 Term 1', start_date=TERM_START)
        self.classroom = Classroom.objects.create(name='Room 1', capacity=2)
        self.klass = ClassService.create_class(
            term=self.term, classroom=self.classroom, teacher=self.teacher, year='Y9',
            schedule=[{'day_of_week': 1, 'start_time': '16:00', 'duration_minutes': 90}],
        )

    def make_slot(self, day=date(2026, 1, 12), classroom=None):
        return DetentionSlotStore.create_explicit(day, '16:00', '18:30', (classroom or self.classroom).pk)

    def assign(self, student, week=1):
        return DetentionLifecycle.assign(self.klass, student, week, 'Homework not done', assigned_by=self.teacher)

    def booked_count(self, slot):
        return DetentionSlot.objects.get(pk=slot.pk).booked_count


class DetentionSlotStoreTestCase(DetentionFixtureMixin, TestCase):
    """Test cases for slot creation, toggling and seat counting"""

    def test_create_explicit_copies_classroom_capacity(self):
        slot = self.make_slot()
        self.assertEqual(slot.capacity, 2)
        self.assertEqual(slot.booked_count, 0)
        self.assertIsNone(slot.term)

    def test_create_explicit_rejects_inverted_window(self):
        with self.assertRaises(ValidationError):
            DetentionSlotStore.create_explicit(date(2026, 1, 12), '18:30', '16:00', self.classroom.pk)

    def test_create_explicit_unknown_classroom(self):
        with self.assertRaises(NotFound):
            DetentionSlotStore.create_explicit(
                date(2026, 1, 12), '16:00', '18:30', '00000000-0000-0000-0000-000000000000'
            )

    def test_create_batch(self):
        days = [date(2026, 1, 12), date(2026, 1, 13), date(2026, 1, 14)]
        created = DetentionSlotStore.create_batch(days, '16:00', '18:30', self.classroom.pk)
        self.assertEqual([s.date for s in created], days)
        self.assertEqual(DetentionSlot.objects.count(), 3)

    def test_create_batch_rejects_duplicate_dates(self):
        with self.assertRaises(ValidationError):
            DetentionSlotStore.create_batch([date(2026, 1, 12)] * 2, '16:00', '18:30', self.classroom.pk)
        self.assertFalse(DetentionSlot.objects.exists())

    def test_create_batch_rolls_back_when_a_date_fails(self):
        days = [date(2026, 1, 12), date(2026, 1, 13), date(2026, 1, 14)]
        real_create = DetentionSlot.objects.create

        def create_then_fail(**kwargs):
            if kwargs['date'] == days[1]:
                raise IntegrityError('duplicate slot')
            return real_create(**kwargs)

        with mock.patch.object(DetentionSlot.objects, 'create', side_effect=create_then_fail):
            with self.assertRaises(IntegrityError):
                DetentionSlotStore.create_batch(days, '16:00', '18:30', self.classroom.pk)

        self.assertEqual(DetentionSlot.objects.count(), 0)

    def test_enable_at_coordinate_is_idempotent(self):
        first, created = DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 2, 1, 0, created_by=self.admin)
        again, created_again = DetentionSlotStore.enable_at_coordinate(self.term.pk, self.classroom.pk, 2, 1, 0)

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(first.pk, again.pk)
        self.assertEqual(first.date, date(2026, 1, 12))
        self.assertEqual((first.start_time, first.end_time), (time(16, 0), time(18, 30)))
        self.assertEqual(first.week, 2)
        self.assertEqual(DetentionSlot.objects.count(), 1)
        self.assertEqual(AuditLog.objects.filter(model_name='DetentionSlot').count(), 1)

    def test_enable_at_coordinate_recovers_from_insert_race(self):
        existing, _created = DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 1, 3, 1)

        with mock.patch.object(DetentionSlot.objects, 'get_or_create', side_effect=IntegrityError):
            slot, created = DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 1, 3, 1)

        self.assertFalse(created)
        self.assertEqual(slot.pk, existing.pk)

    def test_database_rejects_duplicate_coordinate(self):
        DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 1, 1, 0)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                DetentionSlot.objects.create(
                    term=self.term, classroom=self.classroom, week=1, date=date(2026, 1, 5),
                    start_time=time(16, 0), end_time=time(18, 30), capacity=2,
                )

    def test_disable_at_coordinate(self):
        self.assertFalse(DetentionSlotStore.disable_at_coordinate(self.term, self.classroom, 1, 1, 0))

        DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 1, 1, 0)
        self.assertTrue(DetentionSlotStore.disable_at_coordinate(self.term, self.classroom, 1, 1, 0))
        self.assertFalse(DetentionSlot.objects.exists())

    def test_disable_booked_coordinate_raises_slot_in_use(self):
        slot, _created = DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 1, 1, 0)
        DetentionLifecycle.book(self.assign(self.students[0]).pk, slot.pk)

        with self.assertRaises(SlotInUse):
            DetentionSlotStore.disable_at_coordinate(self.term, self.classroom, 1, 1, 0)
        self.assertTrue(DetentionSlot.objects.filter(pk=slot.pk).exists())

    def test_reserve_until_full(self):
        slot = self.make_slot()
        DetentionSlotStore.reserve(slot.pk)
        DetentionSlotStore.reserve(slot.pk)

        with self.assertRaises(SlotFull) as ctx:
            DetentionSlotStore.reserve(slot.pk)
        self.assertEqual(ctx.exception.details['capacity'], 2)
        self.assertEqual(ctx.exception.details['booked_count'], 2)
        self.assertEqual(self.booked_count(slot), 2)

    def test_reserve_checks_the_stored_count_not_the_caller_copy(self):
        slot = self.make_slot()
        stale = DetentionSlot.objects.get(pk=slot.pk)
        DetentionSlotStore.reserve(slot.pk)
        DetentionSlotStore.reserve(slot.pk)

        self.assertEqual(stale.booked_count, 0)
        with self.assertRaises(SlotFull):
            DetentionSlotStore.reserve(stale.pk)

    def test_reserve_unknown_slot(self):
        with self.assertRaises(NotFound):
            DetentionSlotStore.reserve('00000000-0000-0000-0000-000000000000')

    def test_release_never_goes_below_zero(self):
        slot = self.make_slot()
        with self.assertLogs('apps.detentions.services', level='ERROR'):
            self.assertFalse(DetentionSlotStore.release(slot.pk))
        self.assertEqual(self.booked_count(slot), 0)

        DetentionSlotStore.reserve(slot.pk)
        self.assertTrue(DetentionSlotStore.release(slot.pk))
        self.assertEqual(self.booked_count(slot), 0)

    def test_database_rejects_overbooking(self):
        slot = self.make_slot()
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                DetentionSlot.objects.filter(pk=slot.pk).update(booked_count=3)

    def test_delete(self):
        slot = self.make_slot()
        DetentionSlotStore.reserve(slot.pk)
        with self.assertRaises(SlotInUse):
            DetentionSlotStore.delete(slot.pk)

        DetentionSlotStore.release(slot.pk)
        DetentionSlotStore.delete(slot.pk)
        self.assertFalse(DetentionSlot.objects.filter(pk=slot.pk).exists())

    def test_update_to_other_classroom_copies_capacity(self):
        slot = self.make_slot()
        big_room = Classroom.objects.create(name='Hall', capacity=30)

        updated = DetentionSlotStore.update(slot.pk, classroom_id=big_room.pk, start_time='15:30')
        self.assertEqual(updated.capacity, 30)
        self.assertEqual(updated.start_time, time(15, 30))

    def test_update_rejects_room_smaller_than_bookings(self):
        slot = self.make_slot()
        DetentionSlotStore.reserve(slot.pk)
        DetentionSlotStore.reserve(slot.pk)
        tiny_room = Classroom.objects.create(name='Office', capacity=1)

        with self.assertRaises(ValidationError) as ctx:
            DetentionSlotStore.update(slot.pk, classroom_id=tiny_room.pk)
        self.assertEqual(ctx.exception.code, 'capacity_below_bookings')
        self.assertEqual(DetentionSlot.objects.get(pk=slot.pk).classroom, self.classroom)

    def test_grid_and_available(self):
        late, _c = DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 2, 1, 1)
        early, _c = DetentionSlotStore.enable_at_coordinate(self.term, self.classroom, 1, 1, 0)
        self.assertEqual(list(DetentionSlotStore.grid(self.term.pk, self.classroom.pk)), [early, late])

        DetentionSlotStore.reserve(early.pk)
        DetentionSlotStore.reserve(early.pk)
        self.assertEqual(list(DetentionSlotStore.available()), [late])


class DetentionLifecycleTestCase(DetentionFixtureMixin, TestCase):
    """Test cases for assigning, booking and resolving detentions"""

    def test_assign(self):
        with self.captureOnCommitCallbacks(execute=True):
            detention = self.assign(self.students[0], week=3)

        self.assertEqual(detention.status, Detention.Status.ASSIGNED)
        self.assertEqual(detention.attempts, 0)
        self.assertIsNone(detention.booked_slot)
        self.assertEqual(detention.assigned_by, self.teacher)
        notification = Notification.objects.get(recipient=self.students[0])
        self.assertEqual(notification.notification_type, Notification.NotificationType.DETENTION_ASSIGNED)
        self.assertEqual(len(mail.outbox), 1)

    def test_assign_requires_a_student(self):
        with self.assertRaises(ValidationError):
            DetentionLifecycle.assign(self.klass, self.teacher, 1, 'Late', assigned_by=self.admin)

    def test_capacity_two_booking_scenario(self):
        slot = self.make_slot()
        first, second, third = (self.assign(student) for student in self.students)

        DetentionLifecycle.book(first.pk, slot.pk)
        DetentionLifecycle.book(second.pk, slot.pk)
        with self.assertRaises(SlotFull):
            DetentionLifecycle.book(third.pk, slot.pk)

        third.refresh_from_db()
        self.assertEqual(third.status, Detention.Status.ASSIGNED)
        self.assertIsNone(third.booked_slot)
        self.assertEqual(self.booked_count(slot), 2)

        DetentionLifecycle.resolve(first.pk, 'absent')
        first.refresh_from_db()
        self.assertEqual(first.status, Detention.Status.ASSIGNED)
        self.assertIsNone(first.booked_slot)
        self.assertEqual(first.attempts, 0)
        self.assertEqual(self.booked_count(slot), 1)

        DetentionLifecycle.book(third.pk, slot.pk)
        self.assertEqual(self.booked_count(slot), 2)
        self.assertEqual(Detention.objects.filter(booked_slot=slot).count(), 2)

    def test_rebooking_moves_the_seat(self):
        monday = self.make_slot(date(2026, 1, 12))
        tuesday = self.make_slot(date(2026, 1, 13))
        detention = self.assign(self.students[0])

        DetentionLifecycle.book(detention.pk, monday.pk)
        DetentionLifecycle.book(detention.pk, tuesday.pk)

        detention.refresh_from_db()
        self.assertEqual(detention.booked_slot, tuesday)
        self.assertEqual(self.booked_count(monday), 0)
        self.assertEqual(self.booked_count(tuesday), 1)

    def test_rebooking_into_full_slot_keeps_previous_booking(self):
        monday = self.make_slot(date(2026, 1, 12))
        tuesday = self.make_slot(date(2026, 1, 13))
        DetentionSlotStore.reserve(tuesday.pk)
        DetentionSlotStore.reserve(tuesday.pk)
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, monday.pk)

        with self.assertRaises(SlotFull):
            DetentionLifecycle.book(detention.pk, tuesday.pk)

        detention.refresh_from_db()
        self.assertEqual(detention.booked_slot, monday)
        self.assertEqual(detention.status, Detention.Status.BOOKED)
        self.assertEqual(self.booked_count(monday), 1)
        self.assertEqual(self.booked_count(tuesday), 2)

    def test_booking_the_held_slot_again_is_a_no_op(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)
        DetentionLifecycle.book(detention.pk, slot.pk)
        self.assertEqual(self.booked_count(slot), 1)

    def test_completed_detention_cannot_be_booked(self):
        slot = self.make_slot()
        other = self.make_slot(date(2026, 1, 13))
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)
        DetentionLifecycle.resolve(detention.pk, 'complete')

        with self.assertRaises(ValidationError):
            DetentionLifecycle.book(detention.pk, other.pk)
        self.assertEqual(self.booked_count(other), 0)

    def test_students_book_only_their_own_detentions(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])

        with self.assertRaises(PermissionDenied):
            DetentionLifecycle.book(detention.pk, slot.pk, actor=self.students[1])
        self.assertEqual(self.booked_count(slot), 0)

        DetentionLifecycle.book(detention.pk, slot.pk, actor=self.students[0])
        self.assertEqual(self.booked_count(slot), 1)

    def test_book_unknown_slot(self):
        detention = self.assign(self.students[0])
        with self.assertRaises(NotFound):
            DetentionLifecycle.book(detention.pk, '00000000-0000-0000-0000-000000000000')

    def test_resolve_complete_keeps_seat(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)

        detention = DetentionLifecycle.resolve(detention.pk, 'complete', actor=self.teacher)

        self.assertEqual(detention.status, Detention.Status.COMPLETED)
        self.assertEqual(detention.completion_status, 'complete')
        self.assertEqual(detention.attempts, 1)
        self.assertEqual(detention.booked_slot, slot)
        self.assertEqual(self.booked_count(slot), 1)

    def test_resolve_incomplete_releases_seat_and_counts_attempt(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)

        detention = DetentionLifecycle.resolve(detention.pk, 'incomplete')

        self.assertEqual(detention.status, Detention.Status.ASSIGNED)
        self.assertEqual(detention.completion_status, 'incomplete')
        self.assertEqual(detention.attempts, 1)
        self.assertIsNone(detention.booked_slot)
        self.assertEqual(self.booked_count(slot), 0)

    def test_resolve_rejects_unknown_status_without_changes(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)

        with self.assertRaises(ValidationError) as ctx:
            DetentionLifecycle.resolve(detention.pk, 'late')
        self.assertEqual(ctx.exception.code, 'invalid_completion_status')

        detention.refresh_from_db()
        self.assertEqual(detention.status, Detention.Status.BOOKED)
        self.assertEqual(self.booked_count(slot), 1)

    def test_resolve_requires_booked_detention(self):
        detention = self.assign(self.students[0])
        with self.assertRaises(ValidationError):
            DetentionLifecycle.resolve(detention.pk, 'complete')

    def test_delete_releases_seat(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)

        DetentionLifecycle.delete(detention.pk, actor=self.admin)

        self.assertFalse(Detention.objects.filter(pk=detention.pk).exists())
        self.assertEqual(self.booked_count(slot), 0)

    def test_resolve_reports_a_seat_that_could_not_be_given_back(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)
        DetentionSlot.objects.filter(pk=slot.pk).update(booked_count=0)

        with self.assertLogs('apps.detentions.services', level='ERROR') as logs:
            detention = DetentionLifecycle.resolve(detention.pk, 'absent', actor=self.teacher)

        self.assertTrue(any(str(detention.pk) in line for line in logs.output))
        self.assertEqual(detention.status, Detention.Status.ASSIGNED)
        self.assertEqual(self.booked_count(slot), 0)
        entry = AuditLog.objects.get(object_id=str(detention.pk), details__operation='resolve')
        self.assertTrue(entry.details['slot_release_failed'])

    def test_delete_reports_a_seat_that_could_not_be_given_back(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)
        DetentionSlot.objects.filter(pk=slot.pk).update(booked_count=0)

        with self.assertLogs('apps.detentions.services', level='ERROR') as logs:
            DetentionLifecycle.delete(detention.pk, actor=self.admin)

        self.assertTrue(any(str(detention.pk) in line for line in logs.output))
        entry = AuditLog.objects.get(action=AuditLog.ActionType.DELETE, object_id=str(detention.pk))
        self.assertTrue(entry.details['slot_release_failed'])

    def test_todays_and_unbooked(self):
        monday = self.make_slot(date(2026, 1, 12))
        booked = self.assign(self.students[0])
        waiting = self.assign(self.students[1])
        DetentionLifecycle.book(booked.pk, monday.pk)

        self.assertEqual(list(DetentionLifecycle.todays_detentions(today=date(2026, 1, 12))), [booked])
        self.assertFalse(DetentionLifecycle.todays_detentions(today=date(2026, 1, 13)).exists())
        self.assertEqual(list(DetentionLifecycle.unbooked()), [waiting])


class DetentionAPITestCase(DetentionFixtureMixin, TestCase):
    """Test cases for the detention REST endpoints"""

    def setUp(self):
        super().setUp()
        self.admin_client = APIClient()
        self.admin_client.force_authenticate(self.admin)
        self.student_client = APIClient()
        self.student_client.force_authenticate(self.students[0])

    def test_teacher_assigns_detention(self):
        client = APIClient()
        client.force_authenticate(self.teacher)
        response = client.post('/api/detentions/', {
            'class_ref': str(self.klass.pk),
            'student': str(self.students[0].pk),
            'week': 2,
            'reason': 'Homework not done',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], 'assigned')

    def test_students_cannot_assign(self):
        response = self.student_client.post('/api/detentions/', {
            'class_ref': str(self.klass.pk),
            'student': str(self.students[1].pk),
            'week': 2,
            'reason': 'x',
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_students_see_only_their_own_detentions(self):
        own = self.assign(self.students[0])
        self.assign(self.students[1])

        response = self.student_client.get('/api/detentions/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item['id'] for item in response.data], [str(own.pk)])

    def test_list_filters(self):
        self.assign(self.students[0])
        self.assign(self.students[1])

        response = self.admin_client.get('/api/detentions/', {'student': str(self.students[1].pk)})
        self.assertEqual(len(response.data), 1)
        response = self.admin_client.get('/api/detentions/', {'status': 'booked'})
        self.assertEqual(len(response.data), 0)

    def test_booking_full_slot_returns_409(self):
        slot = self.make_slot()
        DetentionSlotStore.reserve(slot.pk)
        DetentionSlotStore.reserve(slot.pk)
        detention = self.assign(self.students[0])

        response = self.student_client.post(f'/api/detentions/{detention.pk}/book/', {'slot': str(slot.pk)}, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'slot_full')
        self.assertEqual(response.data['capacity'], 2)

    def test_student_books_own_detention(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])

        response = self.student_client.post(f'/api/detentions/{detention.pk}/book/', {'slot': str(slot.pk)}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'booked')
        self.assertEqual(response.data['booked_slot']['start_time'], '16:00')

    def test_student_cannot_book_someone_elses_detention(self):
        slot = self.make_slot()
        detention = self.assign(self.students[1])

        response = self.student_client.post(f'/api/detentions/{detention.pk}/book/', {'slot': str(slot.pk)}, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['code'], 'permission_denied')

    def test_resolve_with_unknown_status_returns_400(self):
        slot = self.make_slot()
        detention = self.assign(self.students[0])
        DetentionLifecycle.book(detention.pk, slot.pk)

        response = self.admin_client.post(f'/api/detentions/{detention.pk}/resolve/', {'completion_status': 'late'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'invalid_completion_status')

    def test_unbooked_endpoint(self):
        self.assign(self.students[0])
        response = self.admin_client.get('/api/detentions/unbooked/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

    def test_toggle_slot(self):
        payload = {
            'term': str(self.term.pk), 'classroom': str(self.classroom.pk),
            'week': 2, 'day_of_week': 1, 'slot_number': 0, 'enable': True,
        }

        response = self.admin_client.post('/api/detentions/slots/toggle/', payload, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['slot']['date'], '2026-01-12')

        response = self.admin_client.post('/api/detentions/slots/toggle/', payload, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data['created'])

        DetentionLifecycle.book(self.assign(self.students[0]).pk, response.data['slot']['id'])
        response = self.admin_client.post('/api/detentions/slots/toggle/', dict(payload, enable=False), format='json')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'slot_in_use')

    def test_toggle_invalid_slot_number(self):
        response = self.admin_client.post('/api/detentions/slots/toggle/', {
            'term': str(self.term.pk), 'classroom': str(self.classroom.pk),
            'week': 1, 'day_of_week': 1, 'slot_number': 5, 'enable': True,
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'invalid_slot_number')

    def test_batch_create_and_available_filter(self):
        response = self.admin_client.post('/api/detentions/slots/', {
            'dates': ['2026-01-12', '2026-01-13'],
            'start_time': '16:00',
            'end_time': '18:30',
            'classroom': str(self.classroom.pk),
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.data['slots']), 2)

        full_id = response.data['slots'][0]['id']
        DetentionSlotStore.reserve(full_id)
        DetentionSlotStore.reserve(full_id)

        response = self.student_client.get('/api/detentions/slots/', {'available': 'true'})
        self.assertEqual([slot['date'] for slot in response.data], ['2026-01-13'])

    def test_delete_booked_slot_returns_409(self):
        slot = self.make_slot()
        DetentionLifecycle.book(self.assign(self.students[0]).pk, slot.pk)

        response = self.admin_client.delete(f'/api/detentions/slots/{slot.pk}/')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['booked_count'], 1)

    def test_students_cannot_create_slots(self):
        response = self.student_client.post('/api/detentions/slots/', {
            'date': '2026-01-12', 'start_time': '16:00', 'end_time': '18:30', 'classroom': str(self.classroom.pk),
        }, format='json')
        self.assertEqual(response.status_code, 403)


class ConcurrentReservationTestCase(TransactionTestCase):
    """Two bookers racing for the last seat of a slot, each on its own connection."""

    def setUp(self):
        if connection.vendor == 'sqlite' and connection.is_in_memory_db():
            self.skipTest('Threads cannot share an in-memory test database.')
        self.classroom = Classroom.objects.create(name='Room 1', capacity=1)
        self.slot = DetentionSlotStore.create_explicit(date(2026, 1, 12), '16:00', '18:30', self.classroom.pk)

    def test_only_one_of_two_concurrent_reservations_wins(self):
        barrier = threading.Barrier(2)
        outcomes = []

        def reserve():
            try:
                barrier.wait(timeout=10)
                DetentionSlotStore.reserve(self.slot.pk)
                outcomes.append('reserved')
            except SlotFull:
                outcomes.append('full')
            except Exception as e:
                outcomes.append(repr(e))
            finally:
                connection.close()

        threads = [threading.Thread(target=reserve) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ['full', 'reserved'])
        self.assertEqual(DetentionSlot.objects.get(pk=self.slot.pk).booked_count, 1)

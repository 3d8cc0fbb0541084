# apps/core/tests.py

from datetime import time

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError
from django.db import OperationalError
from django.db.models import ProtectedError
from django.http import Http404
from django.test import SimpleTestCase
from rest_framework import exceptions

from .api import exception_handler
from .exceptions import NotFound, ScheduleConflict, SlotFull, SlotInUse
from .timeutils import format_12h, format_hhmm, minute_range, overlaps, parse_hhmm, to_minutes


class TimeUtilsTestCase(SimpleTestCase):
    """Test cases for HH:MM parsing and minute ranges"""

    def test_parse_hhmm(self):
        self.assertEqual(parse_hhmm('16:00'), time(16, 0))
        self.assertEqual(parse_hhmm('9:05'), time(9, 5))
        self.assertEqual(parse_hhmm(time(8, 15, 30)), time(8, 15))

    def test_parse_hhmm_rejects_garbage(self):
        for value in ('24:00', '12:60', 'noon', '', None):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError) as ctx:
                    parse_hhmm(value)
                self.assertEqual(ctx.exception.code, 'invalid_time')

    def test_formatting(self):
        self.assertEqual(to_minutes('18:30'), 1110)
        self.assertEqual(format_hhmm(time(7, 5)), '07:05')
        self.assertEqual(format_12h('16:00'), '4:00pm')
        self.assertEqual(format_12h('00:15'), '12:15am')
        self.assertEqual(format_12h('12:30'), '12:30pm')

    def test_touching_ranges_do_not_overlap(self):
        first = minute_range('16:00', 60)
        self.assertFalse(overlaps(first, minute_range('17:00', 60)))
        self.assertFalse(overlaps(minute_range('15:00', 60), first))
        self.assertTrue(overlaps(first, minute_range('16:30', 30)))
        self.assertTrue(overlaps(first, minute_range('15:00', 180)))


class ExceptionHandlerTestCase(SimpleTestCase):
    """Test cases for the API error mapping"""

    def handle(self, exc):
        return exception_handler(exc, {'view': None})

    def test_scheduling_errors_keep_their_status_and_details(self):
        response = self.handle(SlotFull('abc', capacity=2, booked_count=2))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'slot_full')
        self.assertEqual(response.data['capacity'], 2)
        self.assertEqual(response.data['booked_count'], 2)

        response = self.handle(ScheduleConflict('Jane Smith Y9 Mon 4:00pm'))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['conflicting_class_name'], 'Jane Smith Y9 Mon 4:00pm')

        response = self.handle(SlotInUse('abc', booked_count=1))
        self.assertEqual(response.data['code'], 'slot_in_use')

        response = self.handle(NotFound('Term not found'))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Term not found')

    def test_validation_error_code_is_exposed(self):
        response = self.handle(ValidationError('Week must be positive', code='invalid_week'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'invalid_week')
        self.assertIn('Week must be positive', response.data['detail'])

    def test_field_validation_errors(self):
        response = self.handle(ValidationError({
            'capacity': ValidationError('Too small', code='capacity_below_bookings'),
        }))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'capacity_below_bookings')
        self.assertEqual(response.data['errors'], {'capacity': ['Too small']})

    def test_mixed_validation_codes_collapse(self):
        response = self.handle(ValidationError([
            ValidationError('a', code='first'),
            ValidationError('b', code='second'),
        ]))
        self.assertEqual(response.data['code'], 'validation_error')

    def test_operational_error_is_reported_as_unavailable(self):
        with self.assertLogs('apps.core.api', 'ERROR'):
            response = self.handle(OperationalError('database is locked'))
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data['code'], 'store_unavailable')

    def test_protected_error(self):
        response = self.handle(ProtectedError('in use', set()))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'protected')

    def test_framework_errors_get_a_code(self):
        response = self.handle(exceptions.NotAuthenticated())
        self.assertEqual(response.data['code'], 'not_authenticated')

        response = self.handle(Http404())
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['code'], 'not_found')

        response = self.handle(DjangoPermissionDenied())
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['code'], 'permission_denied')

    def test_unknown_errors_fall_through(self):
        self.assertIsNone(self.handle(RuntimeError('boom')))

# apps/audit/tests.py

from django.contrib.auth import get_user_model
from django.test import TestCase

from .models import AuditLog
from .services import record_operation

User = get_user_model()


class RecordOperationTestCase(TestCase):
    """Test cases for audit entries"""

    def test_entry_for_user(self):
        admin = User.objects.create_user(email='admin@example.com', is_admin=True)
        entry = record_operation(admin, AuditLog.ActionType.CREATE, 'DetentionSlot', 42, capacity=3)

        self.assertEqual(entry.user, admin)
        self.assertEqual(entry.object_id, '42')
        self.assertEqual(entry.details, {'capacity': 3})

    def test_system_entry_has_no_user(self):
        entry = record_operation(None, AuditLog.ActionType.OTHER, 'User', operation='rollover_student_years')
        self.assertIsNone(entry.user)
        self.assertEqual(entry.object_id, '')
        self.assertEqual(entry.details['operation'], 'rollover_student_years')

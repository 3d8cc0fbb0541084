# apps/followups/tests.py

from datetime import date, timedelta

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from apps.audit.models import AuditLog
from apps.core.exceptions import NotFound
from apps.users.models import User
from .models import Followup
from .services import FollowupService


class FollowupServiceTestCase(TestCase):
    """Test cases for completing and reopening follow-ups"""

    def setUp(self):
        self.admin = User.objects.create_user(email='admin@example.com', password='testpass123', is_admin=True)
        self.followup = Followup.objects.create(
            issue='Call parents about missed homework', due_date=date(2026, 2, 6), created_by=self.admin
        )

    def test_mark_complete_sets_completed_at(self):
        followup = FollowupService.mark_complete(self.followup.pk, actor=self.admin)

        self.assertTrue(followup.is_completed)
        self.assertIsNotNone(followup.completed_at)
        self.assertTrue(
            AuditLog.objects.filter(model_name='Followup', object_id=str(followup.pk), user=self.admin).exists()
        )

    def test_completing_again_keeps_first_completion_time(self):
        first = FollowupService.mark_complete(self.followup.pk).completed_at
        again = FollowupService.mark_complete(self.followup.pk).completed_at
        self.assertEqual(first, again)

    def test_reopening_clears_completed_at(self):
        FollowupService.mark_complete(self.followup.pk)

        followup = FollowupService.update(self.followup.pk, is_completed=False, solution='Parents unreachable')

        self.assertFalse(followup.is_completed)
        self.assertIsNone(followup.completed_at)
        self.assertEqual(followup.solution, 'Parents unreachable')

    def test_update_unknown_follow_up(self):
        with self.assertRaises(NotFound):
            FollowupService.mark_complete('00000000-0000-0000-0000-000000000000')

    def test_database_requires_completion_time(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Followup.objects.filter(pk=self.followup.pk).update(is_completed=True)

    def test_overdue(self):
        today = date(2026, 2, 10)
        Followup.objects.create(issue='Book room', due_date=date(2026, 2, 20))
        done = Followup.objects.create(
            issue='Print tests', due_date=date(2026, 2, 1), is_completed=True, completed_at=timezone.now()
        )

        overdue = Followup.objects.overdue(today)

        self.assertEqual(list(overdue), [self.followup])
        self.assertNotIn(done, overdue)


class FollowupAPITestCase(TestCase):
    """Test cases for the follow-up endpoints"""

    def setUp(self):
        self.admin = User.objects.create_user(email='admin@example.com', password='testpass123', is_admin=True)
        self.teacher = User.objects.create_user(email='teacher@example.com', password='testpass123', is_teacher=True)
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_create_and_complete(self):
        response = self.client.post('/api/followups/', {
            'issue': 'Chase enrolment form',
            'due_date': '2026-02-06',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['created_by'], self.admin.pk)
        self.assertIsNone(response.data['completed_at'])

        response = self.client.patch(f"/api/followups/{response.data['id']}/complete/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['is_completed'])
        self.assertIsNotNone(response.data['completed_at'])

    def test_creating_a_completed_follow_up_stamps_it(self):
        response = self.client.post('/api/followups/', {
            'issue': 'Already sorted',
            'due_date': '2026-02-06',
            'is_completed': True,
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data['is_completed'])
        self.assertIsNotNone(response.data['completed_at'])

    def test_list_is_ordered_by_due_date_and_filterable(self):
        Followup.objects.create(issue='Later', due_date=date(2026, 3, 1))
        Followup.objects.create(issue='Sooner', due_date=date(2026, 2, 1))
        Followup.objects.create(issue='Done', due_date=date(2026, 1, 1), is_completed=True, completed_at=timezone.now())

        response = self.client.get('/api/followups/', {'is_completed': 'false'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item['issue'] for item in response.data], ['Sooner', 'Later'])

    def test_overdue_filter(self):
        Followup.objects.create(issue='Past', due_date=timezone.localdate() - timedelta(days=1))
        Followup.objects.create(issue='Future', due_date=timezone.localdate() + timedelta(days=1))

        response = self.client.get('/api/followups/', {'overdue': 'true'})

        self.assertEqual([item['issue'] for item in response.data], ['Past'])

    def test_teachers_read_but_do_not_change_follow_ups(self):
        followup = Followup.objects.create(issue='Past', due_date=date(2026, 2, 1))
        client = APIClient()
        client.force_authenticate(self.teacher)

        self.assertEqual(client.get('/api/followups/').status_code, 200)
        self.assertEqual(client.patch(f'/api/followups/{followup.pk}/complete/').status_code, 403)
        self.assertEqual(client.put(f'/api/followups/{followup.pk}/', {
            'issue': 'Past', 'due_date': '2026-02-01',
        }, format='json').status_code, 403)
        followup.refresh_from_db()
        self.assertFalse(followup.is_completed)

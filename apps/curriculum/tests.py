# apps/curriculum/tests.py

from datetime import date

from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from apps.academics.models import Term
from apps.audit.models import AuditLog
from apps.core.exceptions import NotFound
from apps.users.models import User
from .models import Topic, ClassTest, Progress, ProgressWeek
from .services import ProgressService


class CurriculumFixtureMixin:
    """A term, a plan for Year 9 and some material to plan with."""

    def setUp(self):
        self.admin = User.objects.create_user(email='admin@example.com', password='testpass123', is_admin=True)
        self.teacher = User.objects.create_user(
            email='teacher@example.com', password='testpass123', first_name='Jane', last_name='Smith', is_teacher=True
        )
        self.student = User.objects.create_user(
            email='student@example.com', password='testpass123', is_student=True, year='Y9'
        )
        self.term = Term.objects.create(name='2026 Term 1', start_date=date(2026, 1, 3))
        self.progress = Progress.objects.create(name='Y9 Term 1', term=self.term, year='Y9')
        self.linear = Topic.objects.create(name='Linear equations', content='Solving ax + b = c', year='Y9', term_label='T1')
        self.indices = Topic.objects.create(name='Index laws', year='Y9', term_label='T1')
        self.quiz = ClassTest.objects.create(name='Algebra quiz', year='Y9', term_label='T1')


class ProgressServiceTestCase(CurriculumFixtureMixin, TestCase):
    """Test cases for weekly progress content"""

    def test_update_week_creates_the_week(self):
        week = ProgressService.update_week(
            self.progress.pk, 3, actor=self.teacher,
            topics=[self.linear, self.indices], test=self.quiz, comments='Revise before the quiz',
        )

        self.assertEqual(week.week, 3)
        self.assertEqual(set(week.topics.all()), {self.linear, self.indices})
        self.assertEqual(week.test, self.quiz)
        self.assertEqual(week.comments, 'Revise before the quiz')
        self.assertTrue(
            AuditLog.objects.filter(details__operation='update_week', user=self.teacher).exists()
        )

    def test_update_week_only_touches_given_fields(self):
        ProgressService.update_week(self.progress.pk, 3, topics=[self.linear], test=self.quiz)

        week = ProgressService.update_week(self.progress.pk, 3, comments='Moved to week 4')

        self.assertEqual(ProgressWeek.objects.filter(progress=self.progress).count(), 1)
        self.assertEqual(list(week.topics.all()), [self.linear])
        self.assertEqual(week.test, self.quiz)
        self.assertEqual(week.comments, 'Moved to week 4')

    def test_passing_no_test_clears_it(self):
        ProgressService.update_week(self.progress.pk, 3, test=self.quiz)
        week = ProgressService.update_week(self.progress.pk, 3, test=None)
        self.assertIsNone(week.test)

    def test_week_must_fall_within_the_term(self):
        for week in (0, 11):
            with self.assertRaises(ValidationError) as ctx:
                ProgressService.update_week(self.progress.pk, week, comments='Too far')
            self.assertEqual(ctx.exception.code, 'invalid_week')
        self.assertFalse(ProgressWeek.objects.exists())

    def test_unknown_fields_are_rejected(self):
        with self.assertRaises(ValidationError):
            ProgressService.update_week(self.progress.pk, 1, homework='Page 12')

    def test_unknown_plan(self):
        with self.assertRaises(NotFound):
            ProgressService.update_week('00000000-0000-0000-0000-000000000000', 1, comments='')


class CurriculumAPITestCase(CurriculumFixtureMixin, TestCase):
    """Test cases for the topic, test and progress endpoints"""

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(self.teacher)

    def test_teacher_creates_topic(self):
        response = self.client.post('/api/curriculum/topics/', {
            'name': 'Simultaneous equations',
            'year': 'Y10',
            'term_label': 'T2',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Topic.objects.get(name='Simultaneous equations').created_by, self.teacher)

    def test_topic_filters(self):
        Topic.objects.create(name='Quadratics', year='Y10', term_label='T1')

        response = self.client.get('/api/curriculum/topics/', {'year': 'Y9', 'search': 'ax + b'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([topic['name'] for topic in response.data], ['Linear equations'])

    def test_students_read_but_do_not_write_material(self):
        client = APIClient()
        client.force_authenticate(self.student)

        self.assertEqual(client.get('/api/curriculum/tests/').status_code, 200)
        response = client.post('/api/curriculum/tests/', {'name': 'Quiz', 'year': 'Y9', 'term_label': 'T1'}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_only_admins_delete_material(self):
        response = self.client.delete(f'/api/curriculum/tests/{self.quiz.pk}/')
        self.assertEqual(response.status_code, 403)

        admin_client = APIClient()
        admin_client.force_authenticate(self.admin)
        response = admin_client.delete(f'/api/curriculum/tests/{self.quiz.pk}/')
        self.assertEqual(response.status_code, 204)
        self.assertFalse(ClassTest.objects.filter(pk=self.quiz.pk).exists())

    def test_teacher_updates_progress_week(self):
        response = self.client.patch(f'/api/curriculum/progress/{self.progress.pk}/week/2/', {
            'topics': [str(self.linear.pk)],
            'test': str(self.quiz.pk),
            'comments': 'Quiz on Friday',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        week = response.data['weeks'][0]
        self.assertEqual(week['week'], 2)
        self.assertEqual(week['topic_names'], ['Linear equations'])
        self.assertEqual(week['test_name'], 'Algebra quiz')

    def test_progress_week_outside_term_returns_400(self):
        response = self.client.patch(f'/api/curriculum/progress/{self.progress.pk}/week/12/', {
            'comments': 'Too late',
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'invalid_week')

    def test_only_admins_create_progress_plans(self):
        response = self.client.post('/api/curriculum/progress/', {
            'name': 'Y10 Term 1', 'term': str(self.term.pk), 'year': 'Y10',
        }, format='json')
        self.assertEqual(response.status_code, 403)

        admin_client = APIClient()
        admin_client.force_authenticate(self.admin)
        response = admin_client.post('/api/curriculum/progress/', {
            'name': 'Y10 Term 1', 'term': str(self.term.pk), 'year': 'Y10',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['term_name'], '2026 Term 1')

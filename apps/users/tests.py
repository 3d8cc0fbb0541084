# apps/users/tests.py

from django.contrib.auth import get_user_model
from django.test import TestCase

User = get_user_model()


class UserModelTestCase(TestCase):
    """Test cases for the roster user model"""

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_create_superuser_is_admin(self):
        admin = User.objects.create_superuser(email='Admin@Example.com', password='testpass123')
        self.assertTrue(admin.is_admin)
        self.assertTrue(admin.is_staff)
        self.assertEqual(admin.email, 'Admin@example.com')

    def test_display_name(self):
        user = User.objects.create_user(email='jane@example.com', first_name='Jane', last_name='Smith')
        self.assertEqual(str(user), 'Jane Smith')
        nameless = User.objects.create_user(email='anon@example.com')
        self.assertEqual(str(nameless), 'anon@example.com')

    def test_role_querysets(self):
        student = User.objects.create_user(email='s@example.com', is_student=True)
        User.objects.create_user(email='gone@example.com', is_student=True, is_active=False)
        teacher = User.objects.create_user(email='t@example.com', is_teacher=True, is_admin=True)

        self.assertEqual(list(User.objects.active_students()), [student])
        self.assertEqual(User.objects.students().count(), 2)
        self.assertEqual(list(User.objects.teachers()), [teacher])

    def test_next_year_level(self):
        student = User(year=User.YearLevel.Y9)
        self.assertEqual(student.next_year_level(), (False, User.YearLevel.Y10))

        for year in (User.YearLevel.Y12, User.YearLevel.Y12_3U, User.YearLevel.Y12_4U):
            with self.subTest(year=year):
                self.assertEqual(User(year=year).next_year_level(), (True, None))

        with self.assertRaises(KeyError):
            User(year='').next_year_level()

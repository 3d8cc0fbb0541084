# apps/users/models.py

import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """
    Custom user manager for email-based authentication.
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and return a regular user with an email and password.
        """
        if not email:
            raise ValueError(_('The Email field must be set'))

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and return a superuser with admin permissions.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_admin', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)

    def students(self):
        return self.filter(is_student=True)

    def active_students(self):
        return self.filter(is_student=True, is_active=True)

    def teachers(self):
        return self.filter(is_teacher=True, is_active=True)


class User(AbstractUser):
    """
    Roster entry for everyone at the centre. One account may hold several
    roles at once (a teacher who is also an administrator).
    """
    class YearLevel(models.TextChoices):
        Y6 = 'Y6', _('Year 6')
        Y7 = 'Y7', _('Year 7')
        Y8 = 'Y8', _('Year 8')
        Y9 = 'Y9', _('Year 9')
        Y10 = 'Y10', _('Year 10')
        Y11 = 'Y11', _('Year 11')
        Y12 = 'Y12', _('Year 12')
        Y12_3U = 'Y12 3U', _('Year 12 Extension 1')
        Y12_4U = 'Y12 4U', _('Year 12 Extension 2')

    # Next year level on rollover; terminal (graduating) levels map to None.
    YEAR_PROGRESSION = {
        YearLevel.Y6: YearLevel.Y7,
        YearLevel.Y7: YearLevel.Y8,
        YearLevel.Y8: YearLevel.Y9,
        YearLevel.Y9: YearLevel.Y10,
        YearLevel.Y10: YearLevel.Y11,
        YearLevel.Y11: YearLevel.Y12,
        YearLevel.Y12: None,
        YearLevel.Y12_3U: None,
        YearLevel.Y12_4U: None,
    }

    id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        primary_key=True,
    )
    # Remove username field, use email instead
    username = None
    email = models.EmailField(
        _('email address'),
        unique=True,
        help_text=_('Primary email address for communication')
    )
    phone = models.CharField(_('phone number'), max_length=20, blank=True)

    # Roles
    is_student = models.BooleanField(_('student'), default=False)
    is_teacher = models.BooleanField(_('teacher'), default=False)
    is_admin = models.BooleanField(_('administrator'), default=False)

    # Student-specific fields
    school = models.CharField(_('school'), max_length=150, blank=True)
    year = models.CharField(
        _('year level'),
        max_length=10,
        choices=YearLevel.choices,
        blank=True
    )
    notes = models.TextField(_('notes'), blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['first_name', 'last_name', 'email']
        indexes = [
            models.Index(fields=['is_student', 'is_active'], name='users_student_active_idx'),
        ]

    def __str__(self):
        return self.display_name

    @property
    def full_name(self):
        """Return the full name of the user."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self):
        return self.full_name or self.email

    def next_year_level(self):
        """
        Return ``(graduates, next_year)`` for a rollover of this student.

        Raises ``KeyError`` when the year level is missing or unknown.
        """
        next_year = self.YEAR_PROGRESSION[self.year]
        return next_year is None, next_year

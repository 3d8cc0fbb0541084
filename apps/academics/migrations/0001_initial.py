import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Classroom',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=100, verbose_name='classroom name')),
                ('capacity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='capacity')),
                ('is_active', models.BooleanField(default=True, verbose_name='is active')),
            ],
            options={
                'verbose_name': 'Classroom',
                'verbose_name_plural': 'Classrooms',
                'ordering': ['name'],
                'constraints': [models.CheckConstraint(condition=models.Q(('capacity__gte', 1)), name='classroom_capacity_positive')],
            },
        ),
        migrations.CreateModel(
            name='Term',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='term name')),
                ('term_type', models.CharField(choices=[('school_term', 'School Term'), ('holiday', 'Holiday')], default='school_term', max_length=20, verbose_name='term type')),
                ('start_date', models.DateField(verbose_name='start date')),
                ('weeks', models.PositiveSmallIntegerField(blank=True, help_text='Defaults to 10 for school terms and 2 for holidays.', validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(52)], verbose_name='number of weeks')),
                ('is_first_term_of_year', models.BooleanField(default=False, help_text='Activating this term advances every active student by one year level.', verbose_name='is first term of year')),
                ('is_current', models.BooleanField(default=False, verbose_name='is current term')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_terms', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
            ],
            options={
                'verbose_name': 'Term',
                'verbose_name_plural': 'Terms',
                'ordering': ['-start_date'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_current', True)), fields=('is_current',), name='single_current_term'),
                    models.CheckConstraint(condition=models.Q(('weeks__gte', 1), ('weeks__lte', 52)), name='term_weeks_range'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Class',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=200, verbose_name='class name')),
                ('year', models.CharField(choices=[('Y6', 'Year 6'), ('Y7', 'Year 7'), ('Y8', 'Year 8'), ('Y9', 'Year 9'), ('Y10', 'Year 10'), ('Y11', 'Year 11'), ('Y12', 'Year 12'), ('Y12 3U', 'Year 12 Extension 1'), ('Y12 4U', 'Year 12 Extension 2')], max_length=10, verbose_name='year level')),
                ('copy_to_next_term', models.BooleanField(default=False, verbose_name='copy to next term')),
                ('is_active', models.BooleanField(default=True, verbose_name='is active')),
                ('classroom', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='classes', to='academics.classroom', verbose_name='classroom')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='teaching_classes', to=settings.AUTH_USER_MODEL, verbose_name='teacher')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='classes', to='academics.term', verbose_name='term')),
            ],
            options={
                'verbose_name': 'Class',
                'verbose_name_plural': 'Classes',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['term', 'teacher'], name='class_term_teacher_idx'),
                    models.Index(fields=['term', 'is_active'], name='class_term_active_idx'),
                    models.Index(fields=['classroom', 'term', 'is_active'], name='class_room_term_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ClassScheduleEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('order', models.PositiveSmallIntegerField(default=0, verbose_name='order')),
                ('day_of_week', models.PositiveSmallIntegerField(choices=[(0, 'Sunday'), (1, 'Monday'), (2, 'Tuesday'), (3, 'Wednesday'), (4, 'Thursday'), (5, 'Friday'), (6, 'Saturday')], validators=[django.core.validators.MaxValueValidator(6)], verbose_name='day of week')),
                ('start_time', models.TimeField(verbose_name='start time')),
                ('duration_minutes', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(30)], verbose_name='duration (minutes)')),
                ('class_ref', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='schedule_entries', to='academics.class', verbose_name='class')),
            ],
            options={
                'verbose_name': 'Class Schedule Entry',
                'verbose_name_plural': 'Class Schedule Entries',
                'ordering': ['class_ref', 'order'],
                'indexes': [models.Index(fields=['day_of_week', 'start_time'], name='schedule_day_start_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('day_of_week__lte', 6)), name='schedule_day_of_week_range'),
                    models.CheckConstraint(condition=models.Q(('duration_minutes__gte', 30)), name='schedule_min_duration'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Enrollment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('joined_week', models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)], verbose_name='joined in week')),
                ('school_test_results', models.CharField(blank=True, max_length=255, verbose_name='school test results')),
                ('class_ref', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='academics.class', verbose_name='class')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to=settings.AUTH_USER_MODEL, verbose_name='student')),
            ],
            options={
                'verbose_name': 'Enrollment',
                'verbose_name_plural': 'Enrollments',
                'ordering': ['class_ref', 'student'],
                'constraints': [
                    models.UniqueConstraint(fields=('class_ref', 'student'), name='unique_enrollment'),
                    models.CheckConstraint(condition=models.Q(('joined_week__gte', 1)), name='enrollment_joined_week_positive'),
                ],
            },
        ),
        migrations.AddField(
            model_name='class',
            name='students',
            field=models.ManyToManyField(blank=True, related_name='enrolled_classes', through='academics.Enrollment', to=settings.AUTH_USER_MODEL, verbose_name='students'),
        ),
    ]

import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('academics', '0001_initial'),
        ('curriculum', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name='class',
            name='progress',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='classes', to='curriculum.progress', verbose_name='progress plan'),
        ),
        migrations.CreateModel(
            name='ClassWeek',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('week', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='week')),
                ('class_ref', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='weeks', to='academics.class', verbose_name='class')),
                ('test', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='class_weeks', to='curriculum.classtest', verbose_name='test')),
            ],
            options={
                'verbose_name': 'Class Week',
                'verbose_name_plural': 'Class Weeks',
                'ordering': ['class_ref', 'week'],
                'constraints': [
                    models.UniqueConstraint(fields=('class_ref', 'week'), name='unique_class_week'),
                    models.CheckConstraint(condition=models.Q(('week__gte', 1)), name='class_week_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AttendanceRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('status', models.CharField(choices=[('arrived', 'Arrived'), ('absent', 'Absent')], max_length=10, verbose_name='status')),
                ('class_week', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance', to='academics.classweek', verbose_name='class week')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance_records', to=settings.AUTH_USER_MODEL, verbose_name='student')),
            ],
            options={
                'verbose_name': 'Attendance Record',
                'verbose_name_plural': 'Attendance Records',
                'ordering': ['class_week', 'student'],
                'constraints': [
                    models.UniqueConstraint(fields=('class_week', 'student'), name='unique_attendance_record'),
                    models.CheckConstraint(condition=models.Q(('status__in', ['arrived', 'absent'])), name='attendance_status_valid'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HomeworkGrade',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('grade', models.CharField(choices=[('A', 'A'), ('B', 'B'), ('C', 'C'), ('D', 'D'), ('E', 'E'), ('incomplete', 'Incomplete'), ('missing', 'Missing'), ('absent', 'Absent')], max_length=10, verbose_name='grade')),
                ('comments', models.TextField(blank=True, verbose_name='comments')),
                ('class_week', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='homework', to='academics.classweek', verbose_name='class week')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='homework_grades', to=settings.AUTH_USER_MODEL, verbose_name='student')),
            ],
            options={
                'verbose_name': 'Homework Grade',
                'verbose_name_plural': 'Homework Grades',
                'ordering': ['class_week', 'student'],
                'constraints': [
                    models.UniqueConstraint(fields=('class_week', 'student'), name='unique_homework_grade'),
                    models.CheckConstraint(condition=models.Q(('grade__in', ['A', 'B', 'C', 'D', 'E', 'incomplete', 'missing', 'absent'])), name='homework_grade_valid'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ClassTestMark',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('mark', models.DecimalField(decimal_places=2, max_digits=6, validators=[django.core.validators.MinValueValidator(0)], verbose_name='mark')),
                ('class_week', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='test_marks', to='academics.classweek', verbose_name='class week')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='test_marks', to=settings.AUTH_USER_MODEL, verbose_name='student')),
            ],
            options={
                'verbose_name': 'Test Mark',
                'verbose_name_plural': 'Test Marks',
                'ordering': ['class_week', 'student'],
                'constraints': [
                    models.UniqueConstraint(fields=('class_week', 'student'), name='unique_test_mark'),
                    models.CheckConstraint(condition=models.Q(('mark__gte', 0)), name='test_mark_non_negative'),
                ],
            },
        ),
    ]

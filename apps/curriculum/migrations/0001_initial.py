import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Topic',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=200, verbose_name='topic name')),
                ('content', models.TextField(blank=True, verbose_name='content')),
                ('year', models.CharField(choices=[('Y6', 'Year 6'), ('Y7', 'Year 7'), ('Y8', 'Year 8'), ('Y9', 'Year 9'), ('Y10', 'Year 10'), ('Y11', 'Year 11'), ('Y12', 'Year 12'), ('Y12 3U', 'Year 12 Extension 1'), ('Y12 4U', 'Year 12 Extension 2')], max_length=10, verbose_name='year level')),
                ('term_label', models.CharField(choices=[('T1', 'Term 1'), ('T2', 'Term 2'), ('T3', 'Term 3'), ('T4', 'Term 4')], max_length=2, verbose_name='term')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_topics', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
            ],
            options={
                'verbose_name': 'Topic',
                'verbose_name_plural': 'Topics',
                'ordering': ['year', 'term_label', 'name'],
                'indexes': [models.Index(fields=['year', 'term_label'], name='topic_year_term_idx')],
            },
        ),
        migrations.CreateModel(
            name='ClassTest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=200, verbose_name='test name')),
                ('year', models.CharField(choices=[('Y6', 'Year 6'), ('Y7', 'Year 7'), ('Y8', 'Year 8'), ('Y9', 'Year 9'), ('Y10', 'Year 10'), ('Y11', 'Year 11'), ('Y12', 'Year 12'), ('Y12 3U', 'Year 12 Extension 1'), ('Y12 4U', 'Year 12 Extension 2')], max_length=10, verbose_name='year level')),
                ('term_label', models.CharField(choices=[('T1', 'Term 1'), ('T2', 'Term 2'), ('T3', 'Term 3'), ('T4', 'Term 4')], max_length=2, verbose_name='term')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_tests', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
            ],
            options={
                'verbose_name': 'Test',
                'verbose_name_plural': 'Tests',
                'ordering': ['year', 'term_label', 'name'],
                'indexes': [models.Index(fields=['year', 'term_label'], name='test_year_term_idx')],
            },
        ),
        migrations.CreateModel(
            name='Progress',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=200, verbose_name='name')),
                ('year', models.CharField(choices=[('Y6', 'Year 6'), ('Y7', 'Year 7'), ('Y8', 'Year 8'), ('Y9', 'Year 9'), ('Y10', 'Year 10'), ('Y11', 'Year 11'), ('Y12', 'Year 12'), ('Y12 3U', 'Year 12 Extension 1'), ('Y12 4U', 'Year 12 Extension 2')], max_length=10, verbose_name='year level')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='progress_plans', to='academics.term', verbose_name='term')),
            ],
            options={
                'verbose_name': 'Progress Plan',
                'verbose_name_plural': 'Progress Plans',
                'ordering': ['-term__start_date', 'year'],
                'indexes': [models.Index(fields=['term', 'year'], name='progress_term_year_idx')],
            },
        ),
        migrations.CreateModel(
            name='ProgressWeek',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('week', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='week')),
                ('comments', models.TextField(blank=True, verbose_name='comments')),
                ('progress', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='weeks', to='curriculum.progress', verbose_name='progress plan')),
                ('test', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='progress_weeks', to='curriculum.classtest', verbose_name='test')),
                ('topics', models.ManyToManyField(blank=True, related_name='progress_weeks', to='curriculum.topic', verbose_name='topics')),
            ],
            options={
                'verbose_name': 'Progress Week',
                'verbose_name_plural': 'Progress Weeks',
                'ordering': ['progress', 'week'],
                'constraints': [
                    models.UniqueConstraint(fields=('progress', 'week'), name='unique_progress_week'),
                    models.CheckConstraint(condition=models.Q(('week__gte', 1)), name='progress_week_positive'),
                ],
            },
        ),
    ]

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
            name='Followup',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('issue', models.TextField(verbose_name='issue')),
                ('solution', models.TextField(blank=True, verbose_name='solution')),
                ('due_date', models.DateField(verbose_name='due date')),
                ('is_completed', models.BooleanField(default=False, verbose_name='is completed')),
                ('completed_at', models.DateTimeField(blank=True, null=True, verbose_name='completed at')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='followups', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
            ],
            options={
                'verbose_name': 'Follow-up',
                'verbose_name_plural': 'Follow-ups',
                'ordering': ['due_date'],
                'indexes': [models.Index(fields=['is_completed', 'due_date'], name='followup_done_due_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('is_completed', False), ('completed_at__isnull', False), _connector='OR'), name='completed_followup_has_time')],
            },
        ),
    ]

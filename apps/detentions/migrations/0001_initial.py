import django.core.validators
import django.db.models.deletion
import django.utils.timezone
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
            name='DetentionSlot',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('date', models.DateField(verbose_name='date')),
                ('start_time', models.TimeField(verbose_name='start time')),
                ('end_time', models.TimeField(verbose_name='end time')),
                ('week', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)], verbose_name='week')),
                ('capacity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='capacity')),
                ('booked_count', models.PositiveIntegerField(default=0, verbose_name='booked count')),
                ('classroom', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='detention_slots', to='academics.classroom', verbose_name='classroom')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_detention_slots', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
                ('term', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='detention_slots', to='academics.term', verbose_name='term')),
            ],
            options={
                'verbose_name': 'Detention Slot',
                'verbose_name_plural': 'Detention Slots',
                'ordering': ['date', 'start_time'],
                'indexes': [
                    models.Index(fields=['date', 'classroom'], name='slot_date_room_idx'),
                    models.Index(fields=['date', 'booked_count'], name='slot_date_booked_idx'),
                    models.Index(fields=['term', 'classroom', 'week'], name='slot_term_room_week_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('booked_count__lte', models.F('capacity'))), name='slot_booked_within_capacity'),
                    models.CheckConstraint(condition=models.Q(('capacity__gte', 1)), name='slot_capacity_positive'),
                    models.CheckConstraint(condition=models.Q(('end_time__gt', models.F('start_time'))), name='slot_ends_after_start'),
                    models.CheckConstraint(condition=models.Q(('week__isnull', True), ('week__gte', 1), _connector='OR'), name='slot_week_positive'),
                    models.UniqueConstraint(condition=models.Q(('term__isnull', False)), fields=('term', 'classroom', 'week', 'date', 'start_time', 'end_time'), name='unique_slot_coordinate'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Detention',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('week', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='week')),
                ('reason', models.TextField(verbose_name='reason')),
                ('status', models.CharField(choices=[('assigned', 'Assigned'), ('booked', 'Booked'), ('completed', 'Completed')], default='assigned', max_length=20, verbose_name='status')),
                ('completion_status', models.CharField(blank=True, choices=[('complete', 'Complete'), ('incomplete', 'Incomplete'), ('absent', 'Absent')], max_length=20, null=True, verbose_name='completion status')),
                ('attempts', models.PositiveIntegerField(default=0, verbose_name='attempts')),
                ('assigned_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='assigned at')),
                ('assigned_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_detentions', to=settings.AUTH_USER_MODEL, verbose_name='assigned by')),
                ('booked_slot', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='detentions', to='detentions.detentionslot', verbose_name='booked slot')),
                ('class_ref', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='detentions', to='academics.class', verbose_name='class')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='detentions', to=settings.AUTH_USER_MODEL, verbose_name='student')),
            ],
            options={
                'verbose_name': 'Detention',
                'verbose_name_plural': 'Detentions',
                'ordering': ['-assigned_at'],
                'indexes': [
                    models.Index(fields=['student', 'status'], name='detention_student_status_idx'),
                    models.Index(fields=['status', '-assigned_at'], name='detention_status_time_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('week__gte', 1)), name='detention_week_positive'),
                    models.CheckConstraint(condition=models.Q(models.Q(('status', 'booked'), _negated=True), ('booked_slot__isnull', False), _connector='OR'), name='booked_detention_has_slot'),
                ],
            },
        ),
    ]

# Generated manually for the practice manager scheduling app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('clients', '0001_initial'),
        ('packages', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RecurringSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('recurrence_type', models.CharField(choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('biweekly', 'Every two weeks'), ('monthly', 'Monthly')], max_length=10)),
                ('recurrence_interval', models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])),
                ('start_date', models.DateField()),
                ('recurrence_end_date', models.DateField(blank=True, null=True)),
                ('recurrence_count', models.PositiveIntegerField(blank=True, null=True, validators=[MinValueValidator(1)])),
                ('weekday', models.PositiveSmallIntegerField(blank=True, help_text='0 = Monday ... 6 = Sunday', null=True, validators=[MaxValueValidator(6)])),
                ('time', models.TimeField()),
                ('duration_minutes', models.PositiveIntegerField(default=60)),
                ('value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('paused', 'Paused'), ('cancelled', 'Cancelled')], default='active', max_length=10)),
                ('google_calendar_sync', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recurring_sessions', to='clients.client')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recurring_sessions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'recurring_sessions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'status'], name='recurring_s_owner_i_490cc6_idx'),
                    models.Index(fields=['client'], name='recurring_s_client__da3ef0_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Session',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField()),
                ('time', models.TimeField()),
                ('duration_minutes', models.PositiveIntegerField(default=60)),
                ('value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('no_show', 'No show')], default='scheduled', max_length=10)),
                ('session_type', models.CharField(choices=[('single', 'Single'), ('recurring', 'Recurring'), ('package', 'Package')], default='single', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('occurrence_date', models.DateField(blank=True, help_text='Series slot this session was generated for', null=True)),
                ('is_modified', models.BooleanField(default=False)),
                ('google_event_id', models.CharField(blank=True, max_length=255)),
                ('google_sync_type', models.CharField(blank=True, choices=[('imported', 'Imported (read-only)'), ('mirrored', 'Mirrored'), ('sent', 'Sent to Google'), ('cancelled', 'Cancelled in Google')], max_length=10, null=True)),
                ('google_html_link', models.URLField(blank=True, max_length=500)),
                ('google_last_synced', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sessions', to='clients.client')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sessions', to=settings.AUTH_USER_MODEL)),
                ('package', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sessions', to='packages.package')),
                ('recurring_session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='instances', to='scheduling.recurringsession')),
            ],
            options={
                'db_table': 'sessions',
                'ordering': ['date', 'time'],
                'indexes': [
                    models.Index(fields=['owner', 'date'], name='sessions_owner_i_480064_idx'),
                    models.Index(fields=['owner', 'status'], name='sessions_owner_i_486e56_idx'),
                    models.Index(fields=['client', 'date'], name='sessions_client__4fb0d3_idx'),
                    models.Index(fields=['google_event_id'], name='sessions_google__9be53b_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('recurring_session__isnull', False)), fields=('recurring_session', 'occurrence_date'), name='unique_series_occurrence'),
                ],
            },
        ),
    ]

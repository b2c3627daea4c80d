# Generated manually for the practice manager packages app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('clients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Package',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('total_sessions', models.PositiveIntegerField(validators=[MinValueValidator(1)])),
                ('consumed_sessions', models.PositiveIntegerField(default=0)),
                ('total_value', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('value_per_session', models.DecimalField(decimal_places=2, max_digits=10)),
                ('payment_method', models.CharField(blank=True, choices=[('pix', 'PIX'), ('cash', 'Cash'), ('credit_card', 'Credit card'), ('debit_card', 'Debit card'), ('bank_transfer', 'Bank transfer'), ('other', 'Other')], max_length=20)),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='active', max_length=10)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='packages', to='clients.client')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='packages', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'packages',
                'ordering': ['-start_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'status'], name='packages_owner_i_ee40c5_idx'),
                    models.Index(fields=['client', 'status'], name='packages_client__7af3ac_idx'),
                ],
            },
        ),
    ]

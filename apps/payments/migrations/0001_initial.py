# Generated manually for the practice manager payments app

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
        ('packages', '0001_initial'),
        ('scheduling', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('overdue', 'Overdue'), ('cancelled', 'Cancelled'), ('refunded', 'Refunded')], default='pending', max_length=10)),
                ('method', models.CharField(blank=True, choices=[('pix', 'PIX'), ('cash', 'Cash'), ('credit_card', 'Credit card'), ('debit_card', 'Debit card'), ('bank_transfer', 'Bank transfer'), ('other', 'Other')], max_length=20)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('reference', models.CharField(db_index=True, editable=False, max_length=25, unique=True)),
                ('pix_payload', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='clients.client')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to=settings.AUTH_USER_MODEL)),
                ('package', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='packages.package')),
                ('session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='scheduling.session')),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['-due_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'status'], name='payments_owner_i_268e06_idx'),
                    models.Index(fields=['owner', 'due_date'], name='payments_owner_i_908381_idx'),
                    models.Index(fields=['owner', 'paid_at'], name='payments_owner_i_fdf24a_idx'),
                    models.Index(fields=['client', 'status'], name='payments_client__d2fdbb_idx'),
                ],
            },
        ),
    ]

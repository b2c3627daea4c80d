# Generated manually for the practice manager referrals app

import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Referral',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('converted', 'Converted'), ('cancelled', 'Cancelled')], default='pending', max_length=10)),
                ('subscription_plan', models.CharField(blank=True, max_length=20)),
                ('subscription_amount_cents', models.PositiveIntegerField(default=0)),
                ('commission_rate', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=5)),
                ('commission_amount_cents', models.PositiveIntegerField(default=0)),
                ('first_payment_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('referred', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='referral', to=settings.AUTH_USER_MODEL)),
                ('referrer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='referrals_made', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'referrals',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['referrer', 'status'], name='referrals_referre_cefb5c_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReferralPayout',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount_cents', models.PositiveIntegerField()),
                ('currency', models.CharField(default='brl', max_length=3)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('paid', 'Paid'), ('failed', 'Failed'), ('cancelled', 'Cancelled')], default='pending', max_length=10)),
                ('period_start', models.DateField()),
                ('period_end', models.DateField()),
                ('approval_deadline', models.DateField()),
                ('referred_user_name', models.CharField(blank=True, max_length=200)),
                ('referred_plan', models.CharField(blank=True, max_length=20)),
                ('installment', models.BooleanField(default=False)),
                ('installment_number', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('transfer_id', models.CharField(blank=True, max_length=100)),
                ('payment_method', models.CharField(blank=True, choices=[('PIX', 'PIX'), ('TED', 'TED (bank transfer)')], max_length=3)),
                ('failure_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('referral', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payouts', to='referrals.referral')),
                ('referrer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='referral_payouts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'referral_payouts',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['status', 'approval_deadline'], name='referral_pa_status_21d1b1_idx'),
                    models.Index(fields=['referrer', 'status'], name='referral_pa_referre_5c4804_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReferralAuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('action', models.CharField(max_length=50)),
                ('gateway', models.CharField(blank=True, choices=[('asaas', 'Asaas'), ('stripe', 'Stripe')], max_length=10)),
                ('status', models.CharField(blank=True, max_length=20)),
                ('gross_amount_cents', models.IntegerField(blank=True, null=True)),
                ('net_amount_cents', models.IntegerField(blank=True, null=True)),
                ('commission_amount_cents', models.IntegerField(blank=True, null=True)),
                ('failure_reason', models.TextField(blank=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('payout', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to='referrals.referralpayout')),
                ('referral', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to='referrals.referral')),
                ('referred', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('referrer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'referral_audit_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='referral_au_action_067b4a_idx'),
                    models.Index(fields=['referrer', 'created_at'], name='referral_au_referre_aabada_idx'),
                ],
            },
        ),
    ]

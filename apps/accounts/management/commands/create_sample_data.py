"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data
    python manage.py create_sample_data --clear

This creates:
- 3 users (admin, ana the therapist and referral partner, bruno referred by ana)
- 5 clients for ana
- A weekly recurring series and a few single sessions (some already held)
- A 10-session package with 4 booked sessions
- A first monthly subscription commission for ana
"""

from datetime import date, time, timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.models import SubscriptionPlan, User
from apps.accounts.services import register_user
from apps.clients.services import create_client
from apps.packages.services import create_package, create_sessions_for_package
from apps.referrals.models import PaymentGateway, Referral
from apps.referrals.services import record_subscription_payment
from apps.scheduling.models import RecurrenceType, SessionStatus
from apps.scheduling.services import create_recurring, create_session, set_session_status

SAMPLE_EMAILS = ['admin@example.com', 'ana@example.com', 'bruno@example.com']


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete the sample users (and everything they own) first',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing sample data...')
            User.objects.filter(email__in=SAMPLE_EMAILS).delete()

        if User.objects.filter(email='ana@example.com').exists():
            self.stdout.write(self.style.WARNING('Sample data already exists; use --clear to recreate it.'))
            return

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        clients = self.create_clients(users['ana'])
        self.create_sessions(users['ana'], clients)
        self.create_package(users['ana'], clients[2])
        self.create_referral_commission(users['bruno'])

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (superuser)')
        self.stdout.write('  ana@example.com / password123 (therapist, referral partner)')
        self.stdout.write('  bruno@example.com / password123 (referred by ana)')

    def create_users(self):
        self.stdout.write('  Creating users...')

        admin = User.objects.create_superuser(
            email='admin@example.com',
            password='admin123',
            display_name='Admin User',
        )

        ana = register_user(
            email='ana@example.com',
            password='password123',
            display_name='Ana Souza',
            profession='Psychologist',
        )
        ana.is_referral_partner = True
        ana.subscription_plan = SubscriptionPlan.PRO
        ana.default_session_value = Decimal('180.00')
        ana.pix_key = 'ana@example.com'
        ana.pix_merchant_name = 'Ana Souza'
        ana.email_verified = True
        ana.save()

        bruno = register_user(
            email='bruno@example.com',
            password='password123',
            display_name='Bruno Lima',
            profession='Psychoanalyst',
            referral_code=ana.referral_code,
        )

        return {'admin': admin, 'ana': ana, 'bruno': bruno}

    def create_clients(self, owner):
        self.stdout.write('  Creating clients...')

        data = [
            ('Carla Mendes', 'carla@example.com', '+55 11 99999-0001'),
            ('Daniel Rocha', 'daniel@example.com', '+55 11 99999-0002'),
            ('Elisa Prado', 'elisa@example.com', '+55 11 99999-0003'),
            ('Fábio Nunes', '', '+55 11 99999-0004'),
            ('Gabriela Reis', 'gabriela@example.com', ''),
        ]
        return [
            create_client(owner=owner, name=name, email=email, phone=phone)
            for name, email, phone in data
        ]

    def create_sessions(self, owner, clients):
        self.stdout.write('  Creating sessions...')
        today = date.today()

        create_recurring(
            owner=owner,
            client=clients[0],
            recurrence_type=RecurrenceType.WEEKLY,
            start_date=today,
            time=time(14, 0),
        )

        for days_ago, client, outcome in [
            (14, clients[1], SessionStatus.COMPLETED),
            (7, clients[1], SessionStatus.COMPLETED),
            (3, clients[3], SessionStatus.NO_SHOW),
            (1, clients[4], None),
        ]:
            session = create_session(
                owner=owner,
                client=client,
                date=today - timedelta(days=days_ago),
                time=time(10, 0),
            )
            if outcome:
                set_session_status(session=session, status=outcome)

    def create_package(self, owner, client):
        self.stdout.write('  Creating package...')
        today = date.today()

        package = create_package(
            owner=owner,
            client=client,
            name='10 sessions',
            total_sessions=10,
            total_value=Decimal('1500.00'),
            start_date=today - timedelta(days=21),
        )
        sessions = create_sessions_for_package(
            package=package,
            slots=[
                {'date': today - timedelta(days=21 - 7 * week), 'time': time(16, 0)}
                for week in range(4)
            ],
        )
        for session in sessions[:3]:
            set_session_status(session=session, status=SessionStatus.COMPLETED)

    def create_referral_commission(self, referred):
        self.stdout.write('  Creating referral commission...')

        if not Referral.objects.filter(referred=referred).exists():
            return
        referred.subscription_plan = SubscriptionPlan.PRO
        referred.save(update_fields=['subscription_plan'])
        record_subscription_payment(
            referred_user=referred,
            gross_amount_cents=9900,
            gateway=PaymentGateway.ASAAS,
        )

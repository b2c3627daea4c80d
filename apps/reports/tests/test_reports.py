"""
Tests for the report queries.

The ``practice`` fixture builds March 2026 for the therapist:

    sessions  2 completed, 1 no-show, 1 cancelled, 1 scheduled (+1 in April)
    payments  150 paid on 03-05, 150 due 03-09 paid on 04-02, 150 overdue,
              150 cancelled, 100 pending due in April
"""

from datetime import date, datetime, time
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.accounts.models import SubscriptionPlan
from apps.clients.models import Client
from apps.payments.models import Payment, PaymentStatus
from apps.referrals.models import PayoutStatus, Referral, ReferralPayout
from apps.reports.exceptions import InvalidDateRangeError, InvalidPeriodError
from apps.reports.reports import PlatformReports, PracticeReports
from apps.scheduling.models import SessionStatus
from apps.scheduling.services import create_session


def aware(*args):
    return timezone.make_aware(datetime(*args))


def book(owner, client, day, status=SessionStatus.SCHEDULED, at=time(10, 0)):
    return create_session(owner=owner, client=client, date=day, time=at, status=status, with_payment=False)


def charge(owner, client, amount, status=PaymentStatus.PENDING, due_date=None, paid_at=None):
    return Payment.objects.create(
        owner=owner,
        client=client,
        amount=Decimal(amount),
        status=status,
        due_date=due_date,
        paid_at=paid_at,
    )


@pytest.fixture
def second_patient(therapist):
    return Client.objects.create(owner=therapist, name='Daniel Rocha')


@pytest.fixture
def practice(therapist, patient, second_patient, foreign_patient, other_therapist):
    Client.objects.filter(pk=patient.pk).update(created_at=aware(2026, 3, 1, 9, 0))
    Client.objects.filter(pk=second_patient.pk).update(created_at=aware(2026, 2, 10, 9, 0))

    book(therapist, patient, date(2026, 3, 2), SessionStatus.COMPLETED)
    book(therapist, patient, date(2026, 3, 9), SessionStatus.COMPLETED)
    book(therapist, patient, date(2026, 3, 16), SessionStatus.NO_SHOW)
    book(therapist, second_patient, date(2026, 3, 23), SessionStatus.CANCELLED)
    book(therapist, second_patient, date(2026, 3, 30))
    book(therapist, patient, date(2026, 4, 6))
    book(other_therapist, foreign_patient, date(2026, 3, 2), SessionStatus.COMPLETED)

    charge(therapist, patient, '150.00', PaymentStatus.PAID, date(2026, 3, 2), aware(2026, 3, 5, 12, 0))
    charge(therapist, patient, '150.00', PaymentStatus.PAID, date(2026, 3, 9), aware(2026, 4, 2, 12, 0))
    charge(therapist, patient, '150.00', PaymentStatus.OVERDUE, date(2026, 3, 16))
    charge(therapist, second_patient, '150.00', PaymentStatus.CANCELLED, date(2026, 3, 23))
    charge(therapist, second_patient, '100.00', PaymentStatus.PENDING, date(2026, 4, 10))
    charge(other_therapist, foreign_patient, '999.00', PaymentStatus.PAID, date(2026, 3, 2), aware(2026, 3, 2, 12, 0))


class TestPeriods:

    def test_parse_period(self):
        assert PracticeReports.parse_period('2026-02') == (date(2026, 2, 1), date(2026, 2, 28))
        assert PracticeReports.parse_period('2024-02') == (date(2024, 2, 1), date(2024, 2, 29))

    @pytest.mark.parametrize('period', ['2026-13', '03-2026', 'march', '', None])
    def test_invalid_period(self, period):
        with pytest.raises(InvalidPeriodError):
            PracticeReports.parse_period(period)

    def test_default_range_is_current_month(self):
        assert PracticeReports.resolve_range(today=date(2026, 3, 10)) == (date(2026, 3, 1), date(2026, 3, 31))

    def test_open_bounds(self):
        assert PracticeReports.resolve_range(start_date=date(2026, 3, 10)) == (date(2026, 3, 10), date(2026, 3, 31))
        assert PracticeReports.resolve_range(end_date=date(2026, 3, 10)) == (date(2026, 3, 1), date(2026, 3, 10))

    def test_inverted_range(self):
        with pytest.raises(InvalidDateRangeError):
            PracticeReports.resolve_range(date(2026, 3, 10), date(2026, 3, 1))

    def test_range_too_long(self):
        PracticeReports.resolve_range(date(2024, 1, 1), date(2025, 12, 31))

        with pytest.raises(InvalidDateRangeError):
            PracticeReports.resolve_range(date(2024, 1, 1), date(2026, 1, 5))


@pytest.mark.django_db
class TestSummary:

    def test_month(self, therapist, practice):
        summary = PracticeReports.summary(therapist, date(2026, 3, 1), date(2026, 3, 31))

        assert summary['sessions_total'] == 5
        assert summary['sessions_by_status'] == {
            'scheduled': 1,
            'completed': 2,
            'cancelled': 1,
            'no_show': 1,
        }
        assert summary['completion_rate'] == 50.0
        assert summary['revenue_received'] == Decimal('150.00')
        assert summary['revenue_expected'] == Decimal('450.00')
        assert summary['outstanding'] == Decimal('250.00')
        assert summary['overdue'] == Decimal('150.00')
        assert summary['active_clients'] == 2
        assert summary['new_clients'] == 1

    def test_empty_period(self, therapist):
        summary = PracticeReports.summary(therapist, date(2026, 3, 1), date(2026, 3, 31))

        assert summary['sessions_total'] == 0
        assert summary['completion_rate'] == 0.0
        assert summary['revenue_received'] == Decimal('0.00')

    def test_invalid_range(self, therapist):
        with pytest.raises(InvalidDateRangeError):
            PracticeReports.summary(therapist, date(2026, 3, 31), date(2026, 3, 1))


@pytest.mark.django_db
class TestRevenueTimeseries:

    def test_months_without_data_included(self, therapist, practice):
        series = PracticeReports.revenue_timeseries(therapist, date(2026, 2, 1), date(2026, 4, 30))

        assert series == [
            {'month': '2026-02', 'received': Decimal('0.00'), 'expected': Decimal('0.00')},
            {'month': '2026-03', 'received': Decimal('150.00'), 'expected': Decimal('450.00')},
            {'month': '2026-04', 'received': Decimal('150.00'), 'expected': Decimal('100.00')},
        ]


@pytest.mark.django_db
class TestTopClients:

    def test_ranking(self, therapist, patient, practice):
        best = Client.objects.create(owner=therapist, name='Elisa Prado')
        charge(therapist, best, '500.00', PaymentStatus.PAID, paid_at=aware(2026, 3, 20, 12, 0))

        ranking = PracticeReports.top_clients(therapist)

        assert [row['name'] for row in ranking] == ['Elisa Prado', 'Carla Mendes']
        assert ranking[0]['total_paid'] == Decimal('500.00')
        assert ranking[1]['total_paid'] == Decimal('300.00')
        assert ranking[1]['sessions_completed'] == 2
        assert ranking[1]['client_id'] == patient.pk

    def test_limit_and_range(self, therapist, practice):
        best = Client.objects.create(owner=therapist, name='Elisa Prado')
        charge(therapist, best, '500.00', PaymentStatus.PAID, paid_at=aware(2026, 3, 20, 12, 0))

        assert len(PracticeReports.top_clients(therapist, limit=1)) == 1

        april = PracticeReports.top_clients(therapist, start_date=date(2026, 4, 1))
        assert [(row['name'], row['total_paid']) for row in april] == [('Carla Mendes', Decimal('150.00'))]


@pytest.mark.django_db
class TestDashboard:

    def test_dashboard(self, therapist, patient):
        now = aware(2026, 3, 10, 12, 0)
        book(therapist, patient, date(2026, 3, 5))
        book(therapist, patient, date(2026, 3, 10), at=time(9, 0))
        later_today = book(therapist, patient, date(2026, 3, 10), at=time(15, 0))
        next_week = book(therapist, patient, date(2026, 3, 17))
        book(therapist, patient, date(2026, 3, 18))
        charge(therapist, patient, '150.00', PaymentStatus.OVERDUE, date(2026, 3, 1))
        charge(therapist, patient, '80.00', PaymentStatus.OVERDUE, date(2026, 2, 20))

        data = PracticeReports.dashboard(therapist, now=now)

        assert data['month']['period_start'] == date(2026, 3, 1)
        assert data['month']['sessions_total'] == 5
        assert [row['id'] for row in data['upcoming_sessions']] == [later_today.pk, next_week.pk]
        assert data['upcoming_sessions'][0]['client_name'] == 'Carla Mendes'
        assert data['needs_attention']['count'] == 2
        assert [row['date'] for row in data['needs_attention']['sessions']] == [date(2026, 3, 5), date(2026, 3, 10)]
        assert data['overdue_payments']['count'] == 2
        assert data['overdue_payments']['total'] == Decimal('230.00')
        assert data['overdue_payments']['payments'][0]['amount'] == Decimal('80.00')


@pytest.mark.django_db
class TestPlatformOverview:

    def test_overview(self, therapist, other_therapist, patient):
        therapist.subscription_plan = SubscriptionPlan.PRO
        therapist.save()
        book(therapist, patient, date(2026, 3, 2), SessionStatus.COMPLETED)
        book(therapist, patient, date(2026, 3, 9))
        book(therapist, patient, date(2026, 4, 9))
        referral = Referral.objects.create(referrer=other_therapist, referred=therapist)
        for amount in (1000, 2000):
            ReferralPayout.objects.create(
                referrer=other_therapist,
                referral=referral,
                amount_cents=amount,
                status=PayoutStatus.PAID,
                period_start=date(2026, 3, 1),
                period_end=date(2026, 3, 1),
                approval_deadline=date(2026, 3, 16),
            )

        overview = PlatformReports.overview(today=date(2026, 3, 20))

        assert overview['users_total'] == 2
        assert overview['users_by_plan'] == {'basic': 1, 'pro': 1}
        assert overview['sessions_this_month'] == 2
        assert overview['sessions_by_status'] == {'completed': 1, 'scheduled': 1}
        assert overview['payouts_by_status'] == {'paid': {'count': 2, 'amount_cents': 3000}}

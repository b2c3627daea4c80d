"""
Reports Module
==============

Read-only aggregate queries behind the practice dashboard and the staff
platform overview.

Classes:
    PracticeReports: Figures for one therapist (sessions, revenue, clients).
    PlatformReports: Figures across all therapists, for staff.

Example:
    Monthly summary for the current user::

        from apps.reports.reports import PracticeReports

        start, end = PracticeReports.parse_period('2025-01')
        summary = PracticeReports.summary(request.user, start, end)
        print(f"Received: R$ {summary['revenue_received']}")

Note:
    Revenue is cash based: a payment counts in the month it was paid, not
    the month of the session. "Expected" revenue counts payments by due date.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.contrib.auth import get_user_model
from django.db.models import Count, Q, Sum
from django.db.models.functions import Coalesce, TruncMonth
from django.utils import timezone

from apps.clients.models import Client
from apps.payments.models import Payment, PaymentStatus, OUTSTANDING_STATUSES
from apps.referrals.models import ReferralPayout
from apps.scheduling.models import Session, SessionStatus
from apps.scheduling.services import sessions_needing_attention
from .exceptions import InvalidDateRangeError, InvalidPeriodError

ZERO = Decimal('0.00')
MAX_RANGE_DAYS = 731
UPCOMING_DAYS = 7
DASHBOARD_LIST_LIMIT = 10


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _month_end(day: date) -> date:
    return _month_start(day) + relativedelta(months=1) - timedelta(days=1)


class PracticeReports:
    """
    Aggregate queries for a single therapist.

    Methods:
        parse_period: 'YYYY-MM' to a (first day, last day) tuple.
        resolve_range: Validate a date range, defaulting to the current month.
        summary: Sessions, revenue and clients for a date range.
        revenue_timeseries: Received vs expected revenue per month.
        top_clients: Clients ranked by paid revenue.
        dashboard: Everything the home screen needs in one call.

    Note:
        All methods return plain dictionaries and lists so they can be
        passed straight to a serializer or a Response.
    """

    @staticmethod
    def parse_period(period):
        """
        Convert a month period to its first and last day.

        Raises:
            InvalidPeriodError: If period is not YYYY-MM
        """
        try:
            first = datetime.strptime(period, '%Y-%m').date()
        except (TypeError, ValueError):
            raise InvalidPeriodError("Invalid period format. Use YYYY-MM")
        return first, _month_end(first)

    @staticmethod
    def resolve_range(start_date=None, end_date=None, today=None):
        """
        Fill a missing bound from the current month and validate the range.

        Raises:
            InvalidDateRangeError: If start is after end or the range exceeds two years
        """
        today = today or timezone.localdate()
        start_date = start_date or _month_start(end_date or today)
        end_date = end_date or _month_end(start_date)

        if start_date > end_date:
            raise InvalidDateRangeError("Start date must be on or before end date")
        if (end_date - start_date).days > MAX_RANGE_DAYS:
            raise InvalidDateRangeError("Date range cannot exceed two years")
        return start_date, end_date

    @staticmethod
    def summary(owner, start_date=None, end_date=None):
        """
        Practice figures for a date range.

        Args:
            owner (User): The therapist.
            start_date (date, optional): Defaults to the first day of the month.
            end_date (date, optional): Defaults to the last day of that month.

        Returns:
            dict: A dictionary containing:
                - period_start, period_end (date)
                - sessions_total (int) and sessions_by_status (dict)
                - completion_rate (float): completed / held-or-missed sessions, in %
                - revenue_received (Decimal): paid payments by paid date
                - revenue_expected (Decimal): non-cancelled payments due in range
                - outstanding (Decimal): everything still owed today
                - overdue (Decimal): the overdue part of it
                - active_clients (int): clients with a session in range
                - new_clients (int): clients registered in range

        Raises:
            InvalidDateRangeError: If the range is invalid
        """
        start_date, end_date = PracticeReports.resolve_range(start_date, end_date)

        sessions = Session.objects.filter(owner=owner, date__gte=start_date, date__lte=end_date)
        by_status = {choice: 0 for choice in SessionStatus.values}
        for row in sessions.order_by().values('status').annotate(count=Count('id')):
            by_status[row['status']] = row['count']

        settled = (
            by_status[SessionStatus.COMPLETED]
            + by_status[SessionStatus.NO_SHOW]
            + by_status[SessionStatus.CANCELLED]
        )
        completion_rate = round(by_status[SessionStatus.COMPLETED] * 100 / settled, 1) if settled else 0.0

        payments = Payment.objects.filter(owner=owner)
        received = payments.filter(
            status=PaymentStatus.PAID,
            paid_at__date__gte=start_date,
            paid_at__date__lte=end_date,
        ).aggregate(total=Coalesce(Sum('amount'), ZERO))['total']
        expected = payments.filter(
            due_date__gte=start_date,
            due_date__lte=end_date,
        ).exclude(
            status__in=[PaymentStatus.CANCELLED, PaymentStatus.REFUNDED]
        ).aggregate(total=Coalesce(Sum('amount'), ZERO))['total']
        owed = payments.filter(status__in=OUTSTANDING_STATUSES).aggregate(
            outstanding=Coalesce(Sum('amount'), ZERO),
            overdue=Coalesce(Sum('amount', filter=Q(status=PaymentStatus.OVERDUE)), ZERO),
        )

        return {
            'period_start': start_date,
            'period_end': end_date,
            'sessions_total': sum(by_status.values()),
            'sessions_by_status': by_status,
            'completion_rate': completion_rate,
            'revenue_received': received,
            'revenue_expected': expected,
            'outstanding': owed['outstanding'],
            'overdue': owed['overdue'],
            'active_clients': sessions.order_by().values('client').distinct().count(),
            'new_clients': Client.objects.filter(
                owner=owner,
                created_at__date__gte=start_date,
                created_at__date__lte=end_date,
            ).count(),
        }

    @staticmethod
    def revenue_timeseries(owner, start_date=None, end_date=None):
        """
        Received and expected revenue per month, months without data included.

        Returns:
            list[dict]: ``{'month': 'YYYY-MM', 'received': Decimal, 'expected': Decimal}``
            ordered oldest first.
        """
        start_date, end_date = PracticeReports.resolve_range(start_date, end_date)
        payments = Payment.objects.filter(owner=owner).order_by()

        received = {
            row['month'].strftime('%Y-%m'): row['total']
            for row in (
                payments
                .filter(status=PaymentStatus.PAID, paid_at__date__gte=start_date, paid_at__date__lte=end_date)
                .annotate(month=TruncMonth('paid_at'))
                .values('month')
                .annotate(total=Sum('amount'))
            )
        }
        expected = {
            row['month'].strftime('%Y-%m'): row['total']
            for row in (
                payments
                .filter(due_date__gte=start_date, due_date__lte=end_date)
                .exclude(status__in=[PaymentStatus.CANCELLED, PaymentStatus.REFUNDED])
                .annotate(month=TruncMonth('due_date'))
                .values('month')
                .annotate(total=Sum('amount'))
            )
        }

        series = []
        month = _month_start(start_date)
        while month <= end_date:
            key = month.strftime('%Y-%m')
            series.append({
                'month': key,
                'received': received.get(key, ZERO),
                'expected': expected.get(key, ZERO),
            })
            month += relativedelta(months=1)
        return series

    @staticmethod
    def top_clients(owner, limit=10, start_date=None, end_date=None):
        """
        Clients ranked by paid revenue (all time unless a range is given).

        Returns:
            list[dict]: client_id, name, total_paid, sessions_completed
        """
        paid = Q(payments__status=PaymentStatus.PAID)
        if start_date:
            paid &= Q(payments__paid_at__date__gte=start_date)
        if end_date:
            paid &= Q(payments__paid_at__date__lte=end_date)

        clients = (
            Client.objects
            .filter(owner=owner)
            .annotate(total_paid=Coalesce(Sum('payments__amount', filter=paid), ZERO))
            .filter(total_paid__gt=0)
            .order_by('-total_paid', 'name')[:limit]
        )

        completed = dict(
            Session.objects
            .filter(owner=owner, status=SessionStatus.COMPLETED, client__in=[c.pk for c in clients])
            .order_by()
            .values_list('client')
            .annotate(count=Count('id'))
        )

        return [
            {
                'client_id': client.pk,
                'name': client.name,
                'total_paid': client.total_paid,
                'sessions_completed': completed.get(client.pk, 0),
            }
            for client in clients
        ]

    @staticmethod
    def dashboard(owner, now=None):
        """
        Home screen data in one call.

        Returns:
            dict: A dictionary containing:
                - month (dict): summary() of the current month
                - upcoming_sessions (list[dict]): scheduled in the next 7 days
                - needs_attention (dict): count and the oldest past sessions
                  still marked scheduled
                - overdue_payments (dict): count, total and the oldest ones
        """
        now = timezone.localtime(now or timezone.now())
        today = now.date()

        upcoming = (
            Session.objects
            .filter(
                owner=owner,
                status=SessionStatus.SCHEDULED,
                date__gte=today,
                date__lte=today + timedelta(days=UPCOMING_DAYS),
            )
            .exclude(date=today, time__lt=now.time())
            .select_related('client')
            .order_by('date', 'time')
        )
        attention = sessions_needing_attention(owner=owner, now=now)
        overdue = (
            Payment.objects
            .filter(owner=owner, status=PaymentStatus.OVERDUE)
            .select_related('client')
            .order_by('due_date')
        )

        return {
            'month': PracticeReports.summary(owner, _month_start(today), _month_end(today)),
            'upcoming_sessions': [_session_row(s) for s in upcoming],
            'needs_attention': {
                'count': attention.count(),
                'sessions': [_session_row(s) for s in attention[:DASHBOARD_LIST_LIMIT]],
            },
            'overdue_payments': {
                'count': overdue.count(),
                'total': overdue.aggregate(total=Coalesce(Sum('amount'), ZERO))['total'],
                'payments': [
                    {
                        'id': p.pk,
                        'reference': p.reference,
                        'client_name': p.client.name,
                        'amount': p.amount,
                        'due_date': p.due_date,
                    }
                    for p in overdue[:DASHBOARD_LIST_LIMIT]
                ],
            },
        }


def _session_row(session):
    return {
        'id': session.pk,
        'client_name': session.client.name,
        'date': session.date,
        'time': session.time,
        'duration_minutes': session.duration_minutes,
        'status': session.status,
    }


class PlatformReports:
    """Cross-tenant figures for staff."""

    @staticmethod
    def overview(today=None):
        """
        Users by plan, this month's sessions by status and referral payouts by status.

        Returns:
            dict: users_total, users_by_plan, sessions_this_month,
            sessions_by_status, payouts_by_status ({status: {count, amount_cents}})
        """
        today = today or timezone.localdate()
        User = get_user_model()

        users_by_plan = {
            row['subscription_plan']: row['count']
            for row in User.objects.order_by().values('subscription_plan').annotate(count=Count('id'))
        }

        sessions = Session.objects.filter(date__gte=_month_start(today), date__lte=_month_end(today))
        sessions_by_status = {
            row['status']: row['count']
            for row in sessions.order_by().values('status').annotate(count=Count('id'))
        }

        payouts_by_status = {
            row['status']: {'count': row['count'], 'amount_cents': row['amount_cents']}
            for row in (
                ReferralPayout.objects
                .order_by()
                .values('status')
                .annotate(count=Count('id'), amount_cents=Sum('amount_cents'))
            )
        }

        return {
            'users_total': sum(users_by_plan.values()),
            'users_by_plan': users_by_plan,
            'sessions_this_month': sum(sessions_by_status.values()),
            'sessions_by_status': sessions_by_status,
            'payouts_by_status': payouts_by_status,
        }

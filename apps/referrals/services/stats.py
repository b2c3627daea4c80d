"""Referral dashboard figures for a partner."""

from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta
from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from apps.referrals.models import PayoutStatus, ReferralPayout, ReferralStatus

HISTORY_MONTHS = 12
RECENT_PAYOUTS = 20


def referral_stats(*, user, today: Optional[date] = None) -> dict:
    """
    Referral counts, payout balances and paid history of a referrer.

    Returns:
        dict with ``referral_code``, ``is_partner``, ``referrals`` (counts per
        status plus total), ``balances`` (cents per payout status),
        ``monthly_history`` (paid cents for each of the last 12 months, oldest
        first) and ``recent_payouts`` (queryset of the 20 latest payouts).
    """
    today = today or timezone.localdate()

    by_status = {
        row['status']: row['count']
        for row in user.referrals_made.order_by().values('status').annotate(count=Count('id'))
    }
    referrals = {status: by_status.get(status, 0) for status in ReferralStatus.values}
    referrals['total'] = sum(by_status.values())

    payout_totals = {
        row['status']: row['total']
        for row in (
            ReferralPayout.objects
            .filter(referrer=user)
            .order_by()
            .values('status')
            .annotate(total=Sum('amount_cents'))
        )
    }
    balances = {
        'pending_cents': payout_totals.get(PayoutStatus.PENDING, 0),
        'approved_cents': payout_totals.get(PayoutStatus.APPROVED, 0),
        'processing_cents': payout_totals.get(PayoutStatus.PROCESSING, 0),
        'paid_cents': payout_totals.get(PayoutStatus.PAID, 0),
        'failed_cents': payout_totals.get(PayoutStatus.FAILED, 0),
        'cancelled_cents': payout_totals.get(PayoutStatus.CANCELLED, 0),
    }

    first_month = today.replace(day=1) - relativedelta(months=HISTORY_MONTHS - 1)
    paid_by_month = {
        row['month'].strftime('%Y-%m'): row['total']
        for row in (
            ReferralPayout.objects
            .filter(referrer=user, status=PayoutStatus.PAID, paid_at__date__gte=first_month)
            .annotate(month=TruncMonth('paid_at'))
            .order_by()
            .values('month')
            .annotate(total=Sum('amount_cents'))
        )
    }
    monthly_history = []
    for offset in range(HISTORY_MONTHS):
        key = (first_month + relativedelta(months=offset)).strftime('%Y-%m')
        monthly_history.append({'month': key, 'paid_cents': paid_by_month.get(key, 0)})

    return {
        'referral_code': user.referral_code,
        'is_partner': user.is_referral_partner,
        'referrals': referrals,
        'balances': balances,
        'monthly_history': monthly_history,
        'recent_payouts': ReferralPayout.objects.filter(referrer=user).order_by('-created_at')[:RECENT_PAYOUTS],
    }

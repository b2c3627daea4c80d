from datetime import date, datetime

import pytest
from django.utils import timezone

from apps.accounts.models import User
from apps.referrals.models import PayoutStatus, Referral, ReferralStatus
from apps.referrals.services import referral_stats


@pytest.mark.django_db
class TestReferralStats:

    def test_counts_and_balances(self, partner, referral, make_payout):
        other = User.objects.create_user(email='other@example.com', password='TestPass123!')
        Referral.objects.create(referrer=partner, referred=other, status=ReferralStatus.CONVERTED)
        make_payout(1000)
        make_payout(2000)
        make_payout(500, status=PayoutStatus.CANCELLED)

        stats = referral_stats(user=partner, today=date(2026, 3, 10))

        assert stats['referral_code'] == partner.referral_code
        assert stats['is_partner'] is True
        assert stats['referrals'] == {'pending': 1, 'converted': 1, 'cancelled': 0, 'total': 2}
        assert stats['balances']['pending_cents'] == 3000
        assert stats['balances']['cancelled_cents'] == 500
        assert stats['balances']['paid_cents'] == 0
        assert len(stats['recent_payouts']) == 3

    def test_monthly_history(self, partner, make_payout):
        payout = make_payout(4200, status=PayoutStatus.PAID)
        payout.paid_at = timezone.make_aware(datetime(2026, 2, 15, 10, 0))
        payout.save()
        old = make_payout(9999, status=PayoutStatus.PAID)
        old.paid_at = timezone.make_aware(datetime(2024, 1, 5, 10, 0))
        old.save()

        history = referral_stats(user=partner, today=date(2026, 3, 10))['monthly_history']

        assert len(history) == 12
        assert history[0]['month'] == '2025-04'
        assert history[-1] == {'month': '2026-03', 'paid_cents': 0}
        assert history[-2] == {'month': '2026-02', 'paid_cents': 4200}
        assert sum(row['paid_cents'] for row in history) == 4200

    def test_user_without_referrals(self, referred):
        stats = referral_stats(user=referred)

        assert stats['referrals']['total'] == 0
        assert stats['balances']['pending_cents'] == 0
        assert list(stats['recent_payouts']) == []

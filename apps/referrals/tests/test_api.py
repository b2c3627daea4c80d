import pytest
from django.urls import reverse
from rest_framework import status
from apps.referrals.models import PayoutStatus


@pytest.mark.django_db
class TestReferralEndpoints:
    """Tests for /api/referrals/"""

    def test_stats(self, authenticated_client, partner, referral, make_payout):
        make_payout(1500)

        response = authenticated_client.get(reverse('referrals:stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['referral_code'] == partner.referral_code
        assert response.data['referrals']['pending'] == 1
        assert response.data['balances']['pending_cents'] == 1500
        assert response.data['recent_payouts'][0]['amount'] == '15.00'

    def test_stats_requires_authentication(self, api_client):
        response = api_client.get(reverse('referrals:stats'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_referral_list(self, authenticated_client, referral):
        response = authenticated_client.get(reverse('referrals:referral-list'))

        assert response.data['count'] == 1
        assert response.data['results'][0]['referred_name'] == 'Referred User'

    def test_payout_list_filter(self, authenticated_client, make_payout):
        make_payout(1000)
        make_payout(2000, status=PayoutStatus.PAID)

        response = authenticated_client.get(reverse('referrals:payout-list'), {'status': 'paid'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['amount_cents'] == 2000

    def test_payout_list_invalid_status(self, authenticated_client):
        response = authenticated_client.get(reverse('referrals:payout-list'), {'status': 'lost'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_process_requires_staff(self, authenticated_client):
        response = authenticated_client.post(reverse('referrals:payout-process'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_process_without_api_key(self, staff_client, settings):
        settings.ASAAS_API_KEY = ''

        response = staff_client.post(reverse('referrals:payout-process'))

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_process_dry_run(self, staff_client, settings, make_payout):
        settings.ASAAS_API_KEY = 'key'
        payout = make_payout(6000)

        response = staff_client.post(reverse('referrals:payout-process'), {'dry_run': True}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['processed'] == 1
        assert response.data['results'][0]['status'] == 'would_pay'
        payout.refresh_from_db()
        assert payout.status == PayoutStatus.PENDING

import pytest
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import SubscriptionPlan, User
from apps.referrals.models import PayoutStatus, Referral, ReferralPayout


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def partner(db):
    """A referral partner with a validated PIX key."""
    return User.objects.create_user(
        email='partner@example.com',
        password='TestPass123!',
        display_name='Partner',
        is_referral_partner=True,
        pix_key='partner@example.com',
        bank_details_validated=True,
    )


@pytest.fixture
def referred(db):
    """A user on a paid plan who signed up with the partner's code."""
    return User.objects.create_user(
        email='referred@example.com',
        password='TestPass123!',
        display_name='Referred User',
        subscription_plan=SubscriptionPlan.PRO,
    )


@pytest.fixture
def referral(partner, referred):
    return Referral.objects.create(referrer=partner, referred=referred)


@pytest.fixture
def authenticated_client(api_client, partner):
    """Return an API client authenticated as the partner."""
    refresh = RefreshToken.for_user(partner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def staff_client(db):
    """Return an API client authenticated as a staff member."""
    staff = User.objects.create_user(
        email='staff@example.com',
        password='TestPass123!',
        is_staff=True,
    )
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {RefreshToken.for_user(staff).access_token}')
    return client


@pytest.fixture
def make_payout(referral):
    """Factory for payouts of the partner, due on 2026-03-01 by default."""
    def _make(amount_cents, deadline=date(2026, 3, 1), status=PayoutStatus.PENDING, referral=referral):
        return ReferralPayout.objects.create(
            referrer=referral.referrer,
            referral=referral,
            amount_cents=amount_cents,
            status=status,
            period_start=date(2026, 2, 14),
            period_end=date(2026, 2, 14),
            approval_deadline=deadline,
            referred_user_name=referral.referred.get_display_name(),
            referred_plan=referral.referred.subscription_plan,
        )
    return _make

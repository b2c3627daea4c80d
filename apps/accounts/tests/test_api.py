import uuid

import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import Notification, User
from apps.referrals.models import Referral


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('users:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'display_name': 'New User',
            'profession': 'Psychologist',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'tokens' in response.data
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['profession'] == 'Psychologist'
        assert len(response.data['user']['referral_code']) == 8
        assert User.objects.filter(email='newuser@example.com').exists()

    def test_register_duplicate_email(self, api_client, user):
        """Cannot register with existing email."""
        url = reverse('users:register')
        data = {
            'email': user.email,
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_password_mismatch(self, api_client):
        """Registration fails when passwords don't match."""
        url = reverse('users:register')
        data = {
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_register_weak_password(self, api_client):
        """Registration fails with weak password."""
        url = reverse('users:register')
        data = {
            'email': 'weak@example.com',
            'password': '123',
            'password_confirm': '123',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_with_referral_code(self, api_client, partner):
        """A partner's code links the new account as a pending referral."""
        url = reverse('users:register')
        data = {
            'email': 'referred@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'referral_code': 'partner1',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        referral = Referral.objects.get(referred__email='referred@example.com')
        assert referral.referrer == partner
        assert referral.status == 'pending'

    def test_register_with_unknown_referral_code(self, api_client):
        """Unknown codes are ignored."""
        url = reverse('users:register')
        data = {
            'email': 'nobody@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'referral_code': 'NOPE1234',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert not Referral.objects.exists()


# =============================================================================
# Login / Logout Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert 'tokens' in response.data
        assert response.data['user']['email'] == user.email

    def test_login_wrong_password(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'WrongPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_nonexistent_user(self, api_client):
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'ghost@example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, user_inactive):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_updates_last_login(self, api_client, user):
        assert user.last_login is None

        url = reverse('users:login')
        api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        user.refresh_from_db()
        assert user.last_login is not None

    def test_logout_success(self, authenticated_client):
        url = reverse('users:logout')
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_200_OK

    def test_logout_invalid_refresh_token(self, authenticated_client):
        url = reverse('users:logout')
        response = authenticated_client.post(url, {'refresh': 'not-a-token'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_unauthenticated(self, api_client):
        url = reverse('users:logout')
        response = api_client.post(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Profile Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET/PATCH /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['subscription_plan'] == 'basic'

    def test_get_current_user_unauthenticated(self, api_client):
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_practice_defaults(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.patch(url, {
            'display_name': 'Dr. Test',
            'default_session_value': '200.00',
        })

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.display_name == 'Dr. Test'
        assert str(user.default_session_value) == '200.00'

    def test_cannot_update_read_only_fields(self, authenticated_client, user):
        url = reverse('users:current-user')
        authenticated_client.patch(url, {
            'email': 'hacked@example.com',
            'subscription_plan': 'premium',
            'is_referral_partner': True,
        })

        user.refresh_from_db()
        assert user.email == 'testuser@example.com'
        assert user.subscription_plan == 'basic'
        assert user.is_referral_partner is False

    def test_enable_public_booking(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.patch(url, {'booking_slug': 'Dr-Test', 'booking_enabled': True})

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.booking_slug == 'dr-test'
        assert user.booking_enabled is True

    def test_enable_public_booking_without_slug(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.patch(url, {'booking_enabled': True})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'booking_slug' in response.data

    def test_booking_slug_is_unique(self, authenticated_client, other_user):
        other_user.booking_slug = 'taken'
        other_user.save()

        response = authenticated_client.patch(reverse('users:current-user'), {'booking_slug': 'taken'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Payout Details Tests
# =============================================================================

@pytest.mark.django_db
class TestPayoutDetails:
    """Tests for /api/auth/user/payout-details/"""

    def test_update_pix_key_and_validate(self, authenticated_client, user):
        url = reverse('users:payout-details')
        response = authenticated_client.patch(url, {'pix_key': 'test@example.com'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bank_details_validated'] is False

        response = authenticated_client.post(reverse('users:payout-details-validate'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bank_details_validated'] is True

    def test_validate_incomplete_details(self, authenticated_client):
        response = authenticated_client.post(reverse('users:payout-details-validate'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_change_resets_validation(self, authenticated_client, user):
        user.pix_key = 'old@example.com'
        user.bank_details_validated = True
        user.save()

        url = reverse('users:payout-details')
        response = authenticated_client.patch(url, {'pix_key': 'new@example.com'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bank_details_validated'] is False


# =============================================================================
# Notification Tests
# =============================================================================

@pytest.mark.django_db
class TestNotifications:
    """Tests for /api/auth/notifications/"""

    def test_list_only_own_notifications(self, authenticated_client, user, other_user):
        Notification.objects.create(user=user, title='Mine')
        Notification.objects.create(user=other_user, title='Not mine')

        response = authenticated_client.get(reverse('users:notification-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['title'] == 'Mine'

    def test_filter_unread(self, authenticated_client, user):
        read = Notification.objects.create(user=user, title='Read')
        read.mark_read()
        Notification.objects.create(user=user, title='Unread')

        response = authenticated_client.get(reverse('users:notification-list'), {'unread': 'true'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['title'] == 'Unread'

    def test_mark_read(self, authenticated_client, user):
        notification = Notification.objects.create(user=user, title='Hello')

        url = reverse('users:notification-read', args=[notification.id])
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_read'] is True

    def test_mark_read_of_other_user(self, authenticated_client, other_user):
        notification = Notification.objects.create(user=other_user, title='Hello')

        url = reverse('users:notification-read', args=[notification.id])
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_mark_read_not_found(self, authenticated_client):
        url = reverse('users:notification-read', args=[uuid.uuid4()])
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_mark_all_read(self, authenticated_client, user):
        Notification.objects.create(user=user, title='One')
        Notification.objects.create(user=user, title='Two')

        response = authenticated_client.post(reverse('users:notification-read-all'))

        assert response.status_code == status.HTTP_200_OK
        assert not Notification.objects.filter(user=user, read_at__isnull=True).exists()

import pytest
from django.core.cache import cache
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.clients.models import Client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def therapist(db):
    """Create and return a therapist with a default session value."""
    return User.objects.create_user(
        email='therapist@example.com',
        password='TestPass123!',
        display_name='Therapist',
        email_verified=True,
        default_session_value=Decimal('150.00'),
    )


@pytest.fixture
def other_therapist(db):
    """Create and return a second, unrelated therapist."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other Therapist',
        email_verified=True,
    )


@pytest.fixture
def authenticated_client(api_client, therapist):
    """Return an API client authenticated as the therapist."""
    refresh = RefreshToken.for_user(therapist)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def patient(therapist):
    """A client of the therapist."""
    return Client.objects.create(
        owner=therapist,
        name='Carla Mendes',
        email='carla@example.com',
        phone='+55 11 99999-0001',
        clinical_notes='Anxiety',
    )


@pytest.fixture
def foreign_patient(other_therapist):
    """A client belonging to the other therapist."""
    return Client.objects.create(owner=other_therapist, name='Someone Else', email='else@example.com')


@pytest.fixture(autouse=True)
def throttle_counters():
    """Start every test with empty rate limit counters."""
    cache.clear()

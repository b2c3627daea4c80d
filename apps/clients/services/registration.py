"""
Client self-registration through a link sent by the therapist.

The link carries a token signed with ``django.core.signing`` that names a
RegistrationInvite. The signature proves the link was issued here and
bounds its lifetime; the invite row makes it single-use.
"""

from datetime import date, timedelta
from typing import Optional
import logging

from django.conf import settings
from django.core import signing
from django.db import transaction
from django.utils import timezone

from apps.accounts.services import notify
from ..models import Client, RegistrationInvite
from .client_management import create_client
from .exceptions import (
    ExpiredRegistrationTokenError,
    InvalidRegistrationTokenError,
    UsedRegistrationTokenError,
)

logger = logging.getLogger(__name__)

REGISTRATION_SALT = 'clients.registration'


def _max_age() -> int:
    return settings.CLIENT_REGISTRATION_TOKEN_DAYS * 24 * 60 * 60


def create_registration_invite(*, owner) -> dict:
    """
    Issue a registration link for a new client of ``owner``.

    Returns:
        dict with token, registration_url, expires_at and professional_name
    """
    invite = RegistrationInvite.objects.create(owner=owner)
    token = signing.dumps({'invite': str(invite.id)}, salt=REGISTRATION_SALT)
    logger.info("Registration invite %s issued by %s", invite.id, owner.pk)

    return {
        'token': token,
        'registration_url': f"{settings.FRONTEND_URL.rstrip('/')}/register/{token}",
        'expires_at': invite.created_at + timedelta(days=settings.CLIENT_REGISTRATION_TOKEN_DAYS),
        'professional_name': owner.get_display_name(),
    }


def validate_registration_token(token: str, *, lock: bool = False) -> RegistrationInvite:
    """
    Return the unused invite behind ``token``.

    Raises:
        ExpiredRegistrationTokenError: If the token is past its lifetime
        InvalidRegistrationTokenError: If the token is tampered with or unknown
        UsedRegistrationTokenError: If a client already registered with it
    """
    try:
        data = signing.loads(token, salt=REGISTRATION_SALT, max_age=_max_age())
    except signing.SignatureExpired:
        raise ExpiredRegistrationTokenError("Registration link has expired")
    except signing.BadSignature:
        raise InvalidRegistrationTokenError("Invalid registration link")

    invites = RegistrationInvite.objects.select_related('owner')
    if lock:
        invites = invites.select_for_update()
    invite = invites.filter(id=data.get('invite')).first()
    if invite is None:
        raise InvalidRegistrationTokenError("Invalid registration link")
    if invite.is_used:
        raise UsedRegistrationTokenError("Registration link was already used")
    return invite


@transaction.atomic
def register_client_with_token(
    *,
    token: str,
    name: str,
    email: str,
    phone: str = '',
    birth_date: Optional[date] = None,
    notes: str = '',
) -> Client:
    """
    Create the client described by a registration form and spend the invite.

    What the client writes about themselves goes to the client's history;
    clinical notes stay the therapist's.

    Raises:
        RegistrationTokenError: If the token cannot be used
        DuplicateClientEmailError: If the therapist already has a client with this email
    """
    invite = validate_registration_token(token, lock=True)

    client = create_client(
        owner=invite.owner,
        name=name,
        email=email,
        phone=phone.strip(),
        birth_date=birth_date,
        history=notes.strip(),
    )

    invite.client = client
    invite.used_at = timezone.now()
    invite.save(update_fields=['client', 'used_at'])

    notify(
        user=invite.owner,
        title='New client registered',
        content=f"{client.name} completed their registration.",
    )
    logger.info("Client %s registered through invite %s", client.id, invite.id)
    return client

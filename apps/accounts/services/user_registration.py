"""User registration service."""

from typing import Optional
import logging
import secrets

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from apps.referrals.models import Referral, ReferralStatus
from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = "",
    profession: str = "",
    referral_code: Optional[str] = None,
) -> User:
    """
    Register a new therapist with an email verification token.

    When ``referral_code`` belongs to a referral partner, a pending
    referral linking both accounts is recorded. Unknown codes are ignored.

    Raises:
        UserRegistrationError: If the user cannot be created
    """
    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name,
            profession=profession,
            verification_token=secrets.token_urlsafe(32),
        )
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {e}")

    if referral_code:
        referrer = (
            User.objects
            .filter(
                referral_code=referral_code.strip().upper(),
                is_referral_partner=True,
                is_active=True,
            )
            .first()
        )
        if referrer is None:
            logger.info("Ignoring unknown referral code on registration of %s", user.id)
        else:
            Referral.objects.create(
                referrer=referrer,
                referred=user,
                status=ReferralStatus.PENDING,
            )
            logger.info("Referral recorded: %s referred %s", referrer.id, user.id)

    return user

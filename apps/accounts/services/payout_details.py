"""Payout (PIX / bank transfer) details of referral partners."""

import logging
import re

from django.db import transaction
from django.contrib.auth import get_user_model

from .exceptions import InvalidBankDetailsError

User = get_user_model()
logger = logging.getLogger(__name__)

PAYOUT_FIELDS = (
    'pix_key',
    'bank_name',
    'bank_agency',
    'bank_account',
    'bank_account_type',
    'tax_id',
    'account_holder_name',
)


def only_digits(value: str) -> str:
    return re.sub(r'\D', '', value or '')


@transaction.atomic
def update_payout_details(*, user: User, **fields) -> User:
    """
    Update payout fields. Any actual change invalidates previous validation.

    Raises:
        InvalidBankDetailsError: If an unknown field is passed
    """
    unknown = set(fields) - set(PAYOUT_FIELDS)
    if unknown:
        raise InvalidBankDetailsError(f"Unknown payout fields: {', '.join(sorted(unknown))}")

    user = User.objects.select_for_update().get(pk=user.pk)

    changed = []
    for field, value in fields.items():
        value = (value or '').strip()
        if getattr(user, field) != value:
            setattr(user, field, value)
            changed.append(field)

    if changed:
        user.bank_details_validated = False
        user.save(update_fields=changed + ['bank_details_validated'])
        logger.info("Payout details changed for user %s: %s", user.id, ', '.join(changed))

    return user


@transaction.atomic
def validate_payout_details(*, user: User) -> User:
    """
    Mark payout details as validated.

    Valid when a PIX key is present, or when bank, agency, account and a
    CPF (11 digits) / CNPJ (14 digits) are all filled in.

    Raises:
        InvalidBankDetailsError: If details are incomplete
    """
    user = User.objects.select_for_update().get(pk=user.pk)

    if user.tax_id and len(only_digits(user.tax_id)) not in (11, 14):
        raise InvalidBankDetailsError("Tax id must be a CPF (11 digits) or CNPJ (14 digits)")

    if not user.pix_key:
        missing = [
            field for field in ('bank_name', 'bank_agency', 'bank_account', 'tax_id')
            if not getattr(user, field)
        ]
        if missing:
            raise InvalidBankDetailsError(
                f"Provide a PIX key or complete bank details (missing: {', '.join(missing)})"
            )

    user.bank_details_validated = True
    user.save(update_fields=['bank_details_validated'])
    return user

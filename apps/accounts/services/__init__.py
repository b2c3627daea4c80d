"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidBankDetailsError,
    NotificationNotFoundError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .payout_details import update_payout_details, validate_payout_details, PAYOUT_FIELDS
from .notifications import notify, mark_notification_read, mark_all_notifications_read

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidBankDetailsError',
    'NotificationNotFoundError',
    # Services
    'register_user',
    'authenticate_user',
    'update_payout_details',
    'validate_payout_details',
    'PAYOUT_FIELDS',
    'notify',
    'mark_notification_read',
    'mark_all_notifications_read',
]

"""Services for clients business logic."""

from .exceptions import (
    ClientsServiceError,
    DuplicateClientEmailError,
    RegistrationTokenError,
    InvalidRegistrationTokenError,
    ExpiredRegistrationTokenError,
    UsedRegistrationTokenError,
)
from .client_management import (
    create_client,
    update_client,
    deactivate_client,
    reactivate_client,
    find_or_create_client_by_email,
    client_summary,
)
from .registration import (
    create_registration_invite,
    validate_registration_token,
    register_client_with_token,
)

__all__ = [
    # Exceptions
    'ClientsServiceError',
    'DuplicateClientEmailError',
    'RegistrationTokenError',
    'InvalidRegistrationTokenError',
    'ExpiredRegistrationTokenError',
    'UsedRegistrationTokenError',
    # Services
    'create_client',
    'update_client',
    'deactivate_client',
    'reactivate_client',
    'find_or_create_client_by_email',
    'client_summary',
    # Self-registration
    'create_registration_invite',
    'validate_registration_token',
    'register_client_with_token',
]

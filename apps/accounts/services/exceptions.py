"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class InvalidBankDetailsError(AccountsServiceError):
    """Raised when payout details are incomplete or malformed."""
    pass


class NotificationNotFoundError(AccountsServiceError):
    """Raised when a notification does not exist for the user."""
    pass

"""Domain-specific exceptions for clients services."""


class ClientsServiceError(Exception):
    """Base exception for clients services."""
    pass


class DuplicateClientEmailError(ClientsServiceError):
    """Raised when the owner already has a client with this email."""
    pass


class RegistrationTokenError(ClientsServiceError):
    """Raised when a registration link cannot be used."""
    pass


class InvalidRegistrationTokenError(RegistrationTokenError):
    """Raised when a registration token is malformed, tampered with or unknown."""
    pass


class ExpiredRegistrationTokenError(RegistrationTokenError):
    """Raised when a registration token is older than its lifetime."""
    pass


class UsedRegistrationTokenError(RegistrationTokenError):
    """Raised when a registration token was already used."""
    pass

"""Domain-specific exceptions for the referral programme."""


class ReferralsServiceError(Exception):
    """Base exception for referral services."""
    pass


class AsaasConfigurationError(ReferralsServiceError):
    """Raised when the Asaas API key is missing."""
    pass


class AsaasAPIError(ReferralsServiceError):
    """Raised when Asaas cannot be reached or answers something unreadable."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class InvalidCommissionError(ReferralsServiceError):
    """Raised when a subscription payment cannot be turned into a commission."""
    pass

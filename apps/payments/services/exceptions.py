"""
Domain exceptions for payments app.

Service-level failures derive from PaymentsServiceError; state errors that
views let propagate are DRF APIExceptions.
"""
from rest_framework.exceptions import APIException


class PaymentsServiceError(Exception):
    """Base exception for payment service errors."""
    pass


class PixConfigurationError(PaymentsServiceError):
    """Therapist has no PIX key (or merchant name) configured."""
    pass


class PixGenerationError(PaymentsServiceError):
    """PIX BR Code payload could not be built."""
    pass


class PaymentAlreadyPaidError(APIException):
    """Payment already marked as paid."""
    status_code = 400
    default_detail = 'Payment is already marked as paid.'
    default_code = 'payment_already_paid'


class InvalidPaymentTransitionError(APIException):
    """Invalid payment state transition."""
    status_code = 400
    default_detail = 'Invalid state transition for payment.'
    default_code = 'invalid_payment_transition'

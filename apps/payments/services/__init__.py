"""Services for payments business logic."""

from .exceptions import (
    PaymentsServiceError,
    PixConfigurationError,
    PixGenerationError,
    PaymentAlreadyPaidError,
    InvalidPaymentTransitionError,
)
from .payment_management import (
    create_payment,
    mark_paid,
    cancel_payment,
    refund_payment,
    mark_overdue_payments,
    sync_payment_with_session,
    outstanding_summary,
)
from .pix import PixPaymentGenerator, crc16_ccitt

__all__ = [
    # Exceptions
    'PaymentsServiceError',
    'PixConfigurationError',
    'PixGenerationError',
    'PaymentAlreadyPaidError',
    'InvalidPaymentTransitionError',
    # Services
    'create_payment',
    'mark_paid',
    'cancel_payment',
    'refund_payment',
    'mark_overdue_payments',
    'sync_payment_with_session',
    'outstanding_summary',
    'PixPaymentGenerator',
    'crc16_ccitt',
]

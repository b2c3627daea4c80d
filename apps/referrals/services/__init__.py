"""Services for the referral programme: commissions, payouts and stats."""

from .exceptions import (
    ReferralsServiceError,
    AsaasConfigurationError,
    AsaasAPIError,
    InvalidCommissionError,
)
from .asaas import AsaasClient
from .bank_codes import get_bank_code
from .commissions import (
    record_subscription_payment,
    cancel_pending_commissions,
    gateway_fee_cents,
    net_amount_cents,
)
from .payouts import process_payouts, due_payouts, build_transfer_payload
from .stats import referral_stats

__all__ = [
    # Exceptions
    'ReferralsServiceError',
    'AsaasConfigurationError',
    'AsaasAPIError',
    'InvalidCommissionError',
    # Gateway
    'AsaasClient',
    'get_bank_code',
    # Commissions
    'record_subscription_payment',
    'cancel_pending_commissions',
    'gateway_fee_cents',
    'net_amount_cents',
    # Payouts
    'process_payouts',
    'due_payouts',
    'build_transfer_payload',
    # Stats
    'referral_stats',
]

"""Audit trail helpers for commission and payout events."""

from apps.referrals.models import ReferralAuditLog


def mask(value) -> str:
    """Keep only the last four characters of a sensitive value."""
    value = str(value or '')
    return '***' + value[-4:]


def log_action(action: str, **fields) -> ReferralAuditLog:
    return ReferralAuditLog.objects.create(action=action, **fields)

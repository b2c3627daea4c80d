"""
Monthly referral payout batch.

Payouts whose approval deadline has passed are grouped per referrer and
sent as one Asaas transfer (PIX when the referrer has a key, TED
otherwise). Each referrer's payouts are first claimed as processing in a
committed transaction, then the transfer is sent and its outcome is
recorded in a second transaction. A crash after the transfer leaves the payouts
processing, never due again, so nobody is paid twice.
"""

from collections import OrderedDict
from datetime import date
from typing import Optional
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import BankAccountType
from apps.accounts.services import notify
from apps.accounts.services.payout_details import only_digits
from apps.referrals.models import PaymentGateway, PayoutMethod, PayoutStatus, ReferralPayout
from .asaas import AsaasClient
from .audit import log_action, mask
from .bank_codes import get_bank_code
from .exceptions import AsaasAPIError

logger = logging.getLogger(__name__)

DUE_STATUSES = (PayoutStatus.PENDING, PayoutStatus.APPROVED)


def due_payouts(today: Optional[date] = None):
    today = today or timezone.localdate()
    return (
        ReferralPayout.objects
        .filter(status__in=DUE_STATUSES, approval_deadline__lte=today)
        .select_related('referrer', 'referral__referred')
        .order_by('created_at')
    )


def _cancel(payouts, reason):
    for payout in payouts:
        payout.status = PayoutStatus.CANCELLED
        payout.failure_reason = reason
        payout.save(update_fields=['status', 'failure_reason', 'updated_at'])


def _referred_plan_active(payout) -> bool:
    if payout.referral is None:
        return True
    return payout.referral.referred.has_paid_plan


def build_transfer_payload(referrer, amount_cents: int, count: int):
    """
    Asaas transfer body for a referrer, or None without a payment method.

    Returns:
        (payload, method) tuple
    """
    description = f"Referral commission - {count} referral(s)"
    value = amount_cents / 100

    if referrer.pix_key:
        payload = {
            'value': value,
            'operationType': PayoutMethod.PIX,
            'pixAddressKey': referrer.pix_key,
            'description': description,
        }
        return payload, PayoutMethod.PIX

    if referrer.has_bank_transfer_details:
        account = only_digits(referrer.bank_account)
        payload = {
            'value': value,
            'operationType': PayoutMethod.TED,
            'bankAccount': {
                'bank': {'code': get_bank_code(referrer.bank_name)},
                'accountName': referrer.account_holder_name or referrer.get_display_name(),
                'cpfCnpj': only_digits(referrer.tax_id),
                'agency': only_digits(referrer.bank_agency),
                'account': account,
                'accountDigit': account[-1:] or '0',
                'bankAccountType': 'SAVINGS' if referrer.bank_account_type == BankAccountType.SAVINGS else 'CHECKING',
            },
            'description': description,
        }
        return payload, PayoutMethod.TED

    return None, None


def masked_payload(payload: dict) -> dict:
    masked = dict(payload)
    if 'pixAddressKey' in masked:
        masked['pixAddressKey'] = mask(masked['pixAddressKey'])
    if 'bankAccount' in masked:
        bank_account = dict(masked['bankAccount'])
        bank_account['cpfCnpj'] = mask(bank_account.get('cpfCnpj'))
        bank_account['account'] = mask(bank_account.get('account'))
        masked['bankAccount'] = bank_account
    return masked


@transaction.atomic
def _claim_payouts(referrer, payouts, dry_run=False):
    """
    Run the payout checks for one referrer and claim the payable payouts.

    Claimed payouts move to ``processing`` and the claim commits before any
    money moves, so a crash after the transfer can never leave them due.

    Returns:
        (result, claim) tuple. ``claim`` is None when nothing is to be
        transferred; ``result`` is then the final outcome.
    """
    minimum = settings.REFERRAL_MINIMUM_PAYOUT_CENTS
    payouts = list(
        ReferralPayout.objects
        .select_for_update()
        .select_related('referral__referred')
        .filter(pk__in=[p.pk for p in payouts], status__in=DUE_STATUSES)
        .order_by('created_at')
    )
    result = {'referrer_id': str(referrer.pk), 'referrer_email': referrer.email}

    if not referrer.is_referral_partner:
        if not dry_run:
            _cancel(payouts, 'not_partner')
        return {**result, 'status': 'cancelled', 'reason': 'not_partner', 'cancelled': len(payouts)}, None

    if not referrer.bank_details_validated:
        return {**result, 'status': 'skipped', 'reason': 'invalid_bank_details'}, None

    total = sum(p.amount_cents for p in payouts)
    if total < minimum:
        return {**result, 'status': 'skipped', 'reason': 'below_minimum', 'amount': total, 'minimum': minimum}, None

    valid = [p for p in payouts if _referred_plan_active(p)]
    inactive = [p for p in payouts if p not in valid]
    if inactive and not dry_run:
        _cancel(inactive, 'referred_subscription_cancelled')
    result['cancelled'] = len(inactive)

    if not valid:
        return {**result, 'status': 'skipped', 'reason': 'no_valid_payouts'}, None

    amount = sum(p.amount_cents for p in valid)
    if amount < minimum:
        return {**result, 'status': 'skipped', 'reason': 'below_minimum_after_validation', 'amount': amount}, None

    payload, method = build_transfer_payload(referrer, amount, len(valid))
    if payload is None:
        return {**result, 'status': 'skipped', 'reason': 'no_payment_method'}, None

    if dry_run:
        return {
            **result, 'status': 'would_pay', 'amount': amount, 'method': method, 'payouts_count': len(valid),
        }, None

    for payout in valid:
        payout.status = PayoutStatus.PROCESSING
        payout.payment_method = method
        payout.save(update_fields=['status', 'payment_method', 'updated_at'])

    claim = {'payout_ids': [p.pk for p in valid], 'payload': payload, 'method': method, 'amount': amount}
    return result, claim


def _transfer_failure(response) -> str:
    """Failure reason of an Asaas transfer response, or '' when it succeeded."""
    if not isinstance(response, dict):
        return 'invalid_response'

    errors = response.get('errors')
    if not errors:
        return ''
    first = errors[0] if isinstance(errors, list) else errors
    if isinstance(first, dict):
        return first.get('description') or 'transfer_error'
    return str(first) or 'transfer_error'


@transaction.atomic
def _record_transfer(referrer, claim, result, requested_at, response=None, error=None):
    """Write the outcome of a claimed transfer. Returns the result dict."""
    payouts = list(ReferralPayout.objects.select_for_update().filter(pk__in=claim['payout_ids']))
    amount = claim['amount']
    request = {'timestamp': requested_at.isoformat(), 'payload': masked_payload(claim['payload'])}

    if error is not None:
        failure = 'connection_error'
        metadata = {'request': request, 'error': str(error)}
    else:
        failure = _transfer_failure(response)
        metadata = {'request': request, 'response': {'timestamp': timezone.now().isoformat(), 'body': response}}

    log_action(
        'asaas_transfer_request',
        referrer=referrer,
        gateway=PaymentGateway.ASAAS,
        status='failed' if failure else 'success',
        commission_amount_cents=amount,
        failure_reason=failure,
        metadata=metadata,
    )

    if failure:
        for payout in payouts:
            payout.status = PayoutStatus.FAILED
            payout.failure_reason = failure
            payout.save(update_fields=['status', 'failure_reason', 'updated_at'])
        return {**result, 'status': 'failed', 'reason': failure, 'amount': amount}

    paid_at = timezone.now()
    transfer_id = response.get('id', '')
    for payout in payouts:
        payout.status = PayoutStatus.PAID
        payout.paid_at = paid_at
        payout.transfer_id = transfer_id
        payout.failure_reason = ''
        payout.save(update_fields=['status', 'paid_at', 'transfer_id', 'failure_reason', 'updated_at'])

    return {
        **result, 'status': 'paid', 'amount': amount, 'method': claim['method'],
        'transfer_id': transfer_id, 'payouts_count': len(payouts),
    }


def _settle_referrer(referrer, payouts, client, dry_run=False):
    """Check, claim, transfer and record one referrer's payouts. Returns a result dict."""
    result, claim = _claim_payouts(referrer, payouts, dry_run=dry_run)
    if claim is None:
        return result

    requested_at = timezone.now()
    try:
        response = client.create_transfer(claim['payload'])
    except AsaasAPIError as e:
        logger.error("Asaas transfer for referrer %s failed: %s", referrer.pk, e)
        return _record_transfer(referrer, claim, result, requested_at, error=e)

    result = _record_transfer(referrer, claim, result, requested_at, response=response)
    if result['status'] != 'paid':
        logger.warning("Asaas rejected transfer for referrer %s: %s", referrer.pk, result['reason'])
        return result

    notify(
        user=referrer,
        title='Commission payment sent',
        content=(
            f"Your payment of R$ {result['amount'] / 100:.2f} for {result['payouts_count']} referral(s) "
            f"was sent via {result['method']}. It should reach your account within one business day."
        ),
    )
    logger.info(
        "Paid %d cents to referrer %s via %s (transfer %s)",
        result['amount'], referrer.pk, result['method'], result['transfer_id'],
    )
    return result


def process_payouts(*, today: Optional[date] = None, client: Optional[AsaasClient] = None,
                    dry_run: bool = False) -> dict:
    """
    Pay every referrer whose commissions are past their approval deadline.

    Args:
        today: Reference date for the approval deadline, defaults to today
        client: Asaas client, built from settings when omitted
        dry_run: Evaluate every referrer without changing or transferring anything

    Returns:
        dict with processed, paid, failed, skipped and cancelled counts and
        one result entry per referrer. ``cancelled`` counts payouts, the
        other counters count referrers.

    Raises:
        AsaasConfigurationError: If no Asaas API key is configured
    """
    client = client or AsaasClient()

    grouped = OrderedDict()
    for payout in due_payouts(today):
        grouped.setdefault(payout.referrer_id, (payout.referrer, []))[1].append(payout)

    results = []
    for referrer, payouts in grouped.values():
        results.append(_settle_referrer(referrer, payouts, client, dry_run=dry_run))

    summary = {
        'processed': len(results),
        'paid': sum(1 for r in results if r['status'] == 'paid'),
        'failed': sum(1 for r in results if r['status'] == 'failed'),
        'skipped': sum(1 for r in results if r['status'] == 'skipped'),
        'cancelled': sum(r.get('cancelled', 0) for r in results),
        'results': results,
    }
    logger.info(
        "Referral payouts processed: %d referrer(s), %d paid, %d failed, %d skipped",
        summary['processed'], summary['paid'], summary['failed'], summary['skipped'],
    )
    return summary

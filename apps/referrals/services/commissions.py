"""
Commission rules for referred users' subscription payments.

All amounts are integer centavos. Commissions are computed on the amount
left after the payment gateway fee:

    * yearly plan: 20% of net, paid out in 12 monthly installments
    * first monthly payment: 30% of net, converts the referral
    * later monthly payments and upgrades: 15% of net
"""

from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
import logging

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.services import notify
from apps.referrals.models import (
    PaymentGateway,
    PayoutStatus,
    Referral,
    ReferralPayout,
    ReferralStatus,
)
from .audit import log_action
from .exceptions import InvalidCommissionError

logger = logging.getLogger(__name__)

GATEWAY_FEES = {
    PaymentGateway.ASAAS: (Decimal('0.0299'), 49),
    PaymentGateway.STRIPE: (Decimal('0.0399'), 39),
}

FIRST_MONTH_RATE = Decimal('0.30')
RECURRING_RATE = Decimal('0.15')
YEARLY_RATE = Decimal('0.20')
YEARLY_INSTALLMENTS = 12


def _round_cents(value) -> int:
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def gateway_fee_cents(gross_amount_cents: int, gateway: str) -> int:
    if gateway not in GATEWAY_FEES:
        raise InvalidCommissionError(f"Unknown payment gateway: {gateway}")
    percentage, fixed = GATEWAY_FEES[gateway]
    return _round_cents(gross_amount_cents * percentage) + fixed


def net_amount_cents(gross_amount_cents: int, gateway: str) -> int:
    return max(0, gross_amount_cents - gateway_fee_cents(gross_amount_cents, gateway))


def _format_brl(cents: int) -> str:
    return f"R$ {cents / 100:.2f}"


def _new_payout(referral, amount_cents, period_start, period_end, plan, installment_number=None):
    return ReferralPayout.objects.create(
        referrer=referral.referrer,
        referral=referral,
        amount_cents=amount_cents,
        status=PayoutStatus.PENDING,
        period_start=period_start,
        period_end=period_end,
        approval_deadline=period_start + timedelta(days=settings.REFERRAL_APPROVAL_DAYS),
        referred_user_name=referral.referred.get_display_name(),
        referred_plan=plan,
        installment=installment_number is not None,
        installment_number=installment_number,
    )


def _convert(referral, plan, gross_amount_cents, rate, commission_cents, paid_at):
    referral.status = ReferralStatus.CONVERTED
    referral.subscription_plan = plan
    referral.subscription_amount_cents = gross_amount_cents
    referral.commission_rate = rate
    referral.commission_amount_cents = commission_cents
    referral.first_payment_at = paid_at
    referral.save()


@transaction.atomic
def record_subscription_payment(
    *,
    referred_user,
    gross_amount_cents: int,
    gateway: str = PaymentGateway.ASAAS,
    plan: Optional[str] = None,
    is_yearly: bool = False,
    is_upgrade: bool = False,
    paid_at: Optional[datetime] = None,
) -> List[ReferralPayout]:
    """
    Create the referrer's commission payouts for a confirmed subscription payment.

    Args:
        referred_user: The user who paid
        gross_amount_cents: Amount charged, in centavos
        gateway: 'asaas' or 'stripe', decides the fee deducted before commission
        plan: Plan paid for, defaults to the user's current plan
        is_yearly: Yearly billing cycle
        is_upgrade: Proration charge of a plan upgrade
        paid_at: Payment confirmation time, defaults to now

    Returns:
        The created payouts; empty when the user was not referred, the
        referral is cancelled or the commission rounds to zero.

    Raises:
        InvalidCommissionError: If the gateway is unknown or the amount negative
    """
    if gross_amount_cents < 0:
        raise InvalidCommissionError("Payment amount cannot be negative")

    referral = (
        Referral.objects
        .select_for_update()
        .select_related('referrer', 'referred')
        .filter(referred=referred_user)
        .first()
    )
    if referral is None or referral.status == ReferralStatus.CANCELLED:
        return []

    paid_at = paid_at or timezone.now()
    paid_on = timezone.localdate(paid_at) if timezone.is_aware(paid_at) else paid_at.date()
    plan = plan or referred_user.subscription_plan
    fee = gateway_fee_cents(gross_amount_cents, gateway)
    net = max(0, gross_amount_cents - fee)
    is_first_payment = referral.first_payment_at is None
    name = referral.referred.get_display_name()

    if is_yearly and not is_upgrade:
        rate = YEARLY_RATE
        commission = _round_cents(net * rate)
        installment = _round_cents(Decimal(commission) / YEARLY_INSTALLMENTS)
        if is_first_payment:
            _convert(referral, plan, gross_amount_cents, rate, commission, paid_at)

        payouts = []
        if installment > 0:
            for k in range(YEARLY_INSTALLMENTS):
                start = paid_on + relativedelta(months=k)
                end = start + relativedelta(months=1) - timedelta(days=1)
                payouts.append(_new_payout(referral, installment, start, end, plan, installment_number=k + 1))

        action = 'annual_commission_created' if is_first_payment else 'annual_recurring_commission'
        title = 'New yearly referral' if is_first_payment else 'Yearly renewal'
        content = (
            f"{name} {'subscribed to' if is_first_payment else 'renewed'} the yearly {plan} plan. "
            f"You will receive {_format_brl(commission)} (20%) in {YEARLY_INSTALLMENTS} "
            f"monthly installments of {_format_brl(installment)}."
        )

    elif is_first_payment and not is_upgrade:
        rate = FIRST_MONTH_RATE
        commission = _round_cents(net * rate)
        _convert(referral, plan, gross_amount_cents, rate, commission, paid_at)
        payouts = [_new_payout(referral, commission, paid_on, paid_on, plan)] if commission > 0 else []

        action = 'commission_created'
        title = 'Referral converted'
        content = f"{name} subscribed to the {plan} plan through your referral. You earned {_format_brl(commission)} (30%)."

    else:
        rate = RECURRING_RATE
        commission = _round_cents(net * rate)
        if is_first_payment:
            _convert(referral, plan, gross_amount_cents, rate, commission, paid_at)
        payouts = [_new_payout(referral, commission, paid_on, paid_on, plan)] if commission > 0 else []

        action = 'proration_commission' if is_upgrade else 'recurring_commission'
        title = 'Referral commission'
        content = (
            f"{name} {'upgraded the subscription' if is_upgrade else 'renewed the subscription'}. "
            f"You will receive {_format_brl(commission)} (15%)."
        )

    if not payouts:
        logger.info("No commission for referral %s: net amount %d", referral.id, net)
        return []

    log_action(
        action,
        referrer=referral.referrer,
        referred=referral.referred,
        referral=referral,
        payout=payouts[0],
        gateway=gateway,
        status=PayoutStatus.PENDING,
        gross_amount_cents=gross_amount_cents,
        net_amount_cents=net,
        commission_amount_cents=commission,
        metadata={
            'gateway_fee_cents': fee,
            'commission_rate': str(rate),
            'plan': plan,
            'yearly': is_yearly,
            'upgrade': is_upgrade,
            'payouts_created': len(payouts),
        },
    )
    notify(user=referral.referrer, title=title, content=content)

    logger.info(
        "Referral %s: %d payout(s) created, commission %d cents (%s)",
        referral.id, len(payouts), commission, action,
    )
    return payouts


@transaction.atomic
def cancel_pending_commissions(*, referred_user, reason: str = 'refunded') -> int:
    """
    Cancel the not yet paid payouts of a referred user's referral, e.g.
    after the subscription payment was refunded.

    Returns:
        Number of payouts cancelled.
    """
    referral = Referral.objects.select_related('referrer').filter(referred=referred_user).first()
    if referral is None:
        return 0

    payouts = list(
        referral.payouts
        .select_for_update()
        .filter(status__in=[PayoutStatus.PENDING, PayoutStatus.APPROVED])
    )
    for payout in payouts:
        payout.status = PayoutStatus.CANCELLED
        payout.failure_reason = reason
        payout.save(update_fields=['status', 'failure_reason', 'updated_at'])
        log_action(
            'commission_cancelled',
            referrer=referral.referrer,
            referred=referred_user,
            referral=referral,
            payout=payout,
            status=PayoutStatus.CANCELLED,
            commission_amount_cents=payout.amount_cents,
            failure_reason=reason,
        )

    if payouts:
        notify(
            user=referral.referrer,
            title='Commission cancelled',
            content=f"{len(payouts)} commission payout(s) were cancelled: {reason}.",
        )
    return len(payouts)

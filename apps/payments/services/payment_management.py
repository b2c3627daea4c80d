"""Payment lifecycle: creation, settlement, cancellation and overdue tracking."""

from datetime import date
from decimal import Decimal
from typing import Optional
import logging

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.scheduling.models import SessionStatus
from ..models import Payment, PaymentStatus, OUTSTANDING_STATUSES
from .exceptions import PaymentAlreadyPaidError, InvalidPaymentTransitionError

logger = logging.getLogger(__name__)


def create_payment(
    *,
    owner,
    client,
    amount: Decimal,
    due_date: Optional[date] = None,
    session=None,
    package=None,
    method: str = '',
    notes: str = '',
) -> Payment:
    return Payment.objects.create(
        owner=owner,
        client=client,
        amount=amount,
        due_date=due_date,
        session=session,
        package=package,
        method=method,
        notes=notes,
        status=PaymentStatus.PENDING,
    )


@transaction.atomic
def mark_paid(*, payment: Payment, method: str = '', paid_at=None) -> Payment:
    """
    Settle a payment.

    Raises:
        PaymentAlreadyPaidError: If it is already paid
        InvalidPaymentTransitionError: If it was refunded
    """
    payment = Payment.objects.select_for_update().get(pk=payment.pk)

    if payment.status == PaymentStatus.PAID:
        raise PaymentAlreadyPaidError()
    if payment.status == PaymentStatus.REFUNDED:
        raise InvalidPaymentTransitionError('A refunded payment cannot be paid again.')

    payment.mark_paid(method=method, paid_at=paid_at)
    logger.info("Payment %s marked paid (%s)", payment.reference, payment.method or 'no method')
    return payment


@transaction.atomic
def cancel_payment(*, payment: Payment) -> Payment:
    """
    Raises:
        InvalidPaymentTransitionError: If the payment was already settled
    """
    payment = Payment.objects.select_for_update().get(pk=payment.pk)

    if payment.status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
        raise InvalidPaymentTransitionError('Settled payments must be refunded, not cancelled.')

    payment.status = PaymentStatus.CANCELLED
    payment.save(update_fields=['status', 'updated_at'])
    return payment


@transaction.atomic
def refund_payment(*, payment: Payment) -> Payment:
    """
    Raises:
        InvalidPaymentTransitionError: If the payment is not paid
    """
    payment = Payment.objects.select_for_update().get(pk=payment.pk)

    if payment.status != PaymentStatus.PAID:
        raise InvalidPaymentTransitionError('Only paid payments can be refunded.')

    payment.status = PaymentStatus.REFUNDED
    payment.save(update_fields=['status', 'updated_at'])
    logger.info("Payment %s refunded", payment.reference)
    return payment


def mark_overdue_payments(*, today: Optional[date] = None) -> int:
    """Flag pending payments whose due date has passed. Returns how many changed."""
    today = today or timezone.localdate()
    updated = (
        Payment.objects
        .filter(status=PaymentStatus.PENDING, due_date__lt=today)
        .update(status=PaymentStatus.OVERDUE, updated_at=timezone.now())
    )
    if updated:
        logger.info("Marked %d payment(s) overdue as of %s", updated, today)
    return updated


@transaction.atomic
def sync_payment_with_session(*, session) -> list:
    """
    Align the payments of a session with its status.

    cancelled -> cancelled, completed -> paid, scheduled / no_show -> pending.
    A session worth nothing owes nothing, whatever its status. Paid and
    refunded payments are never moved back; an overdue payment stays
    overdue while it is still owed.
    """
    updated = []
    for payment in Payment.objects.select_for_update().filter(session=session):
        if payment.status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            continue

        if session.status == SessionStatus.CANCELLED or session.value <= 0:
            new_status = PaymentStatus.CANCELLED
        elif session.status == SessionStatus.COMPLETED:
            payment.mark_paid()
            updated.append(payment)
            continue
        elif payment.status == PaymentStatus.OVERDUE:
            continue
        else:
            new_status = PaymentStatus.PENDING

        if payment.status != new_status:
            payment.status = new_status
            payment.save(update_fields=['status', 'updated_at'])
            updated.append(payment)

    return updated


def outstanding_summary(*, owner, client=None) -> dict:
    """Totals of what the owner's clients still owe."""
    queryset = Payment.objects.filter(owner=owner, status__in=OUTSTANDING_STATUSES)
    if client is not None:
        queryset = queryset.filter(client=client)

    totals = queryset.aggregate(
        total=Sum('amount'),
        count=Count('id'),
        overdue_total=Sum('amount', filter=Q(status=PaymentStatus.OVERDUE)),
        overdue_count=Count('id', filter=Q(status=PaymentStatus.OVERDUE)),
    )

    return {
        'total_outstanding': totals['total'] or Decimal('0.00'),
        'count': totals['count'],
        'overdue_amount': totals['overdue_total'] or Decimal('0.00'),
        'overdue_count': totals['overdue_count'],
    }

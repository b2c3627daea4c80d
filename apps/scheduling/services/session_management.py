"""Single session lifecycle: creation, edits, status changes."""

from datetime import date, time
from decimal import Decimal
from typing import Optional
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.packages.models import Package, PackageStatus
from apps.packages.services import PackageCapacityError, PackageClosedError, recalculate_consumption
from apps.payments.models import Payment, PaymentStatus, OUTSTANDING_STATUSES
from apps.payments.services import create_payment, sync_payment_with_session
from ..models import Session, SessionStatus, SessionType, GoogleSyncType
from .exceptions import ClientMismatchError, ReadOnlySessionError

logger = logging.getLogger(__name__)

SESSION_EDITABLE_FIELDS = ('date', 'time', 'duration_minutes', 'value', 'notes')


def check_client_owner(owner, client):
    if client.owner_id != owner.pk:
        raise ClientMismatchError("Client does not belong to this therapist")


@transaction.atomic
def create_session(
    *,
    owner,
    client,
    date: date,
    time: time,
    duration_minutes: Optional[int] = None,
    value: Optional[Decimal] = None,
    notes: str = '',
    status: str = SessionStatus.SCHEDULED,
    session_type: str = SessionType.SINGLE,
    package=None,
    with_payment: bool = True,
) -> Session:
    """
    Create a session and, when it has a value, its pending payment.

    Package sessions never get their own payment: the package is charged once.

    Raises:
        ClientMismatchError: If the client belongs to another therapist
    """
    check_client_owner(owner, client)

    if value is None:
        value = owner.default_session_value
    if duration_minutes is None:
        duration_minutes = settings.DEFAULT_SESSION_DURATION_MINUTES

    session = Session.objects.create(
        owner=owner,
        client=client,
        date=date,
        time=time,
        duration_minutes=duration_minutes,
        value=value,
        notes=notes,
        status=status,
        session_type=SessionType.PACKAGE if package else session_type,
        package=package,
    )

    if with_payment and package is None and value > 0:
        create_payment(
            owner=owner,
            client=client,
            amount=value,
            due_date=date,
            session=session,
        )
        if status != SessionStatus.SCHEDULED:
            sync_payment_with_session(session=session)

    return session


BILLED_STATUSES = OUTSTANDING_STATUSES + (PaymentStatus.PAID, PaymentStatus.REFUNDED)


def apply_session_value(session_ids, value: Decimal) -> None:
    """
    Make what clients owe for these sessions match a new session value.

    A zero value cancels the outstanding payments. A positive value is
    copied to them, and sessions left without a live payment (their value
    was zero until now) get one again: the last cancelled payment is
    reopened, or a new pending payment is created. Package sessions are
    never billed on their own.
    """
    owed = Payment.objects.filter(session__in=session_ids, status__in=OUTSTANDING_STATUSES)
    if value <= 0:
        owed.update(status=PaymentStatus.CANCELLED, updated_at=timezone.now())
        return

    owed.update(amount=value, updated_at=timezone.now())

    unbilled = (
        Session.objects
        .filter(pk__in=session_ids, package__isnull=True)
        .exclude(status=SessionStatus.CANCELLED)
        .exclude(payments__status__in=BILLED_STATUSES)
        .select_related('owner', 'client')
    )
    for session in unbilled:
        payment = session.payments.filter(status=PaymentStatus.CANCELLED).order_by('-created_at').first()
        if payment is None:
            create_payment(
                owner=session.owner,
                client=session.client,
                amount=value,
                due_date=session.date,
                session=session,
            )
        else:
            payment.amount = value
            payment.status = PaymentStatus.PENDING
            payment.save(update_fields=['amount', 'status', 'updated_at'])

        if session.status != SessionStatus.SCHEDULED:
            sync_payment_with_session(session=session)


@transaction.atomic
def update_session(*, session: Session, **changes) -> Session:
    """
    Edit date, time, duration, value or notes of a session.

    A session generated from a series is flagged ``is_modified`` so that
    series-wide edits leave it alone.

    Raises:
        ReadOnlySessionError: If the session mirrors a read-only Google event
    """
    if session.google_sync_type == GoogleSyncType.IMPORTED:
        raise ReadOnlySessionError("Sessions imported read-only from Google Calendar cannot be edited")

    changed = []
    for field in SESSION_EDITABLE_FIELDS:
        if field in changes and getattr(session, field) != changes[field]:
            setattr(session, field, changes[field])
            changed.append(field)

    if not changed:
        return session

    if session.recurring_session_id:
        session.is_modified = True
        changed.append('is_modified')

    session.save(update_fields=changed + ['updated_at'])

    if 'value' in changed:
        apply_session_value([session.pk], session.value)

    if session.google_sync_type == GoogleSyncType.SENT:
        transaction.on_commit(lambda: _push_google_update(session.pk))

    return session


def _push_google_update(session_id):
    from apps.calendar_sync.services import update_google_event, CalendarSyncError

    session = Session.objects.select_related('owner', 'client').get(pk=session_id)
    try:
        update_google_event(session=session)
    except CalendarSyncError as e:
        logger.warning("Could not update Google event for session %s: %s", session_id, e)


def _check_package_room(session: Session) -> None:
    package = Package.objects.select_for_update().get(pk=session.package_id)
    if package.status == PackageStatus.CANCELLED:
        raise PackageClosedError("Package is cancelled")

    booked = package.sessions.exclude(status=SessionStatus.CANCELLED).exclude(pk=session.pk).count()
    if booked >= package.total_sessions:
        raise PackageCapacityError(
            f"Package allows {package.total_sessions} sessions and all of them are booked"
        )


@transaction.atomic
def set_session_status(*, session: Session, status: str) -> Session:
    """
    Change the status of a session and keep money and packages consistent.

    The session's payments follow the new status and, for package sessions,
    the package consumption is recalculated.

    Raises:
        PackageClosedError: If a session of a cancelled package is brought back
        PackageCapacityError: If bringing a cancelled package session back
            would overbook its package
    """
    session = Session.objects.select_for_update().get(pk=session.pk)
    if session.status == status:
        return session

    if session.package_id and session.status == SessionStatus.CANCELLED:
        _check_package_room(session)

    session.status = status
    session.save(update_fields=['status', 'updated_at'])

    sync_payment_with_session(session=session)

    if session.package_id:
        recalculate_consumption(package=session.package)

    logger.info("Session %s is now %s", session.id, status)
    return session


@transaction.atomic
def delete_session(*, session: Session) -> None:
    package = session.package
    session.delete()
    if package is not None:
        recalculate_consumption(package=package)


def sessions_needing_attention(*, owner, now=None) -> QuerySet:
    """Sessions still marked scheduled although their start time has passed."""
    now = timezone.localtime(now or timezone.now())
    return (
        Session.objects
        .filter(owner=owner, status=SessionStatus.SCHEDULED)
        .filter(Q(date__lt=now.date()) | Q(date=now.date(), time__lt=now.time()))
        .select_related('client')
        .order_by('date', 'time')
    )

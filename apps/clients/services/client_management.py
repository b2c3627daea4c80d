"""Client management service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, Sum
from django.utils import timezone

from apps.packages.models import Package, PackageStatus
from apps.payments.models import Payment, PaymentStatus, OUTSTANDING_STATUSES
from apps.scheduling.models import Session, SessionStatus
from ..models import Client
from .exceptions import DuplicateClientEmailError

UPDATABLE_FIELDS = ('name', 'email', 'phone', 'birth_date', 'clinical_notes', 'history')


def _check_email_free(owner, email, exclude_id=None):
    if not email:
        return
    queryset = Client.objects.filter(owner=owner, email__iexact=email)
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise DuplicateClientEmailError(f"A client with email {email} already exists")


@transaction.atomic
def create_client(
    *,
    owner,
    name: str,
    email: str = '',
    phone: str = '',
    birth_date: Optional[date] = None,
    clinical_notes: str = '',
    history: str = '',
) -> Client:
    """
    Create a client for a therapist.

    Raises:
        DuplicateClientEmailError: If the owner already has a client with this email
    """
    email = (email or '').strip().lower()
    _check_email_free(owner, email)

    try:
        return Client.objects.create(
            owner=owner,
            name=name.strip(),
            email=email,
            phone=phone,
            birth_date=birth_date,
            clinical_notes=clinical_notes,
            history=history,
        )
    except IntegrityError:
        raise DuplicateClientEmailError(f"A client with email {email} already exists")


@transaction.atomic
def update_client(*, client: Client, **fields) -> Client:
    """
    Raises:
        DuplicateClientEmailError: If the new email is taken by another client
    """
    changed = []
    for field, value in fields.items():
        if field not in UPDATABLE_FIELDS:
            continue
        if field == 'email':
            value = (value or '').strip().lower()
            _check_email_free(client.owner, value, exclude_id=client.id)
        setattr(client, field, value)
        changed.append(field)

    if changed:
        client.save(update_fields=changed + ['updated_at'])
    return client


def deactivate_client(*, client: Client) -> Client:
    """Soft delete: history, sessions and payments are kept."""
    client.is_active = False
    client.save(update_fields=['is_active', 'updated_at'])
    return client


def reactivate_client(*, client: Client) -> Client:
    client.is_active = True
    client.save(update_fields=['is_active', 'updated_at'])
    return client


@transaction.atomic
def find_or_create_client_by_email(
    *,
    owner,
    email: str = '',
    name: str = '',
    notes: str = '',
) -> Client:
    """
    Return the owner's client matching ``email``, creating one if needed.

    Without an email the client is matched by exact name. Used when
    importing calendar events.
    """
    email = (email or '').strip().lower()
    name = (name or '').strip()

    if email:
        client = Client.objects.filter(owner=owner, email__iexact=email).first()
    else:
        client = Client.objects.filter(owner=owner, name__iexact=name).first() if name else None

    if client is not None:
        return client

    return Client.objects.create(
        owner=owner,
        name=name or (email.split('@')[0] if email else 'Unnamed client'),
        email=email,
        clinical_notes=notes,
    )


def client_summary(*, client: Client, today: Optional[date] = None) -> dict:
    """Session counts, money received and owed, and packages for a client."""
    sessions = Session.objects.filter(client=client)

    by_status = {choice: 0 for choice in SessionStatus.values}
    for row in sessions.order_by().values('status').annotate(count=Count('id')):
        by_status[row['status']] = row['count']

    payments = Payment.objects.filter(client=client)
    total_paid = payments.filter(status=PaymentStatus.PAID).aggregate(total=Sum('amount'))['total']
    outstanding = payments.filter(status__in=OUTSTANDING_STATUSES).aggregate(total=Sum('amount'))['total']

    upcoming = (
        sessions
        .filter(status=SessionStatus.SCHEDULED, date__gte=today or timezone.localdate())
        .order_by('date', 'time')
        .first()
    )
    last = (
        sessions
        .filter(status=SessionStatus.COMPLETED)
        .order_by('-date', '-time')
        .first()
    )

    return {
        'client': client,
        'sessions_total': sum(by_status.values()),
        'sessions_by_status': by_status,
        'total_paid': total_paid or Decimal('0.00'),
        'outstanding_balance': outstanding or Decimal('0.00'),
        'active_packages': Package.objects.filter(client=client, status=PackageStatus.ACTIVE).count(),
        'next_session': upcoming.starts_at if upcoming else None,
        'last_session': last.starts_at if last else None,
    }

"""Session packages: sale, scheduling, consumption tracking."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.payments.models import Payment
from apps.payments.services import create_payment
from apps.scheduling.models import Session, SessionStatus, SessionType
from ..models import Package, PackageStatus
from .exceptions import InvalidPackageError, PackageCapacityError, PackageClosedError

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def value_per_session_for(total_value: Decimal, total_sessions: int) -> Decimal:
    return (Decimal(total_value) / total_sessions).quantize(CENT, rounding=ROUND_HALF_UP)


@transaction.atomic
def create_package(
    *,
    owner,
    client,
    name: str,
    total_sessions: int,
    total_value: Decimal,
    start_date: date,
    value_per_session: Optional[Decimal] = None,
    payment_method: str = '',
    end_date: Optional[date] = None,
    notes: str = '',
) -> Package:
    """
    Sell a package to a client and open one pending payment for its full value.

    Raises:
        InvalidPackageError: If counts, dates or ownership are inconsistent
    """
    if client.owner_id != owner.pk:
        raise InvalidPackageError("Client does not belong to this therapist")
    if total_sessions < 1:
        raise InvalidPackageError("A package needs at least one session")
    if end_date and end_date < start_date:
        raise InvalidPackageError("End date must be on or after the start date")

    if value_per_session is None:
        value_per_session = value_per_session_for(total_value, total_sessions)

    package = Package.objects.create(
        owner=owner,
        client=client,
        name=name,
        total_sessions=total_sessions,
        total_value=total_value,
        value_per_session=value_per_session,
        payment_method=payment_method,
        start_date=start_date,
        end_date=end_date,
        notes=notes,
    )

    if total_value > 0:
        create_payment(
            owner=owner,
            client=client,
            amount=total_value,
            due_date=start_date,
            package=package,
            method=payment_method,
            notes=f"Package: {name}",
        )

    logger.info("Package %s created for client %s", package.id, client.id)
    return package


@transaction.atomic
def create_sessions_for_package(*, package: Package, slots: Iterable[dict]) -> List[Session]:
    """
    Schedule sessions that consume a package.

    Args:
        package: The package to draw from.
        slots: Dicts with ``date``, ``time`` and optionally
            ``duration_minutes`` and ``notes``.

    Raises:
        PackageClosedError: If the package is cancelled
        PackageCapacityError: If non-cancelled sessions would exceed the package size
    """
    package = Package.objects.select_for_update().get(pk=package.pk)
    slots = list(slots)

    if package.status == PackageStatus.CANCELLED:
        raise PackageClosedError("Package is cancelled")

    booked = package.sessions.exclude(status=SessionStatus.CANCELLED).count()
    if booked + len(slots) > package.total_sessions:
        raise PackageCapacityError(
            f"Package allows {package.total_sessions} sessions, "
            f"{booked} already booked, {len(slots)} requested"
        )

    sessions = [
        Session.objects.create(
            owner=package.owner,
            client=package.client,
            date=slot['date'],
            time=slot['time'],
            duration_minutes=slot.get('duration_minutes') or settings.DEFAULT_SESSION_DURATION_MINUTES,
            value=package.value_per_session,
            notes=slot.get('notes', ''),
            status=SessionStatus.SCHEDULED,
            session_type=SessionType.PACKAGE,
            package=package,
        )
        for slot in slots
    ]
    return sessions


def recalculate_consumption(*, package: Package) -> Package:
    """
    consumed = completed sessions; completed once consumed reaches the total.
    A cancelled package keeps its status.
    """
    consumed = package.sessions.filter(status=SessionStatus.COMPLETED).count()
    fields = []

    if package.consumed_sessions != consumed:
        package.consumed_sessions = consumed
        fields.append('consumed_sessions')

    if package.status != PackageStatus.CANCELLED:
        new_status = PackageStatus.COMPLETED if consumed >= package.total_sessions else PackageStatus.ACTIVE
        if package.status != new_status:
            package.status = new_status
            fields.append('status')

    if fields:
        package.save(update_fields=fields + ['updated_at'])
    return package


def recalculate_packages(*, package_ids: Iterable) -> int:
    count = 0
    for package in Package.objects.filter(pk__in=list(package_ids)):
        recalculate_consumption(package=package)
        count += 1
    return count


@transaction.atomic
def cancel_package(*, package: Package, today: Optional[date] = None) -> Package:
    """Cancel a package and its upcoming scheduled sessions. Payments are left to the therapist."""
    today = today or timezone.localdate()
    package.status = PackageStatus.CANCELLED
    package.save(update_fields=['status', 'updated_at'])

    cancelled = (
        package.sessions
        .filter(status=SessionStatus.SCHEDULED, date__gte=today)
        .update(status=SessionStatus.CANCELLED, updated_at=timezone.now())
    )
    logger.info("Package %s cancelled, %d upcoming session(s) cancelled", package.id, cancelled)
    return package


@transaction.atomic
def delete_package(*, package: Package) -> None:
    """Delete a package together with its sessions and payments."""
    Payment.objects.filter(package=package).delete()
    package.sessions.all().delete()
    package.delete()


def package_progress(package: Package) -> dict:
    percentage = round(package.consumed_sessions * 100 / package.total_sessions, 1) if package.total_sessions else 0
    return {
        'consumed': package.consumed_sessions,
        'total': package.total_sessions,
        'remaining': package.remaining_sessions,
        'percentage': min(percentage, 100),
        'is_complete': package.is_complete,
    }

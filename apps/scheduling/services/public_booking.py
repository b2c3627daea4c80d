"""Bookings made by clients on a therapist's public booking page."""

from datetime import date, time
from typing import Optional
import logging

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.accounts.services import notify
from apps.clients.models import Client
from apps.clients.services import create_client
from ..models import Session, SessionStatus
from .exceptions import BookingUnavailableError, InvalidBookingError, SlotTakenError
from .recurrence import push_instances_to_google
from .session_management import create_session

logger = logging.getLogger(__name__)


def booking_page(slug: str) -> User:
    """
    Therapist behind an enabled booking page.

    Raises:
        BookingUnavailableError: If the slug is unknown or booking is disabled
    """
    owner = User.objects.filter(booking_slug=slug, booking_enabled=True, is_active=True).first()
    if owner is None:
        raise BookingUnavailableError("Booking page not found or disabled")
    return owner


@transaction.atomic
def book_public_session(
    *,
    slug: str,
    name: str,
    email: str,
    date: date,
    time: time,
    phone: str = '',
    notes: str = '',
    today: Optional[date] = None,
) -> Session:
    """
    Book a session with the therapist behind ``slug``.

    The client is matched by email among the therapist's clients and created
    when new. The session gets the therapist's default value and duration,
    and the therapist is notified.

    Raises:
        BookingUnavailableError: If the slug is unknown or booking is disabled
        InvalidBookingError: If the date is in the past
        SlotTakenError: If the therapist already has a session at that time
    """
    owner = booking_page(slug)
    owner = User.objects.select_for_update().get(pk=owner.pk)

    if date < (today or timezone.localdate()):
        raise InvalidBookingError("Sessions cannot be booked in the past")

    taken = (
        Session.objects
        .filter(owner=owner, date=date, time=time)
        .exclude(status=SessionStatus.CANCELLED)
        .exists()
    )
    if taken:
        raise SlotTakenError("This time is already booked")

    email = email.strip().lower()
    client = Client.objects.filter(owner=owner, email__iexact=email).first()
    if client is None:
        client = create_client(
            owner=owner,
            name=name.strip(),
            email=email,
            phone=phone.strip(),
            clinical_notes=notes.strip(),
        )

    session = create_session(owner=owner, client=client, date=date, time=time)

    notify(
        user=owner,
        title='New session booked',
        content=f"{client.name} booked a session for {date:%d/%m/%Y} at {time:%H:%M}",
    )
    logger.info("Public booking %s for therapist %s", session.id, owner.pk)

    transaction.on_commit(lambda: push_instances_to_google([session.pk]))
    return session

"""
Recurring session service.

A RecurringSession stores a rule; concrete Session rows are materialized
for a rolling window (``RECURRENCE_HORIZON_DAYS``) and topped up by the
``extend_recurring_sessions`` command. Each generated session remembers the
series slot it was created for (``occurrence_date``), which keeps generation
idempotent even after a single instance was moved to another day.
"""

from datetime import date, time, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple
import logging

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.payments.services import create_payment
from ..models import (
    GoogleSyncType,
    RecurrenceType,
    RecurringSession,
    RecurringStatus,
    Session,
    SessionStatus,
    SessionType,
)
from .exceptions import InvalidRecurrenceError, NotASeriesInstanceError
from .session_management import apply_session_value, check_client_owner, update_session

logger = logging.getLogger(__name__)

DAYS_PER_STEP = {
    RecurrenceType.DAILY: 1,
    RecurrenceType.WEEKLY: 7,
    RecurrenceType.BIWEEKLY: 14,
}

DATE_SHAPING_FIELDS = (
    'recurrence_type',
    'recurrence_interval',
    'start_date',
    'recurrence_end_date',
    'recurrence_count',
    'weekday',
)
INSTANCE_FIELDS = ('time', 'duration_minutes', 'value', 'notes')


def series_anchor(recurrence_type: str, start_date: date, weekday: Optional[int] = None) -> date:
    """First occurrence: ``start_date``, moved forward to ``weekday`` for weekly rules."""
    if weekday is not None and recurrence_type in (RecurrenceType.WEEKLY, RecurrenceType.BIWEEKLY):
        return start_date + timedelta(days=(weekday - start_date.weekday()) % 7)
    return start_date


def generate_occurrence_dates(
    *,
    recurrence_type: str,
    start_date: date,
    interval: int = 1,
    weekday: Optional[int] = None,
    end_date: Optional[date] = None,
    count: Optional[int] = None,
    from_date: Optional[date] = None,
    today: Optional[date] = None,
) -> List[date]:
    """
    Expand a recurrence rule into concrete dates.

    Occurrence ``k`` is always computed from the anchor, never from the
    previous occurrence, so monthly rules keep their day of month
    (Jan 31 -> Feb 28 -> Mar 31).

    Args:
        recurrence_type: daily, weekly, biweekly or monthly.
        start_date: First day of the series.
        interval: Repeat every ``interval`` steps.
        weekday: 0 = Monday; only used by weekly and biweekly rules.
        end_date: Last day of the series. Without it the window ends
            ``RECURRENCE_HORIZON_DAYS`` after ``today``.
        count: Total number of occurrences in the series. Occurrences
            before ``from_date`` still count.
        from_date: Earliest date to return (defaults to ``today``).
        today: Reference day (defaults to the local date).

    Returns:
        Sorted list of dates, at most ``RECURRENCE_MAX_OCCURRENCES`` long.

    Raises:
        InvalidRecurrenceError: On an unknown type or a non-positive interval.
    """
    if recurrence_type not in RecurrenceType.values:
        raise InvalidRecurrenceError(f"Unknown recurrence type: {recurrence_type}")
    if interval < 1:
        raise InvalidRecurrenceError("Recurrence interval must be at least 1")

    today = today or timezone.localdate()
    from_date = from_date or today
    window_end = end_date or today + timedelta(days=settings.RECURRENCE_HORIZON_DAYS)
    max_results = settings.RECURRENCE_MAX_OCCURRENCES

    anchor = series_anchor(recurrence_type, start_date, weekday)

    step_days = DAYS_PER_STEP.get(recurrence_type)
    k = 0
    if step_days and from_date > anchor:
        # Skip straight to the first step on or after from_date
        k = (from_date - anchor).days // (step_days * interval)

    dates = []
    while True:
        if count is not None and k >= count:
            break

        if step_days:
            occurrence = anchor + timedelta(days=step_days * interval * k)
        else:
            occurrence = anchor + relativedelta(months=interval * k)

        if occurrence > window_end:
            break
        if occurrence >= from_date:
            dates.append(occurrence)
            if len(dates) >= max_results:
                break
        k += 1

    return dates


def validate_rule(recurring: RecurringSession) -> None:
    """
    Raises:
        InvalidRecurrenceError: If the rule cannot produce a sane series
    """
    if recurring.recurrence_type not in RecurrenceType.values:
        raise InvalidRecurrenceError(f"Unknown recurrence type: {recurring.recurrence_type}")
    if not recurring.recurrence_interval or recurring.recurrence_interval < 1:
        raise InvalidRecurrenceError("Recurrence interval must be at least 1")
    if recurring.recurrence_count is not None and recurring.recurrence_count < 1:
        raise InvalidRecurrenceError("Recurrence count must be at least 1")
    if recurring.weekday is not None and not 0 <= recurring.weekday <= 6:
        raise InvalidRecurrenceError("Weekday must be between 0 (Monday) and 6 (Sunday)")
    if recurring.recurrence_end_date and recurring.recurrence_end_date < recurring.start_date:
        raise InvalidRecurrenceError("End date must be on or after the start date")


def occurrence_dates_for(recurring: RecurringSession, today: Optional[date] = None) -> List[date]:
    return generate_occurrence_dates(
        recurrence_type=recurring.recurrence_type,
        start_date=recurring.start_date,
        interval=recurring.recurrence_interval,
        weekday=recurring.weekday,
        end_date=recurring.recurrence_end_date,
        count=recurring.recurrence_count,
        today=today,
    )


@transaction.atomic
def generate_instances(*, recurring: RecurringSession, today: Optional[date] = None) -> List[Session]:
    """
    Materialize the missing sessions of an active series.

    Idempotent: dates already generated, or held by an instance kept from a
    previous version of the rule, are skipped. Paused and cancelled series
    generate nothing. With ``recurrence_count`` set, every instance the
    series still has counts against it, so regenerating after a rule
    change never grows the series past the count.

    Returns:
        The sessions created by this call.
    """
    if recurring.status != RecurringStatus.ACTIVE:
        return []

    taken = set()
    for occurrence_date, session_date in recurring.instances.values_list('occurrence_date', 'date'):
        taken.add(occurrence_date)
        taken.add(session_date)

    remaining = None
    if recurring.recurrence_count is not None:
        remaining = recurring.recurrence_count - recurring.instances.count()
        if remaining <= 0:
            return []

    created = []
    for occurrence in occurrence_dates_for(recurring, today=today):
        if remaining is not None and len(created) >= remaining:
            break
        if occurrence in taken:
            continue

        session = Session.objects.create(
            owner=recurring.owner,
            client=recurring.client,
            date=occurrence,
            time=recurring.time,
            duration_minutes=recurring.duration_minutes,
            value=recurring.value,
            notes=recurring.notes,
            status=SessionStatus.SCHEDULED,
            session_type=SessionType.RECURRING,
            recurring_session=recurring,
            occurrence_date=occurrence,
        )
        if recurring.value > 0:
            create_payment(
                owner=recurring.owner,
                client=recurring.client,
                amount=recurring.value,
                due_date=occurrence,
                session=session,
            )
        created.append(session)

    if created:
        logger.info("Series %s: generated %d session(s)", recurring.id, len(created))
        if recurring.google_calendar_sync:
            session_ids = [session.pk for session in created]
            transaction.on_commit(lambda: push_instances_to_google(session_ids))

    return created


def push_instances_to_google(session_ids) -> int:
    """Send freshly generated instances to Google when the owner enabled auto sync."""
    from apps.calendar_sync.models import GoogleCalendarConnection
    from apps.calendar_sync.services import send_session_to_google, CalendarSyncError

    sent = 0
    auto_sync = {}
    sessions = Session.objects.filter(pk__in=session_ids).select_related('owner', 'client')
    for session in sessions:
        if session.owner_id not in auto_sync:
            connection = GoogleCalendarConnection.objects.filter(user_id=session.owner_id).first()
            auto_sync[session.owner_id] = connection is not None and connection.auto_sync
        if not auto_sync[session.owner_id]:
            continue
        try:
            send_session_to_google(session=session)
            sent += 1
        except CalendarSyncError as e:
            logger.warning("Auto sync of session %s failed: %s", session.id, e)
    return sent


@transaction.atomic
def create_recurring(
    *,
    owner,
    client,
    recurrence_type: str,
    start_date: date,
    time: time,
    recurrence_interval: int = 1,
    recurrence_end_date: Optional[date] = None,
    recurrence_count: Optional[int] = None,
    weekday: Optional[int] = None,
    duration_minutes: Optional[int] = None,
    value: Optional[Decimal] = None,
    notes: str = '',
    google_calendar_sync: bool = False,
    today: Optional[date] = None,
) -> Tuple[RecurringSession, List[Session]]:
    """
    Store a recurrence rule and generate its first window of sessions.

    Returns:
        tuple: (RecurringSession, list of generated Session)

    Raises:
        InvalidRecurrenceError: If the rule is inconsistent
        ClientMismatchError: If the client belongs to another therapist
    """
    check_client_owner(owner, client)

    if weekday is None and recurrence_type in (RecurrenceType.WEEKLY, RecurrenceType.BIWEEKLY):
        weekday = start_date.weekday()

    recurring = RecurringSession(
        owner=owner,
        client=client,
        recurrence_type=recurrence_type,
        recurrence_interval=recurrence_interval,
        start_date=start_date,
        recurrence_end_date=recurrence_end_date,
        recurrence_count=recurrence_count,
        weekday=weekday,
        time=time,
        duration_minutes=duration_minutes or settings.DEFAULT_SESSION_DURATION_MINUTES,
        value=owner.default_session_value if value is None else value,
        notes=notes,
        google_calendar_sync=google_calendar_sync,
    )
    validate_rule(recurring)
    recurring.save()

    sessions = generate_instances(recurring=recurring, today=today)
    return recurring, sessions


def _future_unmodified(recurring: RecurringSession, today: date):
    return recurring.instances.filter(date__gte=today, is_modified=False)


def _delete_future_scheduled(recurring: RecurringSession, today: date) -> int:
    """Delete future, unmodified, still scheduled instances (and their payments)."""
    doomed = _future_unmodified(recurring, today).filter(status=SessionStatus.SCHEDULED)
    _forget_google_events(doomed)
    deleted = doomed.count()
    doomed.delete()
    return deleted


def _forget_google_events(sessions) -> None:
    linked = list(
        sessions
        .filter(google_sync_type=GoogleSyncType.SENT)
        .exclude(google_event_id='')
        .values_list('owner_id', 'google_event_id')
    )
    if linked:
        transaction.on_commit(lambda: delete_remote_events(linked))


def delete_remote_events(linked) -> None:
    from apps.calendar_sync.services import delete_remote_event, CalendarSyncError

    for owner_id, event_id in linked:
        try:
            delete_remote_event(user_id=owner_id, event_id=event_id)
        except CalendarSyncError as e:
            logger.warning("Could not delete Google event %s: %s", event_id, e)


@transaction.atomic
def update_all_instances(
    *,
    recurring: RecurringSession,
    today: Optional[date] = None,
    **changes,
) -> int:
    """
    Push time, duration, value or notes to every future unmodified instance.

    Returns:
        Number of sessions updated.
    """
    today = today or timezone.localdate()
    fields = {field: changes[field] for field in INSTANCE_FIELDS if field in changes}
    if not fields:
        return 0

    instances = _future_unmodified(recurring, today)
    session_ids = list(instances.values_list('pk', flat=True))
    updated = instances.update(updated_at=timezone.now(), **fields)

    if 'value' in fields:
        apply_session_value(session_ids, fields['value'])

    return updated


@transaction.atomic
def update_recurring(
    *,
    recurring: RecurringSession,
    today: Optional[date] = None,
    **changes,
) -> RecurringSession:
    """
    Change a series.

    * Date-shaping changes (type, interval, dates, count, weekday) drop the
      future unmodified scheduled instances and regenerate the series.
    * Time, duration, value and notes are pushed to future unmodified
      instances.
    * ``status``: paused stops generation, cancelled also removes the future
      unmodified scheduled instances, active regenerates.

    Raises:
        InvalidRecurrenceError: If the resulting rule is inconsistent
    """
    today = today or timezone.localdate()
    recurring = RecurringSession.objects.select_for_update().get(pk=recurring.pk)
    previous_status = recurring.status

    allowed = DATE_SHAPING_FIELDS + INSTANCE_FIELDS + ('status', 'google_calendar_sync')
    changed = []
    for field, value in changes.items():
        if field in allowed and getattr(recurring, field) != value:
            setattr(recurring, field, value)
            changed.append(field)

    if not changed:
        return recurring

    validate_rule(recurring)
    recurring.save(update_fields=changed + ['updated_at'])

    status_changed = 'status' in changed
    if status_changed and recurring.status == RecurringStatus.CANCELLED:
        removed = _delete_future_scheduled(recurring, today)
        logger.info("Series %s cancelled, %d future session(s) removed", recurring.id, removed)
        return recurring

    pushed = {field: getattr(recurring, field) for field in INSTANCE_FIELDS if field in changed}

    if any(field in changed for field in DATE_SHAPING_FIELDS):
        removed = _delete_future_scheduled(recurring, today)
        logger.info("Series %s rule changed, regenerating (%d removed)", recurring.id, removed)
        if pushed:
            update_all_instances(recurring=recurring, today=today, **pushed)
        generate_instances(recurring=recurring, today=today)
    else:
        if pushed:
            update_all_instances(recurring=recurring, today=today, **pushed)
        if status_changed and previous_status != RecurringStatus.ACTIVE and recurring.is_active:
            generate_instances(recurring=recurring, today=today)

    return recurring


@transaction.atomic
def delete_recurring(
    *,
    recurring: RecurringSession,
    delete_future_instances: bool = False,
    today: Optional[date] = None,
) -> int:
    """
    Delete a series.

    With ``delete_future_instances`` every instance dated today or later is
    deleted too; all other instances stay as standalone sessions.

    Returns:
        Number of sessions deleted.
    """
    today = today or timezone.localdate()
    deleted = 0

    if delete_future_instances:
        future = recurring.instances.filter(date__gte=today)
        _forget_google_events(future)
        deleted = future.count()
        future.delete()

    recurring.instances.update(recurring_session=None, updated_at=timezone.now())
    recurring.delete()
    return deleted


def update_single_instance(*, session: Session, **changes) -> Session:
    """
    Edit one occurrence of a series; series-wide edits will skip it from now on.

    Raises:
        NotASeriesInstanceError: If the session is not part of a series
    """
    if not session.recurring_session_id:
        raise NotASeriesInstanceError("Session is not part of a recurring series")
    return update_session(session=session, **changes)


def extend_all_series(*, today: Optional[date] = None) -> dict:
    """Roll the generation window forward for every active series."""
    today = today or timezone.localdate()
    series_count = 0
    created = 0

    for recurring in RecurringSession.objects.filter(status=RecurringStatus.ACTIVE).select_related('owner', 'client'):
        if recurring.recurrence_end_date and recurring.recurrence_end_date < today:
            continue
        created += len(generate_instances(recurring=recurring, today=today))
        series_count += 1

    logger.info("Extended %d series, %d session(s) created", series_count, created)
    return {'series': series_count, 'sessions_created': created}

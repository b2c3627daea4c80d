"""In-app notifications."""

from uuid import UUID

from django.contrib.auth import get_user_model
from django.utils import timezone

from ..models import Notification
from .exceptions import NotificationNotFoundError

User = get_user_model()


def notify(*, user: User, title: str, content: str = "") -> Notification:
    return Notification.objects.create(user=user, title=title, content=content)


def mark_notification_read(*, notification_id: UUID, user: User) -> Notification:
    """
    Mark one of the user's notifications as read.

    Raises:
        NotificationNotFoundError: If it does not exist or belongs to someone else
    """
    try:
        notification = Notification.objects.get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification {notification_id} not found")

    notification.mark_read()
    return notification


def mark_all_notifications_read(*, user: User) -> int:
    return (
        Notification.objects
        .filter(user=user, read_at__isnull=True)
        .update(read_at=timezone.now())
    )

"""Creating and cleaning up in-app notifications."""

import typing as t

import structlog

from notifications.enums import NotificationType
from notifications.models import Notification

if t.TYPE_CHECKING:
    from accounts.models import EventHubUser
    from events.models import Event

logger = structlog.get_logger(__name__)


def create_notification(
    user: "EventHubUser",
    notification_type: NotificationType | str,
    message: str,
    *,
    event: "Event | None" = None,
    context: dict[str, t.Any] | None = None,
) -> Notification:
    """Store a notification for a user."""
    notification = Notification.objects.create(
        user=user,
        notification_type=notification_type,
        message=str(message),
        event=event,
        context=context or {},
    )
    logger.info(
        "notification_created",
        notification_id=str(notification.id),
        user_id=str(user.pk),
        notification_type=str(notification_type),
    )
    return notification


def delete_event_notifications(event: "Event") -> int:
    """Remove every notification referring to an event."""
    deleted, _ = Notification.objects.filter(event=event).delete()
    logger.info("event_notifications_deleted", event_id=str(event.pk), count=deleted)
    return deleted

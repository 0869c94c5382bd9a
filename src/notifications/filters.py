from uuid import UUID

from django.db.models import Q
from ninja import Field, FilterSchema

from .enums import NotificationType


class NotificationFilter(FilterSchema):
    """Query params for the notification inbox."""

    unread_only: bool = False
    notification_type: NotificationType | None = None
    event_id: UUID | None = Field(None, q="event_id")  # type: ignore[call-overload]

    def filter_unread_only(self, unread_only: bool) -> Q:
        return Q(read_at__isnull=True) if unread_only else Q()

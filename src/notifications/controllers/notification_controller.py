"""API controller for notification management."""

from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from django.utils import timezone
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, paginate

from common.authentication import CookieJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from notifications.filters import NotificationFilter
from notifications.models import Notification
from notifications.schema import NotificationSchema, UnreadCountSchema


@api_controller(
    "/notifications",
    tags=["Notifications"],
    auth=CookieJWTAuth(),
    throttle=UserDefaultThrottle(),
)
class NotificationController(UserAwareController):
    """API endpoints for in-app notifications.

    Clients poll these endpoints; there is no push channel.
    """

    def get_notification(self, notification_id: UUID) -> Notification:
        return get_object_or_404(Notification, id=notification_id, user=self.user())

    @route.get(
        "",
        response=PageNumberPaginationExtra.get_response_schema(NotificationSchema),
        url_name="list_notifications",
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_notifications(
        self,
        params: NotificationFilter = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[Notification]:
        """List user's notifications, newest first.

        Supports filtering by unread status, notification type and event.
        """
        qs = Notification.objects.filter(user=self.user()).order_by("-created_at")
        return params.filter(qs)

    @route.get("/unread-count", response=UnreadCountSchema, url_name="notifications_unread_count")
    def unread_count(self) -> dict[str, int]:
        """Get count of unread notifications for current user."""
        count = Notification.objects.filter(user=self.user(), read_at__isnull=True).count()
        return {"count": count}

    @route.post("/{uuid:notification_id}/mark-read", throttle=WriteThrottle(), url_name="mark_notification_read")
    def mark_read(self, notification_id: UUID) -> None:
        """Mark a notification as read."""
        self.get_notification(notification_id).mark_read()

    @route.post("/{uuid:notification_id}/mark-unread", throttle=WriteThrottle(), url_name="mark_notification_unread")
    def mark_unread(self, notification_id: UUID) -> None:
        """Mark a notification as unread."""
        self.get_notification(notification_id).mark_unread()

    @route.post("/mark-all-read", throttle=WriteThrottle(), url_name="mark_all_notifications_read")
    def mark_all_read(self) -> None:
        """Mark all user's notifications as read."""
        Notification.objects.filter(user=self.user(), read_at__isnull=True).update(read_at=timezone.now())

    @route.delete(
        "/{uuid:notification_id}",
        response={204: None},
        throttle=WriteThrottle(),
        url_name="delete_notification",
    )
    def delete_notification(self, notification_id: UUID) -> tuple[int, None]:
        """Delete one of the user's notifications."""
        self.get_notification(notification_id).delete()
        return 204, None

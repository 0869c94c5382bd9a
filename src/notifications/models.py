from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel

from .enums import NotificationType


class Notification(TimeStampedModel):
    """In-app notification, polled by the client."""

    notification_type = models.CharField(max_length=50, db_index=True, choices=NotificationType.choices)
    message = models.TextField(max_length=1000)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    event = models.ForeignKey(
        "events.Event", on_delete=models.CASCADE, null=True, blank=True, related_name="notifications"
    )
    context = models.JSONField(default=dict, blank=True, help_text="Structured data for the client, e.g. ids")
    read_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read_at"], name="notification_user_read_idx"),
            models.Index(fields=["user", "created_at"], name="notification_user_created_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.notification_type} for user {self.user_id} at {self.created_at}"

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_read(self) -> None:
        """Mark notification as read."""
        if not self.read_at:
            self.read_at = timezone.now()
            self.save(update_fields=["read_at"])

    def mark_unread(self) -> None:
        """Mark notification as unread."""
        if self.read_at:
            self.read_at = None
            self.save(update_fields=["read_at"])

"""Enums for the notification system."""

from django.db.models import TextChoices


class NotificationType(TextChoices):
    """All in-app notification types.

    Account emails (verification, password reset) are sent by the accounts app and are
    not notifications.
    """

    EVENT_INVITE = "event_invite"
    EVENT_UPDATE = "event_update"
    PARTICIPATION_CONFIRMED = "participation_confirmed"
    REMINDER = "reminder"
    ACCOUNT_STATUS = "account_status"

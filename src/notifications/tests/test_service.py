import pytest

from accounts.models import EventHubUser
from events.models import Event
from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.service import create_notification, delete_event_notifications

pytestmark = pytest.mark.django_db


def test_create_notification(participant: EventHubUser, event: Event) -> None:
    notification = create_notification(
        participant,
        NotificationType.EVENT_UPDATE,
        "The venue changed.",
        event=event,
        context={"field": "location_name"},
    )

    assert notification.user == participant
    assert notification.event == event
    assert notification.context == {"field": "location_name"}
    assert not notification.is_read


def test_mark_read_and_unread(participant: EventHubUser) -> None:
    notification = create_notification(participant, NotificationType.REMINDER, "Tomorrow at 19:00.")

    notification.mark_read()
    first_read_at = notification.read_at
    notification.mark_read()

    assert notification.is_read
    assert notification.read_at == first_read_at

    notification.mark_unread()
    notification.refresh_from_db()
    assert notification.read_at is None


def test_delete_event_notifications(participant: EventHubUser, event: Event, free_event: Event) -> None:
    create_notification(participant, NotificationType.EVENT_UPDATE, "a", event=event)
    create_notification(participant, NotificationType.EVENT_UPDATE, "b", event=event)
    kept = create_notification(participant, NotificationType.EVENT_UPDATE, "c", event=free_event)

    assert delete_event_notifications(event) == 2
    assert list(Notification.objects.all()) == [kept]

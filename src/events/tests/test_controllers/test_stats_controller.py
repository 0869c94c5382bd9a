import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from events.models import Event

pytestmark = pytest.mark.django_db


def test_organizer_stats(organizer_client: Client, event: Event, free_event: Event) -> None:
    response = organizer_client.get(reverse("api:organizer_stats"))

    assert response.status_code == 200
    data = response.json()
    assert data["total_events"] == 2
    assert data["published_events"] == 2
    assert len(data["attendee_trend"]) == 6
    assert {row["category"] for row in data["events_by_category"]} == {"CONCERT", "WORKSHOP"}


def test_stats_require_organizer_role(participant_client: Client) -> None:
    response = participant_client.get(reverse("api:organizer_stats"))

    assert response.status_code == 403


def test_stats_require_authentication() -> None:
    response = Client().get(reverse("api:organizer_stats"))

    assert response.status_code == 401

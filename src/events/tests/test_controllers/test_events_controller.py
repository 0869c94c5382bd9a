from datetime import datetime, timedelta

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import EventHubUser
from conftest import EventFactory
from events.models import Event

pytestmark = pytest.mark.django_db


def _event_payload(start: datetime) -> dict[str, object]:
    return {
        "title": "Autumn Market",
        "description": "Local makers and food stalls.",
        "category": "EXHIBITION",
        "start": start.isoformat(),
        "end": (start + timedelta(hours=8)).isoformat(),
        "locationName": "Old Town Square",
        "address": "Piata Unirii",
        "city": "Timisoara",
        "requiresApproval": False,
        "ticketTypes": [{"name": "Entry", "price": "10.00", "availableQuantity": 300}],
    }


def test_list_events_is_public(event: Event, event_factory: EventFactory, organizer: EventHubUser) -> None:
    event_factory(organizer, title="Hidden draft", status=Event.EventStatus.DRAFT)

    response = Client().get(reverse("api:list_events"))

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    result = data["results"][0]
    assert result["id"] == str(event.id)
    assert result["organizer"]["id"] == str(organizer.id)
    assert {ticket["name"] for ticket in result["ticket_types"]} == {"Standard", "VIP"}
    assert result["remaining_capacity"] == 100


def test_list_events_filters(event: Event, free_event: Event) -> None:
    url = reverse("api:list_events")

    response = Client().get(url, {"category": "WORKSHOP"})
    assert [item["id"] for item in response.json()["results"]] == [str(free_event.id)]

    response = Client().get(url, {"is_free": "false", "city": "cluj-napoca"})
    assert [item["id"] for item in response.json()["results"]] == [str(event.id)]


def test_get_event(event: Event) -> None:
    response = Client().get(reverse("api:get_event", kwargs={"event_id": event.id}))

    assert response.status_code == 200
    assert response.json()["title"] == event.title
    assert response.json()["is_past"] is False


def test_draft_is_hidden_from_others(
    event_factory: EventFactory, organizer: EventHubUser, organizer_client: Client, participant_client: Client
) -> None:
    draft = event_factory(organizer, status=Event.EventStatus.DRAFT)
    url = reverse("api:get_event", kwargs={"event_id": draft.id})

    assert participant_client.get(url).status_code == 404
    assert Client().get(url).status_code == 404
    assert organizer_client.get(url).status_code == 200


def test_create_and_publish_event(organizer_client: Client, next_week: datetime) -> None:
    response = organizer_client.post(
        reverse("api:create_event"), data=orjson.dumps(_event_payload(next_week)), content_type="application/json"
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "DRAFT"
    assert data["requires_approval"] is False
    assert data["ticket_types"][0]["name"] == "Entry"

    response = organizer_client.post(reverse("api:publish_event", kwargs={"event_id": data["id"]}))

    assert response.status_code == 200
    assert response.json()["status"] == "PUBLISHED"


def test_participant_cannot_create_event(participant_client: Client, next_week: datetime) -> None:
    response = participant_client.post(
        reverse("api:create_event"), data=orjson.dumps(_event_payload(next_week)), content_type="application/json"
    )

    assert response.status_code == 403
    assert not Event.objects.exists()


def test_create_event_with_end_before_start(organizer_client: Client, next_week: datetime) -> None:
    payload = _event_payload(next_week)
    payload["end"] = (next_week - timedelta(hours=1)).isoformat()

    response = organizer_client.post(
        reverse("api:create_event"), data=orjson.dumps(payload), content_type="application/json"
    )

    assert response.status_code == 400
    assert "end" in response.json()["errors"]


def test_create_event_anonymous(next_week: datetime) -> None:
    response = Client().post(
        reverse("api:create_event"), data=orjson.dumps(_event_payload(next_week)), content_type="application/json"
    )

    assert response.status_code == 401


def test_update_event(organizer_client: Client, event: Event) -> None:
    response = organizer_client.put(
        reverse("api:update_event", kwargs={"event_id": event.id}),
        data=orjson.dumps({"shortDescription": "Bring a blanket."}),
        content_type="application/json",
    )

    assert response.status_code == 200
    assert response.json()["short_description"] == "Bring a blanket."


def test_update_event_of_someone_else(participant_client: Client, event: Event) -> None:
    response = participant_client.put(
        reverse("api:update_event", kwargs={"event_id": event.id}),
        data=orjson.dumps({"title": "Hijacked"}),
        content_type="application/json",
    )

    assert response.status_code == 403


def test_cancel_and_delete_event(organizer_client: Client, event: Event) -> None:
    response = organizer_client.post(reverse("api:cancel_event", kwargs={"event_id": event.id}))
    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"

    response = organizer_client.post(reverse("api:cancel_event", kwargs={"event_id": event.id}))
    assert response.status_code == 409

    response = organizer_client.delete(reverse("api:delete_event", kwargs={"event_id": event.id}))
    assert response.status_code == 204
    assert not Event.objects.filter(pk=event.pk).exists()


def test_my_events(organizer_client: Client, participant_client: Client, event: Event) -> None:
    response = organizer_client.get(reverse("api:my_events"))

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["results"]] == [str(event.id)]
    assert participant_client.get(reverse("api:my_events")).status_code == 403


def test_save_and_unsave_event(participant_client: Client, participant: EventHubUser, event: Event) -> None:
    response = participant_client.post(reverse("api:save_event", kwargs={"event_id": event.id}))
    assert response.status_code == 200
    assert participant.saved_events.filter(pk=event.pk).exists()

    response = participant_client.delete(reverse("api:unsave_event", kwargs={"event_id": event.id}))
    assert response.status_code == 204
    assert not participant.saved_events.exists()

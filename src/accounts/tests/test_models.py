import pytest
from django.core.exceptions import ValidationError

from accounts.models import EventHubUser
from conftest import EventHubUserFactory

pytestmark = pytest.mark.django_db


def test_new_user_is_an_unverified_participant() -> None:
    user = EventHubUser.objects.create_user(username="newbie", email="newbie@example.com", password="x")

    assert user.roles == ["PARTICIPANT"]
    assert user.status == EventHubUser.Status.UNVERIFIED
    assert user.organizer_profile is None
    assert user.participant_profile["preferences"]["event_types"] == []


def test_roles_are_normalized(user_factory: EventHubUserFactory) -> None:
    user = user_factory(roles=["ORGANIZER", "PARTICIPANT", "ORGANIZER"])

    assert user.roles == ["PARTICIPANT", "ORGANIZER"]
    assert user.is_organizer
    assert not user.is_admin
    assert user.organizer_profile is not None
    assert user.organizer.verification_status == "PENDING"


def test_unknown_role_is_rejected(user_factory: EventHubUserFactory) -> None:
    with pytest.raises(ValidationError):
        user_factory(roles=["PARTICIPANT", "ROOT"])


def test_blocked_status_deactivates_the_account(participant: EventHubUser) -> None:
    participant.status = EventHubUser.Status.SUSPENDED
    participant.save(update_fields=["status"])

    participant.refresh_from_db()
    assert participant.is_active is False

    participant.status = EventHubUser.Status.ACTIVE
    participant.save(update_fields=["status"])

    participant.refresh_from_db()
    assert participant.is_active is True


def test_invalid_profile_is_rejected(participant: EventHubUser) -> None:
    participant.participant_profile = {"preferences": {"price_range": {"min": 50, "max": 10}}}

    with pytest.raises(ValidationError):
        participant.save()


def test_with_role(organizer: EventHubUser, participant: EventHubUser, eventhub_admin: EventHubUser) -> None:
    assert list(EventHubUser.objects.with_role("ORGANIZER")) == [organizer]
    assert set(EventHubUser.objects.with_role("PARTICIPANT")) == {organizer, participant, eventhub_admin}


def test_display_name(user_factory: EventHubUserFactory) -> None:
    assert user_factory(username="jane_doe", first_name="", last_name="").display_name == "Jane Doe"
    assert user_factory(first_name="Ana", last_name="Pop").display_name == "Ana Pop"

import typing as t
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from django.utils import timezone

from accounts.models import EventHubUser
from conftest import EventFactory
from events.exceptions import (
    ConflictError,
    ForbiddenOperationError,
    InvalidArgumentError,
    InvalidStateError,
    InvalidStateTransitionError,
    NotFoundError,
)
from events.models import Event, Registration, TicketType
from events.schema import RegistrationCheckSchema
from events.service import registration_service
from notifications.enums import NotificationType
from notifications.models import Notification

pytestmark = pytest.mark.django_db


def register(
    event: Event, attendee: EventHubUser, ticket_type: str | None = "Standard", quantity: int = 1
) -> Registration:
    return registration_service.create_registration(
        event_id=event.id, attendee=attendee, ticket_type=ticket_type, quantity=quantity
    )


# --- create_registration ---


def test_registration_for_approval_event_is_pending_and_unpaid(event: Event, participant: EventHubUser) -> None:
    registration = register(event, participant, quantity=2)

    assert registration.status == Registration.Status.PENDING
    assert registration.payment_status == Registration.PaymentStatus.UNPAID
    assert registration.payment_method is None
    assert registration.total_price == Decimal("100.00")
    assert registration.currency == "RON"
    assert registration.check_in_code == ""

    ticket_type = TicketType.objects.get(event=event, name="Standard")
    event.refresh_from_db()
    assert ticket_type.available_quantity == 8
    assert event.current_attendees == 2


def test_registration_side_effects(event: Event, participant: EventHubUser, organizer: EventHubUser) -> None:
    registration = register(event, participant)

    assert participant.saved_events.filter(pk=event.pk).exists()
    notification = Notification.objects.get(user=organizer)
    assert notification.notification_type == NotificationType.EVENT_UPDATE
    assert notification.event == event
    assert notification.context["registration_id"] == str(registration.id)


def test_registration_without_approval_is_confirmed(auto_confirm_event: Event, participant: EventHubUser) -> None:
    registration = register(auto_confirm_event, participant)

    assert registration.status == Registration.Status.CONFIRMED
    assert registration.payment_status == Registration.PaymentStatus.UNPAID
    assert registration.awaiting_payment
    assert len(registration.check_in_code) == 6
    assert registration.check_in_code.isalnum()
    assert registration.check_in_code == registration.check_in_code.upper()


def test_free_registration_never_requires_payment(free_event: Event, participant: EventHubUser) -> None:
    registration = register(free_event, participant, ticket_type="General", quantity=2)

    assert registration.status == Registration.Status.CONFIRMED
    assert registration.payment_status == Registration.PaymentStatus.PAID
    assert registration.payment_method == Registration.PaymentMethod.FREE
    assert registration.paid_at is not None
    assert registration.total_price == Decimal("0")
    assert not registration.awaiting_payment


def test_ticket_type_is_matched_case_insensitively(event: Event, participant: EventHubUser) -> None:
    registration = register(event, participant, ticket_type="  vip ")

    assert registration.ticket_type.name == "VIP"
    assert registration.total_price == Decimal("150.00")


def test_organizer_cannot_register_for_own_event(event: Event, organizer: EventHubUser) -> None:
    with pytest.raises(ForbiddenOperationError):
        register(event, organizer)

    assert not Registration.objects.exists()


@pytest.mark.parametrize("ticket_type", [None, "", "   "])
def test_missing_ticket_type(event: Event, participant: EventHubUser, ticket_type: str | None) -> None:
    with pytest.raises(InvalidArgumentError):
        register(event, participant, ticket_type=ticket_type)


@pytest.mark.parametrize("quantity", [0, -1])
def test_quantity_must_be_positive(event: Event, participant: EventHubUser, quantity: int) -> None:
    with pytest.raises(InvalidArgumentError):
        register(event, participant, quantity=quantity)


def test_quantity_above_the_booking_limit(
    event_factory: EventFactory, organizer: EventHubUser, participant: EventHubUser, settings: t.Any
) -> None:
    settings.MAX_TICKETS_PER_REGISTRATION = 10
    event = event_factory(organizer)

    with pytest.raises(InvalidArgumentError):
        register(event, participant, quantity=10**20)

    assert not Registration.objects.filter(event=event).exists()
    event.refresh_from_db()
    assert event.current_attendees == 0


def test_unknown_event(participant: EventHubUser) -> None:
    with pytest.raises(NotFoundError):
        registration_service.create_registration(
            event_id=uuid4(), attendee=participant, ticket_type="Standard", quantity=1
        )


@pytest.mark.parametrize("status", [Event.EventStatus.DRAFT, Event.EventStatus.CANCELLED])
def test_unpublished_event(
    event_factory: EventFactory, organizer: EventHubUser, participant: EventHubUser, status: str
) -> None:
    event = event_factory(organizer, status=status)

    with pytest.raises(NotFoundError):
        register(event, participant)


def test_started_event(event_factory: EventFactory, organizer: EventHubUser, participant: EventHubUser) -> None:
    event = event_factory(organizer, start=timezone.now() - timedelta(hours=1))

    with pytest.raises(InvalidArgumentError):
        register(event, participant)


def test_unknown_ticket_type(event: Event, participant: EventHubUser) -> None:
    with pytest.raises(NotFoundError):
        register(event, participant, ticket_type="Backstage")


def test_duplicate_active_registration(event: Event, participant: EventHubUser) -> None:
    register(event, participant)

    with pytest.raises(ConflictError):
        register(event, participant, ticket_type="VIP")

    assert Registration.objects.filter(attendee=participant).count() == 1


def test_quantity_above_inventory_leaves_inventory_untouched(event: Event, participant: EventHubUser) -> None:
    with pytest.raises(ConflictError):
        register(event, participant, ticket_type="VIP", quantity=3)

    event.refresh_from_db()
    assert TicketType.objects.get(event=event, name="VIP").available_quantity == 2
    assert event.current_attendees == 0


def test_second_registration_for_last_unit_fails(
    event: Event, participant: EventHubUser, other_participant: EventHubUser
) -> None:
    register(event, participant, ticket_type="VIP", quantity=2)

    with pytest.raises(ConflictError):
        register(event, other_participant, ticket_type="VIP")

    assert TicketType.objects.get(event=event, name="VIP").available_quantity == 0
    assert not Registration.objects.filter(attendee=other_participant).exists()


def test_event_capacity_is_enforced(
    event_factory: EventFactory, organizer: EventHubUser, participant: EventHubUser, other_participant: EventHubUser
) -> None:
    event = event_factory(organizer, capacity=2)
    register(event, participant, quantity=2)

    with pytest.raises(ConflictError):
        register(event, other_participant)

    event.refresh_from_db()
    assert event.current_attendees == 2
    assert event.remaining_capacity == 0


def test_untracked_inventory_is_unlimited(
    event_factory: EventFactory, organizer: EventHubUser, participant: EventHubUser
) -> None:
    event = event_factory(organizer)

    registration = register(event, participant, quantity=25)

    assert registration.quantity == 25
    assert TicketType.objects.get(event=event).available_quantity is None


def test_registering_again_after_cancelling_creates_a_new_record(event: Event, participant: EventHubUser) -> None:
    first = register(event, participant)
    registration_service.cancel_registration(first.id, participant)

    second = register(event, participant)

    assert second.id != first.id
    assert Registration.objects.filter(attendee=participant).count() == 2
    first.refresh_from_db()
    assert first.status == Registration.Status.CANCELLED


# --- update_status ---


def test_organizer_confirms_pending_registration(
    event: Event, participant: EventHubUser, organizer: EventHubUser
) -> None:
    registration = register(event, participant)

    updated = registration_service.update_status(registration.id, "CONFIRMED", organizer)

    assert updated.status == Registration.Status.CONFIRMED
    assert updated.payment_status == Registration.PaymentStatus.UNPAID
    assert len(updated.check_in_code) == 6
    notification = Notification.objects.get(user=participant)
    assert notification.notification_type == NotificationType.PARTICIPATION_CONFIRMED


def test_attendee_cannot_confirm_own_registration(event: Event, participant: EventHubUser) -> None:
    registration = register(event, participant)

    with pytest.raises(ForbiddenOperationError):
        registration_service.update_status(registration.id, "CONFIRMED", participant)

    registration.refresh_from_db()
    assert registration.status == Registration.Status.PENDING


def test_unrelated_user_cannot_change_status(
    event: Event, participant: EventHubUser, other_participant: EventHubUser
) -> None:
    registration = register(event, participant)

    with pytest.raises(ForbiddenOperationError):
        registration_service.update_status(registration.id, "CANCELLED", other_participant)


def test_organizer_rejects_pending_registration_and_inventory_is_restored(
    event: Event, participant: EventHubUser, organizer: EventHubUser
) -> None:
    registration = register(event, participant, quantity=3)

    registration_service.update_status(registration.id, "CANCELLED", organizer)

    registration.refresh_from_db()
    event.refresh_from_db()
    assert registration.status == Registration.Status.CANCELLED
    assert TicketType.objects.get(event=event, name="Standard").available_quantity == 10
    assert event.current_attendees == 0
    notification = Notification.objects.get(user=participant)
    assert notification.notification_type == NotificationType.EVENT_UPDATE


def test_organizer_cannot_cancel_confirmed_registration(
    auto_confirm_event: Event, participant: EventHubUser, organizer: EventHubUser
) -> None:
    registration = register(auto_confirm_event, participant)

    with pytest.raises(ForbiddenOperationError):
        registration_service.update_status(registration.id, "CANCELLED", organizer)


def test_attendee_withdrawal_notifies_organizer(
    auto_confirm_event: Event, participant: EventHubUser, organizer: EventHubUser
) -> None:
    registration = register(auto_confirm_event, participant)
    Notification.objects.all().delete()

    registration_service.cancel_registration(registration.id, participant)

    notification = Notification.objects.get()
    assert notification.user == organizer
    assert notification.notification_type == NotificationType.EVENT_UPDATE


def test_cancelling_a_paid_registration_keeps_it_paid(free_event: Event, participant: EventHubUser) -> None:
    registration = register(free_event, participant, ticket_type="General")

    cancelled = registration_service.cancel_registration(registration.id, participant)

    assert cancelled.status == Registration.Status.CANCELLED
    assert cancelled.payment_status == Registration.PaymentStatus.PAID


@pytest.mark.parametrize("new_status", ["PENDING", "CONFIRMED", "CANCELLED"])
def test_cancelled_is_terminal(
    event: Event, participant: EventHubUser, organizer: EventHubUser, new_status: str
) -> None:
    registration = register(event, participant)
    registration_service.cancel_registration(registration.id, participant)

    for actor in (participant, organizer):
        with pytest.raises(InvalidStateTransitionError):
            registration_service.update_status(registration.id, new_status, actor)


def test_confirmed_cannot_go_back_to_pending(
    auto_confirm_event: Event, participant: EventHubUser, organizer: EventHubUser
) -> None:
    registration = register(auto_confirm_event, participant)

    with pytest.raises(InvalidStateTransitionError):
        registration_service.update_status(registration.id, "PENDING", organizer)


def test_unknown_status_value(event: Event, participant: EventHubUser, organizer: EventHubUser) -> None:
    registration = register(event, participant)

    with pytest.raises(InvalidArgumentError):
        registration_service.update_status(registration.id, "APPROVED", organizer)


def test_unknown_registration(organizer: EventHubUser) -> None:
    with pytest.raises(NotFoundError):
        registration_service.update_status(uuid4(), "CONFIRMED", organizer)


# --- queries ---


def test_query_status(event: Event, participant: EventHubUser, other_participant: EventHubUser) -> None:
    registration = register(event, participant)

    result = RegistrationCheckSchema.model_validate(registration_service.query_status(event.id, participant))
    assert result.is_registered
    assert result.status == "PENDING"
    assert result.payment_status == "UNPAID"
    assert result.registration_id == registration.id
    assert result.data is not None
    assert result.data.ticket_type == "Standard"

    assert not registration_service.query_status(event.id, other_participant)["is_registered"]


def test_query_status_ignores_cancelled_registrations(event: Event, participant: EventHubUser) -> None:
    registration = register(event, participant)
    registration_service.cancel_registration(registration.id, participant)

    assert not registration_service.query_status(event.id, participant)["is_registered"]


def test_list_for_event_is_for_the_organizer_only(
    event: Event, participant: EventHubUser, organizer: EventHubUser, eventhub_admin: EventHubUser
) -> None:
    register(event, participant)

    assert registration_service.list_for_event(event.id, organizer).count() == 1
    assert registration_service.list_for_event(event.id, eventhub_admin).count() == 1
    with pytest.raises(ForbiddenOperationError):
        registration_service.list_for_event(event.id, participant)


def test_list_for_attendee(event: Event, free_event: Event, participant: EventHubUser) -> None:
    register(event, participant)
    register(free_event, participant, ticket_type="General")

    assert {r.event_id for r in registration_service.list_for_attendee(participant)} == {event.id, free_event.id}


# --- check_in ---


def test_check_in(free_event: Event, participant: EventHubUser, organizer: EventHubUser) -> None:
    registration = register(free_event, participant, ticket_type="General")

    checked_in = registration_service.check_in(free_event.id, registration.check_in_code.lower(), organizer)

    assert checked_in.id == registration.id
    assert checked_in.checked_in_at is not None
    assert checked_in.status == Registration.Status.CONFIRMED


def test_check_in_twice(free_event: Event, participant: EventHubUser, organizer: EventHubUser) -> None:
    registration = register(free_event, participant, ticket_type="General")
    registration_service.check_in(free_event.id, registration.check_in_code, organizer)

    with pytest.raises(ConflictError):
        registration_service.check_in(free_event.id, registration.check_in_code, organizer)


def test_check_in_requires_payment(
    auto_confirm_event: Event, participant: EventHubUser, organizer: EventHubUser
) -> None:
    registration = register(auto_confirm_event, participant)

    with pytest.raises(InvalidStateError):
        registration_service.check_in(auto_confirm_event.id, registration.check_in_code, organizer)


def test_check_in_ignores_cancelled_registration_with_the_same_code(
    free_event: Event, participant: EventHubUser, other_participant: EventHubUser, organizer: EventHubUser
) -> None:
    withdrawn = register(free_event, other_participant, ticket_type="General")
    registration_service.cancel_registration(withdrawn.id, other_participant)
    registration = register(free_event, participant, ticket_type="General")
    Registration.objects.filter(pk=withdrawn.pk).update(check_in_code=registration.check_in_code)

    checked_in = registration_service.check_in(free_event.id, registration.check_in_code, organizer)

    assert checked_in.id == registration.id


def test_cancelled_registration_cannot_check_in(
    free_event: Event, participant: EventHubUser, organizer: EventHubUser
) -> None:
    registration = register(free_event, participant, ticket_type="General")
    registration_service.cancel_registration(registration.id, participant)

    with pytest.raises(NotFoundError):
        registration_service.check_in(free_event.id, registration.check_in_code, organizer)


def test_check_in_unknown_code(free_event: Event, organizer: EventHubUser) -> None:
    with pytest.raises(NotFoundError):
        registration_service.check_in(free_event.id, "ZZZZZZ", organizer)


def test_check_in_by_another_user(free_event: Event, participant: EventHubUser) -> None:
    registration = register(free_event, participant, ticket_type="General")

    with pytest.raises(ForbiddenOperationError):
        registration_service.check_in(free_event.id, registration.check_in_code, participant)

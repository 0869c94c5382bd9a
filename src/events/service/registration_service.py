"""Registration lifecycle.

A registration moves through PENDING, CONFIRMED and CANCELLED. Payment is tracked on a
separate axis (see payment_service). The only allowed status changes are:

    PENDING   -> CONFIRMED   the event organizer approves
    PENDING   -> CANCELLED   the organizer rejects, or the attendee withdraws
    CONFIRMED -> CANCELLED   the attendee withdraws

CANCELLED is terminal; registering again creates a new record.

Ticket inventory and the event attendee count are reserved when a registration is
created and released when it is cancelled, always with conditional UPDATEs so that
concurrent requests cannot oversell.
"""

import typing as t
from decimal import Decimal
from uuid import UUID

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F, QuerySet, Value
from django.db.models.functions import Greatest
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accounts.models import EventHubUser
from events.exceptions import (
    ConflictError,
    ForbiddenOperationError,
    InvalidArgumentError,
    InvalidStateError,
    InvalidStateTransitionError,
    NotFoundError,
)
from events.models import Event, Registration, TicketType
from events.models.registration import generate_check_in_code
from notifications.enums import NotificationType
from notifications.service import create_notification

logger = structlog.get_logger(__name__)

Party = t.Literal["organizer", "attendee"]

Status = Registration.Status

ALLOWED_TRANSITIONS: dict[tuple[str, str], frozenset[Party]] = {
    (Status.PENDING, Status.CONFIRMED): frozenset({"organizer"}),
    (Status.PENDING, Status.CANCELLED): frozenset({"organizer", "attendee"}),
    (Status.CONFIRMED, Status.CANCELLED): frozenset({"attendee"}),
}


def get_registration(registration_id: UUID, *, for_update: bool = False) -> Registration:
    """Fetch a registration with its event and ticket type, or raise NotFoundError."""
    qs = Registration.objects.with_event()
    if for_update:
        qs = qs.select_for_update(of=("self",))
    registration = qs.filter(pk=registration_id).first()
    if registration is None:
        raise NotFoundError(_("Registration not found."))
    return registration


def party_of(registration: Registration, actor: EventHubUser) -> Party | None:
    """Which side of the registration the actor is on, if any."""
    if registration.event.organizer_id == actor.pk:
        return "organizer"
    if registration.attendee_id == actor.pk:
        return "attendee"
    return None


def _reserve(event: Event, ticket_type: TicketType, quantity: int) -> None:
    """Take `quantity` places from the ticket inventory and the event capacity.

    Both are conditional updates: if another request got there first, no row matches and
    the registration fails with ConflictError (the surrounding transaction rolls back).
    """
    if ticket_type.available_quantity is not None:
        if quantity > ticket_type.available_quantity:
            raise ConflictError(
                _("Only {count} tickets of this type are left.").format(count=ticket_type.available_quantity)
            )
        updated = TicketType.objects.filter(pk=ticket_type.pk, available_quantity__gte=quantity).update(
            available_quantity=F("available_quantity") - quantity
        )
        if not updated:
            raise ConflictError(_("Not enough tickets available."))

    events = Event.objects.filter(pk=event.pk)
    if event.capacity is not None:
        events = events.filter(current_attendees__lte=F("capacity") - quantity)
    if not events.update(current_attendees=F("current_attendees") + quantity):
        raise ConflictError(_("This event is full."))


def _release(registration: Registration) -> None:
    """Give the places of a cancelled registration back."""
    TicketType.objects.filter(pk=registration.ticket_type_id, available_quantity__isnull=False).update(
        available_quantity=F("available_quantity") + registration.quantity
    )
    Event.objects.filter(pk=registration.event_id).update(
        current_attendees=Greatest(F("current_attendees") - registration.quantity, Value(0))
    )


@transaction.atomic
def create_registration(
    *,
    event_id: UUID,
    attendee: EventHubUser,
    ticket_type: str | None,
    quantity: int | None = 1,
    additional_notes: str = "",
) -> Registration:
    """Register an attendee for a published event.

    The registration starts PENDING when the event requires approval, CONFIRMED otherwise.
    Free events need no payment, so their registrations are recorded as paid.

    Raises:
        InvalidArgumentError: missing ticket type, quantity below one, event already started.
        NotFoundError: unknown or unpublished event, unknown ticket type.
        ForbiddenOperationError: the attendee organizes the event.
        ConflictError: an active registration exists, or not enough places are left.
    """
    if not ticket_type or not ticket_type.strip():
        raise InvalidArgumentError(_("A ticket type is required."))
    if quantity is None or quantity < 1:
        raise InvalidArgumentError(_("Quantity must be at least 1."))
    if quantity > settings.MAX_TICKETS_PER_REGISTRATION:
        raise InvalidArgumentError(
            _("At most {count} tickets can be booked at once.").format(count=settings.MAX_TICKETS_PER_REGISTRATION)
        )

    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        raise NotFoundError(_("Event not found."))
    if event.is_owned_by(attendee):
        raise ForbiddenOperationError(_("You cannot register for your own event."))
    if event.status != Event.EventStatus.PUBLISHED:
        raise NotFoundError(_("This event is not open for registration."))
    if event.has_started:
        raise InvalidArgumentError(_("You cannot register for an event that has already started."))

    ticket = event.ticket_types.filter(name__iexact=ticket_type.strip()).first()
    if ticket is None:
        raise NotFoundError(_("Ticket type not found for this event."))

    if Registration.objects.active().filter(event=event, attendee=attendee).exists():
        raise ConflictError(_("You are already registered for this event."))

    _reserve(event, ticket, quantity)

    status = Status.PENDING if event.requires_approval else Status.CONFIRMED
    registration = Registration(
        event=event,
        attendee=attendee,
        ticket_type=ticket,
        quantity=quantity,
        total_price=Decimal("0") if event.is_free else ticket.price * quantity,
        currency=ticket.currency,
        status=status,
        additional_notes=additional_notes,
    )
    if event.is_free:
        registration.payment_status = Registration.PaymentStatus.PAID
        registration.payment_method = Registration.PaymentMethod.FREE
        registration.paid_at = timezone.now()
    if status == Status.CONFIRMED:
        registration.check_in_code = generate_check_in_code()
    try:
        with transaction.atomic():
            registration.save()
    except IntegrityError as e:
        raise ConflictError(_("You are already registered for this event.")) from e

    attendee.saved_events.add(event)
    create_notification(
        event.organizer,
        NotificationType.EVENT_UPDATE,
        _("{name} registered for {event}.").format(name=attendee.display_name, event=event.title),
        event=event,
        context={"registration_id": str(registration.id), "status": registration.status},
    )
    logger.info(
        "registration_created",
        registration_id=str(registration.id),
        event_id=str(event.id),
        attendee_id=str(attendee.id),
        ticket_type=ticket.name,
        quantity=quantity,
        status=registration.status,
    )
    return registration


@transaction.atomic
def update_status(registration_id: UUID, new_status: str, actor: EventHubUser) -> Registration:
    """Move a registration to a new status.

    Raises:
        InvalidArgumentError: `new_status` is not a registration status.
        NotFoundError: unknown registration.
        ForbiddenOperationError: the actor is not the organizer or the attendee, or the
            transition is reserved for the other party.
        InvalidStateTransitionError: the transition is not allowed at all.
    """
    if new_status not in Status.values:
        raise InvalidArgumentError(
            _("Invalid status. Choose one of: {choices}.").format(choices=", ".join(Status.values))
        )
    registration = get_registration(registration_id, for_update=True)
    party = party_of(registration, actor)
    if party is None:
        raise ForbiddenOperationError(_("You are not allowed to change this registration."))

    current = registration.status
    allowed_parties = ALLOWED_TRANSITIONS.get((current, new_status))
    if allowed_parties is None:
        raise InvalidStateTransitionError(
            _("A {current} registration cannot become {new}.").format(current=current, new=new_status)
        )
    if party not in allowed_parties:
        if party == "attendee":
            raise ForbiddenOperationError(_("Only the event organizer can confirm registrations."))
        raise ForbiddenOperationError(_("Only the attendee can cancel a confirmed registration."))

    registration.status = new_status
    update_fields = ["status", "updated_at"]
    if new_status == Status.CONFIRMED:
        registration.check_in_code = generate_check_in_code()
        update_fields.append("check_in_code")
    registration.save(update_fields=update_fields)
    if new_status == Status.CANCELLED:
        _release(registration)

    _notify_status_change(registration, party)
    logger.info(
        "registration_status_changed",
        registration_id=str(registration.id),
        previous=current,
        status=new_status,
        actor=party,
        actor_id=str(actor.id),
    )
    return registration


def cancel_registration(registration_id: UUID, actor: EventHubUser) -> Registration:
    """Attendee-side withdrawal. Payment status is left as it is, nothing is refunded."""
    return update_status(registration_id, Status.CANCELLED, actor)


def _notify_status_change(registration: Registration, party: Party) -> None:
    event = registration.event
    context = {"registration_id": str(registration.id), "status": registration.status}
    if registration.status == Status.CONFIRMED:
        if registration.awaiting_payment:
            message = _("Your registration for {event} was confirmed. Complete the payment to secure your place.")
        else:
            message = _("Your registration for {event} was confirmed.")
        create_notification(
            registration.attendee,
            NotificationType.PARTICIPATION_CONFIRMED,
            message.format(event=event.title),
            event=event,
            context=context,
        )
    elif party == "organizer":
        create_notification(
            registration.attendee,
            NotificationType.EVENT_UPDATE,
            _("Your registration for {event} was declined by the organizer.").format(event=event.title),
            event=event,
            context=context,
        )
    else:
        create_notification(
            event.organizer,
            NotificationType.EVENT_UPDATE,
            _("{name} cancelled their registration for {event}.").format(
                name=registration.attendee.display_name, event=event.title
            ),
            event=event,
            context=context,
        )


def query_status(event_id: UUID, attendee: EventHubUser) -> dict[str, t.Any]:
    """Is the attendee registered for the event, and in which state.

    `data` is the Registration row itself; `RegistrationCheckSchema` renders it.
    """
    if not Event.objects.filter(pk=event_id).exists():
        raise NotFoundError(_("Event not found."))
    registration = (
        Registration.objects.with_event().active().filter(event_id=event_id, attendee=attendee).first()
    )
    if registration is None:
        return {"is_registered": False, "status": None, "payment_status": None, "registration_id": None, "data": None}
    return {
        "is_registered": True,
        "status": registration.status,
        "payment_status": registration.payment_status,
        "registration_id": registration.id,
        "data": registration,
    }


def list_for_attendee(attendee: EventHubUser) -> QuerySet[Registration]:
    return Registration.objects.with_event().filter(attendee=attendee).order_by("-created_at")


def list_for_event(event_id: UUID, actor: EventHubUser) -> QuerySet[Registration]:
    """All registrations of an event, for its organizer."""
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        raise NotFoundError(_("Event not found."))
    if not (event.is_owned_by(actor) or actor.is_admin):
        raise ForbiddenOperationError(_("Only the event organizer can see its registrations."))
    return Registration.objects.with_event().filter(event=event).order_by("-created_at")


@transaction.atomic
def check_in(event_id: UUID, code: str, actor: EventHubUser) -> Registration:
    """Mark the attendee holding `code` as arrived. This does not change the status."""
    code = code.strip().upper()
    if not code:
        raise InvalidArgumentError(_("A check-in code is required."))
    event = Event.objects.filter(pk=event_id).first()
    if event is None:
        raise NotFoundError(_("Event not found."))
    if not event.is_owned_by(actor):
        raise ForbiddenOperationError(_("Only the event organizer can check attendees in."))
    registration = (
        Registration.objects.select_for_update()
        .select_related("attendee", "ticket_type", "event")
        .filter(event=event, check_in_code=code)
        .active()
        .first()
    )
    if registration is None:
        raise NotFoundError(_("No registration matches this code."))
    if registration.status != Status.CONFIRMED:
        raise InvalidStateError(_("Only confirmed registrations can be checked in."))
    if not registration.is_paid:
        raise InvalidStateError(_("This registration has not been paid yet."))
    if registration.checked_in_at is not None:
        raise ConflictError(_("This registration has already been checked in."))
    registration.checked_in_at = timezone.now()
    registration.save(update_fields=["checked_in_at", "updated_at"])
    logger.info("registration_checked_in", registration_id=str(registration.id), event_id=str(event.id))
    return registration

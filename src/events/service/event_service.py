"""Event management: creation, publication, updates, cancellation and saved events."""

import typing as t
from decimal import Decimal
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accounts.models import EventHubUser
from events.exceptions import (
    ConflictError,
    ForbiddenOperationError,
    InvalidArgumentError,
    InvalidStateTransitionError,
    NotFoundError,
)
from events.models import Event, Registration, TicketType
from events.schema import EventCreateSchema, EventFilterSchema, EventUpdateSchema, TicketTypeInSchema
from notifications.enums import NotificationType
from notifications.service import create_notification, delete_event_notifications

logger = structlog.get_logger(__name__)


def get_event(event_id: UUID) -> Event:
    event = Event.objects.with_ticket_types().filter(pk=event_id).first()
    if event is None:
        raise NotFoundError(_("Event not found."))
    return event


def get_visible_event(event_id: UUID, user: EventHubUser | None) -> Event:
    """An event as seen by `user`. Drafts are only visible to their organizer and admins."""
    event = get_event(event_id)
    if event.status == Event.EventStatus.DRAFT and not (user and (event.is_owned_by(user) or user.is_admin)):
        raise NotFoundError(_("Event not found."))
    return event


def get_owned_event(event_id: UUID, actor: EventHubUser) -> Event:
    event = get_event(event_id)
    if not event.is_owned_by(actor):
        raise ForbiddenOperationError(_("Only the event organizer can manage this event."))
    return event


def list_events(filters: EventFilterSchema) -> QuerySet[Event]:
    """Published public events, ordered by start."""
    return filters.filter(Event.objects.listed().with_ticket_types()).order_by("start", "id")


def organizer_events(organizer: EventHubUser) -> QuerySet[Event]:
    return Event.objects.with_ticket_types().owned_by(organizer).order_by("-start")


def _ticket_price(event: Event, ticket_type: TicketTypeInSchema) -> t.Any:
    return 0 if event.is_free else ticket_type.price


@transaction.atomic
def create_event(organizer: EventHubUser, payload: EventCreateSchema) -> Event:
    """Create a DRAFT event with its ticket types.

    Raises:
        ForbiddenOperationError: the user does not hold the ORGANIZER role.
    """
    if not organizer.is_organizer:
        raise ForbiddenOperationError(_("Only organizers can create events."))
    event = Event(organizer=organizer, **payload.model_dump(exclude={"ticket_types"}))
    event.save()
    for ticket_type in payload.ticket_types:
        TicketType.objects.create(
            event=event,
            name=ticket_type.name,
            price=_ticket_price(event, ticket_type),
            currency=ticket_type.currency,
            available_quantity=ticket_type.available_quantity,
        )
    logger.info("event_created", event_id=str(event.id), organizer_id=str(organizer.id))
    return get_event(event.id)


@transaction.atomic
def update_event(event_id: UUID, payload: EventUpdateSchema, actor: EventHubUser) -> Event:
    """Apply a partial update.

    When `ticket_types` is given it becomes the new set of ticket types: existing ones are
    updated by name, missing ones are removed unless somebody registered with them.
    """
    event = get_owned_event(event_id, actor)
    if event.status == Event.EventStatus.CANCELLED:
        raise InvalidStateTransitionError(_("A cancelled event cannot be edited."))
    was_free = event.is_free
    data = payload.model_dump(exclude_unset=True, exclude={"ticket_types"})
    for field, value in data.items():
        if value is None and field not in {"doors_open", "capacity", "latitude", "longitude"}:
            continue
        setattr(event, field, value)
    event.save(update_fields=[*data, "updated_at"])
    if payload.ticket_types is not None:
        _replace_ticket_types(event, payload.ticket_types)
    elif event.is_free:
        event.ticket_types.update(price=0)
    if event.is_free and not was_free:
        _settle_unpaid_registrations(event)
    logger.info("event_updated", event_id=str(event.id), fields=sorted(payload.model_dump(exclude_unset=True)))
    return get_event(event.id)


def _settle_unpaid_registrations(event: Event) -> None:
    """An event that became free owes nothing: its unpaid registrations count as paid."""
    settled = (
        Registration.objects.active()
        .filter(event=event, payment_status=Registration.PaymentStatus.UNPAID)
        .update(
            payment_status=Registration.PaymentStatus.PAID,
            payment_method=Registration.PaymentMethod.FREE,
            paid_at=timezone.now(),
            total_price=Decimal("0"),
        )
    )
    if settled:
        logger.info("unpaid_registrations_settled", event_id=str(event.id), count=settled)


def _replace_ticket_types(event: Event, ticket_types: list[TicketTypeInSchema]) -> None:
    names = [ticket_type.name.lower() for ticket_type in ticket_types]
    if len(names) != len(set(names)):
        raise InvalidArgumentError(_("Ticket type names must be unique within an event."))
    existing = {ticket_type.name.lower(): ticket_type for ticket_type in event.ticket_types.all()}
    for ticket_type in ticket_types:
        current = existing.pop(ticket_type.name.lower(), None)
        if current is None:
            current = TicketType(event=event)
        current.name = ticket_type.name
        current.price = _ticket_price(event, ticket_type)
        current.currency = ticket_type.currency
        current.available_quantity = ticket_type.available_quantity
        current.save()
    for removed in existing.values():
        if removed.registrations.exists():
            raise ConflictError(
                _("The ticket type {name} has registrations and cannot be removed.").format(name=removed.name)
            )
        removed.delete()


@transaction.atomic
def publish_event(event_id: UUID, actor: EventHubUser) -> Event:
    """Make a DRAFT event visible and open for registration.

    Raises:
        ForbiddenOperationError: the actor is not the organizer.
        InvalidStateTransitionError: the event is not a draft.
        InvalidArgumentError: the event has no ticket types.
    """
    event = get_owned_event(event_id, actor)
    if event.status != Event.EventStatus.DRAFT:
        raise InvalidStateTransitionError(_("Only draft events can be published."))
    if not event.ticket_types.exists():
        raise InvalidArgumentError(_("Add at least one ticket type before publishing."))
    event.status = Event.EventStatus.PUBLISHED
    event.save(update_fields=["status", "updated_at"])
    logger.info("event_published", event_id=str(event.id))
    return event


@transaction.atomic
def cancel_event(event_id: UUID, actor: EventHubUser) -> Event:
    """Cancel an event and every active registration of it. Paid registrations are not refunded."""
    event = get_owned_event(event_id, actor)
    if event.status == Event.EventStatus.CANCELLED:
        raise InvalidStateTransitionError(_("This event is already cancelled."))
    event.status = Event.EventStatus.CANCELLED
    event.save(update_fields=["status", "updated_at"])

    registrations = list(Registration.objects.active().filter(event=event).select_related("attendee"))
    Registration.objects.filter(pk__in=[registration.pk for registration in registrations]).update(
        status=Registration.Status.CANCELLED
    )
    message = _("{event} has been cancelled by the organizer.").format(event=event.title)
    for registration in registrations:
        create_notification(
            registration.attendee,
            NotificationType.EVENT_UPDATE,
            message,
            event=event,
            context={"registration_id": str(registration.id), "status": Registration.Status.CANCELLED},
        )
    logger.info("event_cancelled", event_id=str(event.id), cancelled_registrations=len(registrations))
    return event


def delete_event(event_id: UUID, actor: EventHubUser) -> None:
    """Delete an event together with its ticket types and registrations."""
    event = get_event(event_id)
    if not (event.is_owned_by(actor) or actor.is_admin):
        raise ForbiddenOperationError(_("Only the event organizer can delete this event."))
    with transaction.atomic():
        delete_event_notifications(event)
        Registration.objects.filter(event=event).delete()
        event.delete()
    logger.info("event_deleted", event_id=str(event_id), actor_id=str(actor.id))


def saved_events(user: EventHubUser) -> QuerySet[Event]:
    return user.saved_events.all().with_ticket_types().order_by("start")  # type: ignore[attr-defined]


def save_event(event_id: UUID, user: EventHubUser) -> Event:
    event = get_visible_event(event_id, user)
    user.saved_events.add(event)
    return event


def unsave_event(event_id: UUID, user: EventHubUser) -> None:
    event = get_event(event_id)
    user.saved_events.remove(event)

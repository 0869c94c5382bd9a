"""Simulated card payments for confirmed registrations."""

import re
import time
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from accounts.models import EventHubUser
from events.exceptions import ConflictError, ForbiddenOperationError, InvalidArgumentError, InvalidStateError
from events.models import Registration
from events.schema import CardDetailsSchema, PaymentStatusSchema
from notifications.enums import NotificationType
from notifications.service import create_notification

from .registration_service import get_registration, party_of

logger = structlog.get_logger(__name__)

CARD_NUMBER_RE = re.compile(r"^\d{12,19}$")
EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/\d{2}$")
CVV_RE = re.compile(r"^\d{3,4}$")


def validate_card(card: CardDetailsSchema) -> None:
    """Check the card fields for presence and shape. Nothing is charged or stored."""
    missing = [
        label
        for label, value in (
            ("card number", card.card_number),
            ("cardholder name", card.cardholder_name),
            ("expiry date", card.expiry_date),
            ("cvv", card.cvv),
        )
        if not value.strip()
    ]
    if missing:
        raise InvalidArgumentError(_("Missing card details: {fields}.").format(fields=", ".join(missing)))
    if not CARD_NUMBER_RE.match(re.sub(r"[\s-]", "", card.card_number)):
        raise InvalidArgumentError(_("The card number must have between 12 and 19 digits."))
    if not EXPIRY_RE.match(card.expiry_date.strip()):
        raise InvalidArgumentError(_("The expiry date must have the MM/YY format."))
    if not CVV_RE.match(card.cvv.strip()):
        raise InvalidArgumentError(_("The CVV must have 3 or 4 digits."))


def process_payment(registration_id: UUID, card: CardDetailsSchema, actor: EventHubUser) -> Registration:
    """Pay for a confirmed registration.

    Raises:
        NotFoundError: unknown registration.
        ForbiddenOperationError: the actor is not the attendee.
        InvalidArgumentError: missing or malformed card details.
        InvalidStateError: the registration is not CONFIRMED, or the event is free.
        ConflictError: the registration is already paid.
    """
    registration = get_registration(registration_id)
    if registration.attendee_id != actor.pk:
        raise ForbiddenOperationError(_("Only the attendee can pay for this registration."))
    validate_card(card)

    # simulated gateway latency, no row lock held
    if settings.SIMULATED_PAYMENT_DELAY:
        time.sleep(settings.SIMULATED_PAYMENT_DELAY)

    with transaction.atomic():
        registration = get_registration(registration_id, for_update=True)
        if registration.event.is_free:
            raise InvalidStateError(_("Free events do not require payment."))
        if registration.is_paid:
            raise ConflictError(_("This registration has already been paid."))
        if registration.status != Registration.Status.CONFIRMED:
            raise InvalidStateError(_("Only confirmed registrations can be paid."))
        registration.payment_status = Registration.PaymentStatus.PAID
        registration.payment_method = Registration.PaymentMethod.CARD
        registration.paid_at = timezone.now()
        registration.save(update_fields=["payment_status", "payment_method", "paid_at", "updated_at"])

    event = registration.event
    context = {"registration_id": str(registration.id), "payment_status": registration.payment_status}
    create_notification(
        actor,
        NotificationType.PARTICIPATION_CONFIRMED,
        _("Your payment for {event} was received. See you there!").format(event=event.title),
        event=event,
        context=context,
    )
    create_notification(
        event.organizer,
        NotificationType.EVENT_UPDATE,
        _("{name} paid for {event}.").format(name=actor.display_name, event=event.title),
        event=event,
        context=context,
    )
    logger.info(
        "payment_processed",
        registration_id=str(registration.id),
        event_id=str(event.id),
        amount=str(registration.total_price),
        currency=registration.currency,
    )
    return registration


def payment_status(registration_id: UUID, actor: EventHubUser) -> PaymentStatusSchema:
    """Payment summary, visible to the attendee and the event organizer."""
    registration = get_registration(registration_id)
    if party_of(registration, actor) is None:
        raise ForbiddenOperationError(_("You are not allowed to see this payment."))
    return PaymentStatusSchema(
        registration_id=registration.id,
        event_title=registration.event.title,
        status=registration.status,
        payment_status=registration.payment_status,
        payment_method=registration.payment_method,
        total_price=registration.total_price,
        currency=registration.currency,
        paid_at=registration.paid_at,
    )

"""Registration endpoints for attendees and organizers."""

import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route, status

from common.authentication import CookieJWTAuth
from common.controllers import UserAwareController
from common.throttling import WriteThrottle
from events import schema
from events.models import Event, Registration
from events.service import event_service, registration_service


@api_controller("/registrations", auth=CookieJWTAuth(), tags=["Registrations"])
class RegistrationController(UserAwareController):
    @route.post(
        "/register",
        response={201: schema.RegistrationSchema},
        url_name="register_for_event",
        throttle=WriteThrottle(),
    )
    def register(self, payload: schema.RegistrationCreateSchema) -> tuple[int, Registration]:
        """Register for a published event.

        The registration is PENDING until the organizer confirms it, unless the event
        confirms registrations automatically. Registrations for free events need no payment.
        """
        registration = registration_service.create_registration(
            event_id=payload.event_id,
            attendee=self.user(),
            ticket_type=payload.ticket_type,
            quantity=payload.quantity,
            additional_notes=payload.additional_notes,
        )
        return status.HTTP_201_CREATED, registration

    @route.get("/my-registrations", response=list[schema.RegistrationSchema], url_name="my_registrations")
    def my_registrations(self) -> QuerySet[Registration]:
        """All registrations of the current user, newest first, cancelled ones included."""
        return registration_service.list_for_attendee(self.user())

    @route.put(
        "/cancel/{uuid:registration_id}", response=schema.RegistrationSchema, url_name="cancel_registration"
    )
    def cancel(self, registration_id: UUID) -> Registration:
        """Withdraw from an event. Paid registrations are not refunded."""
        return registration_service.cancel_registration(registration_id, self.user())

    @route.get("/check/{uuid:event_id}", response=schema.RegistrationCheckSchema, url_name="check_registration")
    def check(self, event_id: UUID) -> dict[str, t.Any]:
        """Whether the current user holds an active registration for the event."""
        return registration_service.query_status(event_id, self.user())

    @route.get(
        "/event/{uuid:event_id}", response=list[schema.EventRegistrationSchema], url_name="event_registrations"
    )
    def event_registrations(self, event_id: UUID) -> QuerySet[Registration]:
        """Registrations of an event. Only for its organizer."""
        return registration_service.list_for_event(event_id, self.user())

    @route.put(
        "/update-status/{uuid:registration_id}",
        response=schema.EventRegistrationSchema,
        url_name="update_registration_status",
    )
    def update_status(self, registration_id: UUID, payload: schema.RegistrationStatusUpdateSchema) -> Registration:
        """Confirm or reject a pending registration, or cancel one.

        Organizers confirm or reject PENDING registrations. Attendees may cancel their own
        PENDING or CONFIRMED registrations.
        """
        return registration_service.update_status(registration_id, payload.status, self.user())

    @route.get("/saved-events", response=list[schema.EventListSchema], url_name="saved_events")
    def saved_events(self) -> QuerySet[Event]:
        return event_service.saved_events(self.user())

    @route.post("/check-in/{uuid:event_id}", response=schema.EventRegistrationSchema, url_name="check_in")
    def check_in(self, event_id: UUID, payload: schema.CheckInSchema) -> Registration:
        """Check an attendee in with the code of their confirmed registration."""
        return registration_service.check_in(event_id, payload.code, self.user())

from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route, status
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from accounts.models import EventHubUser
from accounts.permissions import IsOrganizer
from common.authentication import CookieJWTAuth, OptionalAuth
from common.controllers import UserAwareController
from common.schema import ResponseMessage
from common.throttling import WriteThrottle
from events import schema
from events.models import Event
from events.service import event_service


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventController(UserAwareController):
    def current_user(self) -> EventHubUser | None:
        user = self.maybe_user()
        return user if isinstance(user, EventHubUser) else None

    @route.get("", response=PaginatedResponseSchema[schema.EventListSchema], url_name="list_events")
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_events(
        self,
        params: schema.EventFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[Event]:
        """Browse published events.

        Filter by category, city, start date range and free events, or search title and
        description. Results are ordered by start date.
        """
        return event_service.list_events(params)

    @route.post(
        "",
        auth=CookieJWTAuth(),
        response={201: schema.EventDetailSchema},
        url_name="create_event",
        throttle=WriteThrottle(),
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, Event]:
        """Create a draft event with its ticket types. Requires the organizer role."""
        return status.HTTP_201_CREATED, event_service.create_event(self.user(), payload)

    @route.get(
        "/mine",
        auth=CookieJWTAuth(),
        permissions=[IsOrganizer],
        response=PaginatedResponseSchema[schema.EventListSchema],
        url_name="my_events",
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def my_events(self) -> QuerySet[Event]:
        """Events organized by the current user, drafts included."""
        return event_service.organizer_events(self.user())

    @route.get("/{uuid:event_id}", response=schema.EventDetailSchema, url_name="get_event")
    def get_event(self, event_id: UUID) -> Event:
        """Event details. Drafts are only visible to their organizer."""
        return event_service.get_visible_event(event_id, self.current_user())

    @route.put(
        "/{uuid:event_id}",
        auth=CookieJWTAuth(),
        response=schema.EventDetailSchema,
        url_name="update_event",
        throttle=WriteThrottle(),
    )
    def update_event(self, event_id: UUID, payload: schema.EventUpdateSchema) -> Event:
        return event_service.update_event(event_id, payload, self.user())

    @route.delete("/{uuid:event_id}", auth=CookieJWTAuth(), response={204: None}, url_name="delete_event")
    def delete_event(self, event_id: UUID) -> tuple[int, None]:
        event_service.delete_event(event_id, self.user())
        return 204, None

    @route.post(
        "/{uuid:event_id}/publish", auth=CookieJWTAuth(), response=schema.EventDetailSchema, url_name="publish_event"
    )
    def publish_event(self, event_id: UUID) -> Event:
        """Open a draft event for registration. It needs at least one ticket type."""
        event_service.publish_event(event_id, self.user())
        return event_service.get_event(event_id)

    @route.post(
        "/{uuid:event_id}/cancel", auth=CookieJWTAuth(), response=schema.EventDetailSchema, url_name="cancel_event"
    )
    def cancel_event(self, event_id: UUID) -> Event:
        """Cancel the event. Its active registrations are cancelled and the attendees notified."""
        event_service.cancel_event(event_id, self.user())
        return event_service.get_event(event_id)

    @route.post("/{uuid:event_id}/save", auth=CookieJWTAuth(), response=ResponseMessage, url_name="save_event")
    def save_event(self, event_id: UUID) -> ResponseMessage:
        event_service.save_event(event_id, self.user())
        return ResponseMessage(message="Event saved.")

    @route.delete("/{uuid:event_id}/save", auth=CookieJWTAuth(), response={204: None}, url_name="unsave_event")
    def unsave_event(self, event_id: UUID) -> tuple[int, None]:
        event_service.unsave_event(event_id, self.user())
        return 204, None

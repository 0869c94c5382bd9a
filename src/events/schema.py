"""Schemas for events, ticket types, registrations and payments."""

import typing as t
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.db.models import Q
from ninja import FilterSchema, ModelSchema, Schema
from pydantic import AwareDatetime, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from accounts.schema import MinimalUserSchema
from common.schema import OneToOneFiftyString, StrippedString

from .models import Event, Registration, TicketType

CategoryLiteral = t.Literal[
    "CONCERT", "FESTIVAL", "WORKSHOP", "CONFERENCE", "PARTY", "EXHIBITION", "SPORT_EVENT", "CHARITY", "OTHER"
]
CurrencyLiteral = t.Literal["RON", "EUR", "USD"]
VisibilityLiteral = t.Literal["PUBLIC", "PRIVATE", "UNLISTED"]


class CamelCaseInput(Schema):
    """Request bodies accept both snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Ticket types


class TicketTypeSchema(ModelSchema):
    class Meta:
        model = TicketType
        fields = ["id", "name", "price", "currency", "available_quantity"]


class TicketTypeInSchema(CamelCaseInput):
    name: OneToOneFiftyString
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    currency: CurrencyLiteral = "RON"
    available_quantity: int | None = Field(None, ge=0)


# Events


class EventSummarySchema(ModelSchema):
    class Meta:
        model = Event
        fields = ["id", "title", "category", "start", "end", "city", "status", "is_free", "cover_image_url"]


EVENT_LIST_FIELDS = [
    "id",
    "title",
    "short_description",
    "category",
    "status",
    "visibility",
    "start",
    "end",
    "location_name",
    "city",
    "country",
    "is_free",
    "capacity",
    "current_attendees",
    "cover_image_url",
]


class EventListSchema(ModelSchema):
    organizer: MinimalUserSchema
    ticket_types: list[TicketTypeSchema]
    remaining_capacity: int | None = None
    tags: list[str]

    class Meta:
        model = Event
        fields = EVENT_LIST_FIELDS

    @staticmethod
    def resolve_ticket_types(obj: Event) -> list[TicketType]:
        return list(obj.ticket_types.all())


class EventDetailSchema(ModelSchema):
    organizer: MinimalUserSchema
    ticket_types: list[TicketTypeSchema]
    remaining_capacity: int | None = None
    tags: list[str]
    is_past: bool

    class Meta:
        model = Event
        fields = [
            *EVENT_LIST_FIELDS,
            "description",
            "doors_open",
            "address",
            "latitude",
            "longitude",
            "requires_approval",
            "created_at",
        ]

    @staticmethod
    def resolve_ticket_types(obj: Event) -> list[TicketType]:
        return list(obj.ticket_types.all())


class _EventFields(CamelCaseInput):
    title: StrippedString = Field(..., min_length=1, max_length=100)
    description: StrippedString = Field(..., min_length=1, max_length=5000)
    short_description: StrippedString = Field("", max_length=200)
    category: CategoryLiteral
    start: AwareDatetime
    end: AwareDatetime
    doors_open: AwareDatetime | None = None
    location_name: StrippedString = Field(..., min_length=1, max_length=255)
    address: StrippedString = Field(..., min_length=1, max_length=255)
    city: StrippedString = Field(..., min_length=1, max_length=100)
    country: StrippedString = Field("Romania", max_length=100)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    is_free: bool = False
    capacity: int | None = Field(None, ge=1)
    requires_approval: bool = True
    visibility: VisibilityLiteral = "PUBLIC"
    cover_image_url: str = Field("", max_length=200)
    tags: list[str] = Field(default_factory=list, max_length=20)


class EventCreateSchema(_EventFields):
    ticket_types: list[TicketTypeInSchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_ticket_type_names(self) -> t.Self:
        """Ticket type names identify the ticket within an event."""
        names = [ticket_type.name.lower() for ticket_type in self.ticket_types]
        if len(names) != len(set(names)):
            raise ValueError("Ticket type names must be unique within an event.")
        return self


class EventUpdateSchema(CamelCaseInput):
    """Partial update. Ticket types, when given, replace the current set (matched by name)."""

    title: StrippedString | None = Field(None, min_length=1, max_length=100)
    description: StrippedString | None = Field(None, min_length=1, max_length=5000)
    short_description: StrippedString | None = Field(None, max_length=200)
    category: CategoryLiteral | None = None
    start: AwareDatetime | None = None
    end: AwareDatetime | None = None
    doors_open: AwareDatetime | None = None
    location_name: StrippedString | None = Field(None, min_length=1, max_length=255)
    address: StrippedString | None = Field(None, min_length=1, max_length=255)
    city: StrippedString | None = Field(None, min_length=1, max_length=100)
    country: StrippedString | None = Field(None, max_length=100)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    is_free: bool | None = None
    capacity: int | None = Field(None, ge=1)
    requires_approval: bool | None = None
    visibility: VisibilityLiteral | None = None
    cover_image_url: str | None = Field(None, max_length=200)
    tags: list[str] | None = Field(None, max_length=20)
    ticket_types: list[TicketTypeInSchema] | None = None


class EventFilterSchema(FilterSchema):
    category: CategoryLiteral | None = None
    city: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_free: bool | None = None
    search: str | None = None

    def filter_city(self, city: str | None) -> Q:
        return Q(city__iexact=city) if city else Q()

    def filter_start_date(self, start_date: datetime | None) -> Q:
        return Q(start__gte=start_date) if start_date else Q()

    def filter_end_date(self, end_date: datetime | None) -> Q:
        return Q(start__lte=end_date) if end_date else Q()

    def filter_search(self, search: str | None) -> Q:
        if not search:
            return Q()
        return Q(title__icontains=search) | Q(description__icontains=search) | Q(short_description__icontains=search)


# Registrations


class RegistrationCreateSchema(CamelCaseInput):
    event_id: UUID
    ticket_type: str | None = None
    quantity: int = 1
    additional_notes: StrippedString = Field("", max_length=500)


REGISTRATION_FIELDS = [
    "id",
    "quantity",
    "total_price",
    "currency",
    "status",
    "payment_status",
    "payment_method",
    "paid_at",
    "check_in_code",
    "checked_in_at",
    "additional_notes",
    "created_at",
]


class RegistrationSchema(ModelSchema):
    event: EventSummarySchema
    ticket_type: str

    class Meta:
        model = Registration
        fields = REGISTRATION_FIELDS

    @staticmethod
    def resolve_ticket_type(obj: Registration) -> str:
        return obj.ticket_type.name


class EventRegistrationSchema(ModelSchema):
    """A registration as seen by the event organizer."""

    event: EventSummarySchema
    ticket_type: str
    attendee: MinimalUserSchema

    class Meta:
        model = Registration
        fields = REGISTRATION_FIELDS

    @staticmethod
    def resolve_ticket_type(obj: Registration) -> str:
        return obj.ticket_type.name


class RegistrationStatusUpdateSchema(Schema):
    status: str


class RegistrationCheckSchema(Schema):
    is_registered: bool
    status: str | None = None
    payment_status: str | None = None
    registration_id: UUID | None = None
    data: RegistrationSchema | None = None


class CheckInSchema(Schema):
    code: str = Field(..., min_length=1, max_length=12)


# Payments


class CardDetailsSchema(CamelCaseInput):
    """Simulated card fields. They are checked for presence and shape only, never stored."""

    card_number: str = ""
    cardholder_name: str = ""
    expiry_date: str = ""
    cvv: str = ""


class PaymentSchema(CamelCaseInput):
    registration_id: UUID
    card_details: CardDetailsSchema = Field(default_factory=CardDetailsSchema)


class PaymentStatusSchema(Schema):
    registration_id: UUID
    event_title: str
    status: str
    payment_status: str
    payment_method: str | None
    total_price: Decimal
    currency: str
    paid_at: datetime | None = None


# Organizer statistics


class CategoryCountSchema(Schema):
    category: str
    count: int


class MonthlyCountSchema(Schema):
    month: str
    count: int


class CategoryRevenueSchema(Schema):
    category: str
    revenue: Decimal
    tickets_sold: int


class OrganizerStatsSchema(Schema):
    total_events: int
    published_events: int
    upcoming_events: int
    total_attendees: int
    total_revenue: Decimal
    events_by_category: list[CategoryCountSchema]
    recent_events: list[EventSummarySchema]
    popular_events: list[EventSummarySchema]
    attendee_trend: list[MonthlyCountSchema]
    ticket_revenue: list[CategoryRevenueSchema]

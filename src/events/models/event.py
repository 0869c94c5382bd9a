import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import EventHubUser


class EventQuerySet(models.QuerySet["Event"]):
    def published(self) -> t.Self:
        return self.filter(status=Event.EventStatus.PUBLISHED)

    def listed(self) -> t.Self:
        """Published events anyone can browse."""
        return self.published().filter(visibility=Event.Visibility.PUBLIC)

    def upcoming(self) -> t.Self:
        return self.filter(start__gte=timezone.now())

    def with_ticket_types(self) -> t.Self:
        return self.select_related("organizer").prefetch_related("ticket_types")

    def owned_by(self, user: "EventHubUser") -> t.Self:
        return self.filter(organizer=user)


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        return EventQuerySet(self.model, using=self._db)

    def published(self) -> EventQuerySet:
        return self.get_queryset().published()

    def listed(self) -> EventQuerySet:
        return self.get_queryset().listed()

    def with_ticket_types(self) -> EventQuerySet:
        return self.get_queryset().with_ticket_types()


class Event(TimeStampedModel):
    class Category(models.TextChoices):
        CONCERT = "CONCERT", "Concert"
        FESTIVAL = "FESTIVAL", "Festival"
        WORKSHOP = "WORKSHOP", "Workshop"
        CONFERENCE = "CONFERENCE", "Conference"
        PARTY = "PARTY", "Party"
        EXHIBITION = "EXHIBITION", "Exhibition"
        SPORT_EVENT = "SPORT_EVENT", "Sport event"
        CHARITY = "CHARITY", "Charity"
        OTHER = "OTHER", "Other"

    class EventStatus(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PUBLISHED = "PUBLISHED", "Published"
        CANCELLED = "CANCELLED", "Cancelled"

    class Visibility(models.TextChoices):
        PUBLIC = "PUBLIC", "Public"
        PRIVATE = "PRIVATE", "Private"
        UNLISTED = "UNLISTED", "Unlisted"

    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")
    title = models.CharField(max_length=100, db_index=True)
    description = models.TextField(max_length=5000)
    short_description = models.CharField(max_length=200, blank=True, default="")
    category = models.CharField(max_length=20, choices=Category.choices, db_index=True)
    status = models.CharField(max_length=10, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True)
    visibility = models.CharField(max_length=10, choices=Visibility.choices, default=Visibility.PUBLIC)

    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField()
    doors_open = models.DateTimeField(null=True, blank=True)

    location_name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100, db_index=True)
    country = models.CharField(max_length=100, default="Romania")
    latitude = models.FloatField(
        null=True, blank=True, validators=[MinValueValidator(-90), MaxValueValidator(90)]
    )
    longitude = models.FloatField(
        null=True, blank=True, validators=[MinValueValidator(-180), MaxValueValidator(180)]
    )

    is_free = models.BooleanField(default=False)
    capacity = models.PositiveIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1)], help_text="Leave empty for unlimited."
    )
    current_attendees = models.PositiveIntegerField(default=0, editable=False)
    requires_approval = models.BooleanField(
        default=True,
        help_text="New registrations wait for the organizer's confirmation. If off, they are confirmed right away.",
    )

    cover_image_url = models.URLField(blank=True, default="")
    tags = models.JSONField(default=list, blank=True)

    objects = EventManager()

    class Meta:
        ordering = ["start"]
        constraints = [
            models.CheckConstraint(
                condition=Q(capacity__isnull=True) | Q(current_attendees__lte=models.F("capacity")),
                name="event_attendees_within_capacity",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "visibility", "start"], name="idx_status_visibility_start"),
        ]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        """Validate the schedule and the attendee count."""
        super().clean()
        if self.start and self.end and self.end < self.start:
            raise DjangoValidationError({"end": "End date must be after start date."})
        if self.start and self.doors_open and self.doors_open > self.start:
            raise DjangoValidationError({"doors_open": "Doors must open before the event starts."})
        if self.capacity is not None and self.current_attendees > self.capacity:
            raise DjangoValidationError({"capacity": "Capacity cannot be lower than the current attendee count."})
        if not isinstance(self.tags, list) or not all(isinstance(tag, str) for tag in self.tags):
            raise DjangoValidationError({"tags": "Tags must be a list of strings."})

    @property
    def is_past(self) -> bool:
        """Computed at read time, an event never expires in the database."""
        return self.end < timezone.now()

    @property
    def has_started(self) -> bool:
        return self.start <= timezone.now()

    @property
    def remaining_capacity(self) -> int | None:
        if self.capacity is None:
            return None
        return max(self.capacity - self.current_attendees, 0)

    def is_owned_by(self, user: "EventHubUser") -> bool:
        return self.organizer_id == user.pk

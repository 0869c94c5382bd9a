import secrets
import string
import typing as t

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel

from .event import Event
from .ticket import TicketType

CHECK_IN_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_check_in_code() -> str:
    return "".join(secrets.choice(CHECK_IN_CODE_ALPHABET) for _ in range(settings.CHECK_IN_CODE_LENGTH))


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def active(self) -> t.Self:
        """Registrations that still hold a place."""
        return self.exclude(status=Registration.Status.CANCELLED)

    def with_event(self) -> t.Self:
        return self.select_related("event", "event__organizer", "ticket_type", "attendee")


class RegistrationManager(models.Manager["Registration"]):
    def get_queryset(self) -> RegistrationQuerySet:
        return RegistrationQuerySet(self.model, using=self._db)

    def active(self) -> RegistrationQuerySet:
        return self.get_queryset().active()

    def with_event(self) -> RegistrationQuerySet:
        return self.get_queryset().with_event()


class Registration(TimeStampedModel):
    """Links one attendee to one event.

    `status` and `payment_status` are orthogonal: a CONFIRMED registration of a paid event
    stays UNPAID until the attendee pays.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        CONFIRMED = "CONFIRMED", "Confirmed"
        CANCELLED = "CANCELLED", "Cancelled"

    class PaymentStatus(models.TextChoices):
        UNPAID = "UNPAID", "Unpaid"
        PAID = "PAID", "Paid"

    class PaymentMethod(models.TextChoices):
        CARD = "CARD", "Card"
        FREE = "FREE", "Free"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    attendee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations")
    ticket_type = models.ForeignKey(TicketType, on_delete=models.PROTECT, related_name="registrations")
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, choices=TicketType.Currency.choices)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID, db_index=True
    )
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    check_in_code = models.CharField(max_length=12, blank=True, default="", db_index=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    additional_notes = models.TextField(max_length=500, blank=True, default="")

    objects = RegistrationManager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "attendee"],
                condition=~models.Q(status="CANCELLED"),
                name="unique_active_registration_per_attendee",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.attendee} @ {self.event} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status != self.Status.CANCELLED

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PaymentStatus.PAID

    @property
    def awaiting_payment(self) -> bool:
        """CONFIRMED but not yet paid. Free registrations never wait for payment."""
        return self.status == self.Status.CONFIRMED and not self.is_paid

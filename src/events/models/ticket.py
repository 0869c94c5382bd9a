from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel

from .event import Event


class TicketType(TimeStampedModel):
    """A named price/quantity tier of an event."""

    class Currency(models.TextChoices):
        RON = "RON", "RON"
        EUR = "EUR", "EUR"
        USD = "USD", "USD"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.RON)
    available_quantity = models.PositiveIntegerField(
        null=True, blank=True, help_text="Tickets left for sale. Leave empty if not tracked."
    )

    class Meta:
        ordering = ["price", "name"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_ticket_type_name_per_event"),
            models.CheckConstraint(condition=models.Q(price__gte=0), name="ticket_type_price_non_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.event.title})"

    @property
    def is_tracked(self) -> bool:
        return self.available_quantity is not None

"""Dashboard figures for an organizer's own events."""

from datetime import datetime
from decimal import Decimal

from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from accounts.models import EventHubUser
from events.models import Event, Registration
from events.schema import (
    CategoryCountSchema,
    CategoryRevenueSchema,
    EventSummarySchema,
    MonthlyCountSchema,
    OrganizerStatsSchema,
)

TREND_MONTHS = 6
TOP_EVENTS = 5


def _month_starts(now: datetime, months: int) -> list[datetime]:
    """First instant of each of the last `months` months, oldest first, current month included."""
    first = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    starts = []
    year, month = first.year, first.month
    for _ in range(months):
        starts.append(first.replace(year=year, month=month))
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)
    return starts[::-1]


def attendee_trend(organizer: EventHubUser, months: int = TREND_MONTHS) -> list[MonthlyCountSchema]:
    """Confirmed registrations per month, zero-filled."""
    starts = _month_starts(timezone.localtime(), months)
    rows = (
        Registration.objects.filter(
            event__organizer=organizer,
            status=Registration.Status.CONFIRMED,
            created_at__gte=starts[0],
        )
        .annotate(month=TruncMonth("created_at"))
        .order_by()
        .values("month")
        .annotate(count=Count("id"))
    )
    counts = {row["month"].strftime("%Y-%m"): row["count"] for row in rows}
    return [
        MonthlyCountSchema(month=start.strftime("%Y-%m"), count=counts.get(start.strftime("%Y-%m"), 0))
        for start in starts
    ]


def ticket_revenue(organizer: EventHubUser) -> list[CategoryRevenueSchema]:
    """Revenue and tickets sold per event category, over paid registrations."""
    rows = (
        Registration.objects.filter(event__organizer=organizer, payment_status=Registration.PaymentStatus.PAID)
        .order_by()
        .values("event__category")
        .annotate(revenue=Sum("total_price"), tickets_sold=Sum("quantity"))
        .order_by("event__category")
    )
    return [
        CategoryRevenueSchema(
            category=row["event__category"],
            revenue=row["revenue"] or Decimal("0"),
            tickets_sold=row["tickets_sold"] or 0,
        )
        for row in rows
    ]


def organizer_stats(organizer: EventHubUser) -> OrganizerStatsSchema:
    events = Event.objects.filter(organizer=organizer)
    revenue = ticket_revenue(organizer)
    by_category = events.order_by().values("category").annotate(count=Count("id")).order_by("category")
    return OrganizerStatsSchema(
        total_events=events.count(),
        published_events=events.published().count(),
        upcoming_events=events.published().upcoming().count(),
        total_attendees=events.aggregate(total=Sum("current_attendees"))["total"] or 0,
        total_revenue=sum((row.revenue for row in revenue), Decimal("0")),
        events_by_category=[CategoryCountSchema(category=row["category"], count=row["count"]) for row in by_category],
        recent_events=[EventSummarySchema.from_orm(event) for event in events.order_by("-created_at")[:TOP_EVENTS]],
        popular_events=[
            EventSummarySchema.from_orm(event) for event in events.order_by("-current_attendees", "start")[:TOP_EVENTS]
        ],
        attendee_trend=attendee_trend(organizer),
        ticket_revenue=revenue,
    )

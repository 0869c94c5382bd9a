from datetime import datetime
from decimal import Decimal

import pytest
from django.utils import timezone
from freezegun import freeze_time

from accounts.models import EventHubUser
from conftest import EventFactory, EventHubUserFactory
from events.models import Event
from events.schema import CardDetailsSchema
from events.service import payment_service, registration_service, stats_service

pytestmark = pytest.mark.django_db


def test_month_starts_crosses_year_boundary() -> None:
    now = datetime(2025, 2, 14, 15, 30, tzinfo=timezone.get_current_timezone())

    starts = stats_service._month_starts(now, 4)

    assert [start.strftime("%Y-%m") for start in starts] == ["2024-11", "2024-12", "2025-01", "2025-02"]
    assert all(start.day == 1 and start.hour == 0 for start in starts)


def test_empty_dashboard(organizer: EventHubUser) -> None:
    stats = stats_service.organizer_stats(organizer)

    assert stats.total_events == 0
    assert stats.total_revenue == Decimal("0")
    assert stats.events_by_category == []
    assert stats.ticket_revenue == []
    assert len(stats.attendee_trend) == stats_service.TREND_MONTHS
    assert all(month.count == 0 for month in stats.attendee_trend)


def test_organizer_stats(
    event: Event,
    free_event: Event,
    event_factory: EventFactory,
    organizer: EventHubUser,
    other_organizer: EventHubUser,
    participant: EventHubUser,
    other_participant: EventHubUser,
) -> None:
    event_factory(organizer, title="Draft", status=Event.EventStatus.DRAFT)
    event_factory(other_organizer, title="Someone else's")
    paid = registration_service.create_registration(
        event_id=event.id, attendee=participant, ticket_type="Standard", quantity=2
    )
    registration_service.update_status(paid.id, "CONFIRMED", organizer)
    card = CardDetailsSchema(card_number="4111111111111111", cardholder_name="Ana Pop", expiry_date="12/30", cvv="123")
    payment_service.process_payment(paid.id, card, participant)
    registration_service.create_registration(event_id=event.id, attendee=other_participant, ticket_type="VIP")
    registration_service.create_registration(event_id=free_event.id, attendee=participant, ticket_type="General")

    stats = stats_service.organizer_stats(organizer)

    assert stats.total_events == 3
    assert stats.published_events == 2
    assert stats.upcoming_events == 2
    assert stats.total_attendees == 4
    assert stats.total_revenue == Decimal("100.00")
    assert {(row.category, row.count) for row in stats.events_by_category} == {("CONCERT", 2), ("WORKSHOP", 1)}
    assert [(row.category, row.revenue, row.tickets_sold) for row in stats.ticket_revenue] == [
        ("CONCERT", Decimal("100.00"), 2),
        ("WORKSHOP", Decimal("0.00"), 1),
    ]
    assert stats.popular_events[0].id == event.id
    assert stats.attendee_trend[-1].count == 2


def test_attendee_trend_groups_by_month(
    auto_confirm_event: Event, organizer: EventHubUser, user_factory: EventHubUserFactory
) -> None:
    with freeze_time("2025-03-10 10:00:00+00:00"):
        registration_service.create_registration(
            event_id=auto_confirm_event.id, attendee=user_factory(), ticket_type="Standard"
        )
    with freeze_time("2025-05-20 10:00:00+00:00"):
        for _ in range(2):
            registration_service.create_registration(
                event_id=auto_confirm_event.id, attendee=user_factory(), ticket_type="Standard"
            )
        withdrawn = registration_service.create_registration(
            event_id=auto_confirm_event.id, attendee=user_factory(), ticket_type="Standard"
        )
        registration_service.cancel_registration(withdrawn.id, withdrawn.attendee)

        trend = stats_service.attendee_trend(organizer)

    assert [(month.month, month.count) for month in trend] == [
        ("2024-12", 0),
        ("2025-01", 0),
        ("2025-02", 0),
        ("2025-03", 1),
        ("2025-04", 0),
        ("2025-05", 2),
    ]

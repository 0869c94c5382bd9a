"""Shared fixtures: users, authenticated clients and events."""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta
from decimal import Decimal

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import EventHubUser
from eventhub.celery import app as celery_app
from events.models import Event, TicketType


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits so tests are never throttled."""
    for name in (
        "AnonDefaultThrottle",
        "UserDefaultThrottle",
        "AuthThrottle",
        "UserRegistrationThrottle",
        "WriteThrottle",
        "PaymentThrottle",
    ):
        monkeypatch.setattr(f"common.throttling.{name}.rate", "10000/min")


@pytest.fixture(autouse=True)
def clear_cache() -> t.Iterator[None]:
    """Throttle counters live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> t.Iterator[None]:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    previous = celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True
    yield
    celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates = previous


@pytest.fixture(autouse=True)
def no_payment_delay(settings: t.Any) -> None:
    settings.SIMULATED_PAYMENT_DELAY = 0


class EventHubUserFactory:
    """Factory for creating EventHubUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> EventHubUser:
        username = kwargs.pop("username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(10)))
        email = kwargs.pop("email", f"{username}@example.com")
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        kwargs.setdefault("status", EventHubUser.Status.ACTIVE)
        kwargs.setdefault("email_verified", True)
        return EventHubUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> EventHubUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> EventHubUserFactory:
    return EventHubUserFactory()


@pytest.fixture
def participant(user_factory: EventHubUserFactory) -> EventHubUser:
    return user_factory(username="participant")


@pytest.fixture
def other_participant(user_factory: EventHubUserFactory) -> EventHubUser:
    return user_factory(username="other_participant")


@pytest.fixture
def organizer(user_factory: EventHubUserFactory) -> EventHubUser:
    return user_factory(username="organizer", roles=["PARTICIPANT", "ORGANIZER"])


@pytest.fixture
def other_organizer(user_factory: EventHubUserFactory) -> EventHubUser:
    return user_factory(username="other_organizer", roles=["PARTICIPANT", "ORGANIZER"])


@pytest.fixture
def eventhub_admin(user_factory: EventHubUserFactory) -> EventHubUser:
    return user_factory(username="eventhub_admin", roles=["PARTICIPANT", "ADMIN"])


def get_client(user: EventHubUser) -> Client:
    """A test client authenticated with a Bearer access token."""
    access = RefreshToken.for_user(user).access_token
    return Client(HTTP_AUTHORIZATION=f"Bearer {access}")


@pytest.fixture
def participant_client(participant: EventHubUser) -> Client:
    return get_client(participant)


@pytest.fixture
def other_participant_client(other_participant: EventHubUser) -> Client:
    return get_client(other_participant)


@pytest.fixture
def organizer_client(organizer: EventHubUser) -> Client:
    return get_client(organizer)


@pytest.fixture
def eventhub_admin_client(eventhub_admin: EventHubUser) -> Client:
    return get_client(eventhub_admin)


@pytest.fixture
def next_week() -> datetime:
    same_time_next_week = timezone.now() + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(datetime.combine(same_time_next_week.date(), noon), timezone.get_current_timezone())


class EventFactory:
    """Creates events with a single ticket type unless told otherwise."""

    def __init__(self, start: datetime) -> None:
        self.start = start

    def __call__(
        self,
        organizer: EventHubUser,
        *,
        ticket_types: list[dict[str, t.Any]] | None = None,
        **kwargs: t.Any,
    ) -> Event:
        kwargs.setdefault("title", "Jazz in the Park")
        kwargs.setdefault("description", "An evening of live jazz.")
        kwargs.setdefault("category", Event.Category.CONCERT)
        kwargs.setdefault("status", Event.EventStatus.PUBLISHED)
        kwargs.setdefault("start", self.start)
        kwargs.setdefault("end", kwargs["start"] + timedelta(hours=3))
        kwargs.setdefault("location_name", "Central Park")
        kwargs.setdefault("address", "Str. Parcului 1")
        kwargs.setdefault("city", "Cluj-Napoca")
        event = Event.objects.create(organizer=organizer, **kwargs)
        if ticket_types is None:
            ticket_types = [{"name": "Standard", "price": Decimal("0" if event.is_free else "50.00")}]
        for ticket_type in ticket_types:
            TicketType.objects.create(event=event, **ticket_type)
        return event


@pytest.fixture
def event_factory(next_week: datetime) -> EventFactory:
    return EventFactory(next_week)


@pytest.fixture
def event(event_factory: EventFactory, organizer: EventHubUser) -> Event:
    """A published paid event that requires approval, with 10 Standard tickets at 50 RON."""
    return event_factory(
        organizer,
        capacity=100,
        ticket_types=[
            {"name": "Standard", "price": Decimal("50.00"), "available_quantity": 10},
            {"name": "VIP", "price": Decimal("150.00"), "available_quantity": 2},
        ],
    )


@pytest.fixture
def free_event(event_factory: EventFactory, organizer: EventHubUser) -> Event:
    """A published free event with automatic confirmation."""
    return event_factory(
        organizer,
        title="Open Workshop",
        category=Event.Category.WORKSHOP,
        is_free=True,
        requires_approval=False,
        ticket_types=[{"name": "General", "price": Decimal("0"), "available_quantity": 5}],
    )


@pytest.fixture
def auto_confirm_event(event_factory: EventFactory, organizer: EventHubUser) -> Event:
    """A published paid event confirming registrations right away."""
    return event_factory(
        organizer,
        title="Tech Conference",
        category=Event.Category.CONFERENCE,
        requires_approval=False,
        ticket_types=[{"name": "Standard", "price": Decimal("100.00"), "available_quantity": 50}],
    )

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from accounts.controllers.account import AccountController
from accounts.controllers.admin import AdminUserController
from accounts.controllers.auth import AuthController
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.events import EventController
from events.controllers.payments import PaymentController
from events.controllers.registrations import RegistrationController
from events.controllers.stats import StatsController
from events.exceptions import (
    ConflictError,
    ForbiddenOperationError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from notifications.controllers.notification_controller import NotificationController

from .exception_handlers import (
    handle_conflict_error,
    handle_django_validation_error,
    handle_forbidden_operation_error,
    handle_general_exception,
    handle_invalid_argument_error,
    handle_invalid_state_error,
    handle_not_found_error,
)

api = NinjaExtraAPI(
    title="EventHub API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"EventHub API {settings.VERSION}",
    app_name=f"eventhub-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(
    # Auth/Account controllers
    AuthController,
    AccountController,
    AdminUserController,
    # Event controllers
    EventController,
    RegistrationController,
    PaymentController,
    StatsController,
    # Notification controllers
    NotificationController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    NotFoundError: handle_not_found_error,
    ForbiddenOperationError: handle_forbidden_operation_error,
    InvalidArgumentError: handle_invalid_argument_error,
    InvalidStateError: handle_invalid_state_error,
    ConflictError: handle_conflict_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)

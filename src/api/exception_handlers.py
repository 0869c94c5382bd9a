"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import (
    ConflictError,
    EventHubError,
    ForbiddenOperationError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    The request is logged with sensitive headers and fields masked. The traceback is only
    returned to staff users or in DEBUG.
    """
    data = {"detail": "Internal Server Error."}
    tb_str = traceback.format_exc()
    is_staff = getattr(request, "user", None) and request.user.is_staff
    json_payload = None
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            json_payload = obfuscate(orjson.loads(request.body))
        except orjson.JSONDecodeError:  # pragma: no cover
            json_payload = None
    logger.exception(
        "internal_server_error",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        query=obfuscate(request.GET.dict()),
        json_payload=json_payload,
        # the user is set by the auth flow, so no need to await request.auser()
        user=str(request.user) if getattr(request, "user", None) else None,
    )
    if settings.DEBUG or is_staff:  # pragma: no cover
        data["traceback"] = tb_str
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a model validation error, answering with the messages of each field."""
    logger.warning("validation_error", path=request.path)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(exc.messages)}  # type: ignore[union-attr]
    return Response(status=400, data={"errors": error_dict})


def _domain_error_response(status: int, exc: EventHubError | t.Type[EventHubError], request: HttpRequest) -> Response:
    logger.info(
        "domain_error",
        error=type(exc).__name__ if isinstance(exc, EventHubError) else exc.__name__,
        status=status,
        path=request.path,
    )
    return Response(status=status, data={"detail": str(exc)})


def handle_not_found_error(request: HttpRequest, exc: NotFoundError | t.Type[NotFoundError]) -> Response:
    return _domain_error_response(404, exc, request)


def handle_forbidden_operation_error(
    request: HttpRequest, exc: ForbiddenOperationError | t.Type[ForbiddenOperationError]
) -> Response:
    return _domain_error_response(403, exc, request)


def handle_invalid_argument_error(
    request: HttpRequest, exc: InvalidArgumentError | t.Type[InvalidArgumentError]
) -> Response:
    return _domain_error_response(400, exc, request)


def handle_invalid_state_error(request: HttpRequest, exc: InvalidStateError | t.Type[InvalidStateError]) -> Response:
    """Handle an invalid state or state transition error."""
    return _domain_error_response(409, exc, request)


def handle_conflict_error(request: HttpRequest, exc: ConflictError | t.Type[ConflictError]) -> Response:
    return _domain_error_response(409, exc, request)


SENSITIVE_KEYS = {
    "password",
    "password1",
    "password2",
    "token",
    "cookie",
    "authorization",
    "authentication",
    "card_details",
    "carddetails",
    "card_number",
    "cardnumber",
    "cvv",
}


def obfuscate(data: t.Any) -> t.Any:
    """Obfuscate sensitive data in payloads and headers."""
    if not isinstance(data, dict):
        return data
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data

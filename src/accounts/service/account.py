"""Service layer for sign-up, email verification, password reset and profile updates."""

import typing as t

import jwt
import structlog
from django.conf import settings
from django.contrib.auth.password_validation import validate_password as _default_validate_password
from django.core.exceptions import ValidationError
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from ninja import Schema
from ninja.errors import HttpError

from accounts import schema, tasks
from accounts.jwt import blacklist as blacklist_token
from accounts.jwt import check_blacklist, create_token
from accounts.models import EventHubUser

logger = structlog.get_logger(__name__)


def validate_password(password: str, user: EventHubUser | None = None) -> None:
    """Simple wrapper around Django's password validation."""
    try:
        _default_validate_password(password, user=user)
    except ValidationError as e:
        raise HttpError(400, e.messages[0])


@transaction.atomic
def register_user(payload: schema.SignupSchema) -> tuple[EventHubUser, str]:
    """Register a new user and send a verification email.

    New users are UNVERIFIED participants; organizers additionally get the ORGANIZER role
    and a default organizer profile.

    Returns:
        The new user and the verification token.
    """
    logger.info("user_registration_started", username=payload.username)
    if EventHubUser.objects.filter(email__iexact=payload.email).exists():
        logger.warning("user_registration_duplicate_email")
        raise HttpError(400, str(_("A user with this email already exists.")))
    if EventHubUser.objects.filter(username__iexact=payload.username).exists():
        logger.warning("user_registration_duplicate_username", username=payload.username)
        raise HttpError(400, str(_("This username is already taken.")))
    validate_password(
        payload.password1,
        user=EventHubUser(username=payload.username, email=payload.email, first_name=payload.first_name),
    )
    roles = [EventHubUser.Role.PARTICIPANT]
    if payload.as_organizer:
        roles.append(EventHubUser.Role.ORGANIZER)
    new_user = EventHubUser.objects.create_user(
        username=payload.username,
        email=payload.email.lower(),
        password=payload.password1,
        first_name=payload.first_name,
        last_name=payload.last_name,
        roles=roles,
        status=EventHubUser.Status.UNVERIFIED,
    )
    logger.info("user_registration_completed", user_id=str(new_user.id), roles=roles)
    return new_user, send_verification_email_for_user(new_user)


def send_verification_email_for_user(user: EventHubUser) -> str:
    """Send a verification email for a user and return the token."""
    verification_payload = schema.VerifyEmailJWTPayloadSchema(
        user_id=user.id,
        email=user.email,
        exp=timezone.now() + settings.VERIFY_TOKEN_LIFETIME,
    )
    token = create_token(verification_payload.model_dump(mode="json"))
    tasks.send_verification_email.delay(user.email, token)
    logger.info("verification_email_requested", user_id=str(user.id))
    return token


def resend_verification_email(email: str) -> str | None:
    """Send a fresh verification link to an unverified account, if there is one."""
    user = EventHubUser.objects.filter(email__iexact=email, email_verified=False).first()
    if user is None:
        logger.info("verification_resend_skipped")
        return None
    return send_verification_email_for_user(user)


@transaction.atomic
def verify_email(token: str) -> EventHubUser:
    """Verify a user's email and activate the account.

    Suspended or deactivated accounts keep their status.
    """
    payload = token_to_payload(token, schema.VerifyEmailJWTPayloadSchema)
    check_blacklist(payload.jti)
    user = EventHubUser.objects.filter(id=payload.user_id).first()
    if user is None:
        logger.warning("email_verification_failed_user_not_found", user_id=str(payload.user_id))
        raise HttpError(400, str(_("A user with this email no longer exists.")))
    blacklist_token(token)
    user.email_verified = True
    if user.status == EventHubUser.Status.UNVERIFIED:
        user.status = EventHubUser.Status.ACTIVE
    user.save(update_fields=["email_verified", "status"])
    logger.info("email_verified", user_id=str(user.id))
    return user


def request_password_reset(email: str) -> str | None:
    """Request a password reset.

    Unknown addresses are silently ignored so the endpoint cannot be used to probe for accounts.

    Returns:
        The reset token, or None if no such user exists.
    """
    logger.info("password_reset_requested")
    user = EventHubUser.objects.filter(email__iexact=email).first()
    if user is None:
        logger.info("password_reset_user_not_found")
        return None
    payload = schema.PasswordResetJWTPayloadSchema(
        user_id=user.id,
        email=user.email,
        exp=timezone.now() + settings.PASSWORD_RESET_TOKEN_LIFETIME,
    )
    token = create_token(payload.model_dump(mode="json"))
    tasks.send_password_reset_link.delay(user.email, token)
    logger.info("password_reset_email_sent", user_id=str(user.id))
    return token


@transaction.atomic
def reset_password(token: str, new_password: str) -> EventHubUser:
    """Reset a user's password with a single-use token."""
    payload = token_to_payload(token, schema.PasswordResetJWTPayloadSchema)
    check_blacklist(payload.jti)
    user = get_object_or_404(EventHubUser, id=payload.user_id)
    validate_password(new_password, user=user)
    user.set_password(new_password)
    user.save(update_fields=["password"])
    blacklist_token(token)
    logger.info("password_reset_completed", user_id=str(user.id))
    return user


def update_profile(user: EventHubUser, payload: schema.ProfileUpdateSchema) -> EventHubUser:
    """Apply a partial profile update.

    The organizer profile can only be edited by organizers; its verification status is
    managed by administrators and is never taken from the payload.
    """
    data = payload.model_dump(exclude_unset=True, exclude={"participant_profile", "organizer_profile"})
    for field, value in data.items():
        if value is not None:
            setattr(user, field, value)
    if payload.participant_profile is not None:
        user.participant_profile = payload.participant_profile.model_dump(mode="json")
    if payload.organizer_profile is not None:
        if not user.is_organizer:
            raise HttpError(403, str(_("Only organizers have an organizer profile.")))
        organizer_profile = payload.organizer_profile.model_copy(
            update={
                "verification_status": user.organizer.verification_status,
                "subscription_plan": user.organizer.subscription_plan,
            }
        )
        user.organizer_profile = organizer_profile.model_dump(mode="json")
    user.save()
    logger.info("profile_updated", user_id=str(user.id), fields=sorted(payload.model_dump(exclude_unset=True)))
    return user


T = t.TypeVar("T", bound=Schema)


def token_to_payload(token: str, schema_class: t.Type[T]) -> T:
    """Decode a token and validate it against a schema.

    Args:
        token (str): The token to decode.
        schema_class (t.Type[Schema]): The schema to validate the token against.

    Returns:
        Schema: The decoded and validated token.
    """
    try:
        _payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM], audience=settings.JWT_AUDIENCE
        )
        return schema_class.model_validate(_payload)
    except jwt.ExpiredSignatureError:
        logger.warning("token_validation_expired", token_type=schema_class.__name__)
        raise HttpError(400, str(_("Token has expired.")))
    except Exception as e:
        logger.warning("token_validation_failed", token_type=schema_class.__name__, error=str(e))
        raise HttpError(400, str(_("Invalid token.")))

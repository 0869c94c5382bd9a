"""Administrator-side user management."""

import secrets
import string
from datetime import timedelta

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Count, QuerySet
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError

from accounts import schema, tasks
from accounts.models import EventHubUser
from events.exceptions import ForbiddenOperationError
from notifications.enums import NotificationType
from notifications.service import create_notification

logger = structlog.get_logger(__name__)


def list_users(filters: schema.AdminUserFilterSchema) -> QuerySet[EventHubUser]:
    """Filtered and sorted users for the admin listing."""
    qs = filters.filter(EventHubUser.objects.all())
    return qs.order_by(filters.sort_by, "id")


def _ensure_unique(email: str | None, username: str | None, exclude: EventHubUser | None = None) -> None:
    qs = EventHubUser.objects.all()
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    if email and qs.filter(email__iexact=email).exists():
        raise HttpError(400, str(_("A user with this email already exists.")))
    if username and qs.filter(username__iexact=username).exists():
        raise HttpError(400, str(_("This username is already taken.")))


@transaction.atomic
def create_user(payload: schema.AdminUserCreateSchema, actor: EventHubUser) -> EventHubUser:
    """Create a user on behalf of an administrator.

    Accounts created here skip email verification.
    """
    _ensure_unique(payload.email, payload.username)
    user = EventHubUser.objects.create_user(
        username=payload.username,
        email=payload.email.lower(),
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        roles=list(payload.roles),
        status=payload.status,
        email_verified=True,
    )
    logger.info("admin_user_created", user_id=str(user.id), actor_id=str(actor.id), roles=user.roles)
    return user


@transaction.atomic
def update_user(user: EventHubUser, payload: schema.AdminUserUpdateSchema, actor: EventHubUser) -> EventHubUser:
    """Apply a partial update, including roles and the organizer profile."""
    _ensure_unique(payload.email, payload.username, exclude=user)
    data = payload.model_dump(exclude_unset=True, exclude={"organizer_profile"})
    for field, value in data.items():
        if value is not None:
            setattr(user, field, value.lower() if field == "email" else value)
    if payload.organizer_profile is not None:
        user.organizer_profile = payload.organizer_profile.model_dump(mode="json")
    user.save()
    logger.info("admin_user_updated", user_id=str(user.id), actor_id=str(actor.id), fields=sorted(data))
    return user


def delete_user(user: EventHubUser, actor: EventHubUser) -> None:
    """Delete a user. Administrators cannot delete their own account."""
    if user.pk == actor.pk:
        raise ForbiddenOperationError(_("You cannot delete your own account."))
    user_id = str(user.id)
    user.delete()
    logger.info("admin_user_deleted", user_id=user_id, actor_id=str(actor.id))


@transaction.atomic
def change_status(user: EventHubUser, status: str, actor: EventHubUser, reason: str = "") -> EventHubUser:
    """Change the account status and tell the user about it."""
    if user.pk == actor.pk and status in EventHubUser.BLOCKED_STATUSES:
        raise ForbiddenOperationError(_("You cannot block your own account."))
    previous = user.status
    user.status = status
    user.save(update_fields=["status"])
    message = str(_("Your account status changed to {status}.")).format(status=user.get_status_display())
    if reason:
        message = f"{message} {reason}"
    create_notification(
        user,
        NotificationType.ACCOUNT_STATUS,
        message,
        context={"previous_status": previous, "status": status},
    )
    logger.info(
        "admin_user_status_changed", user_id=str(user.id), actor_id=str(actor.id), previous=previous, status=status
    )
    return user


def _temporary_password() -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(settings.TEMPORARY_PASSWORD_LENGTH))


def reset_password(user: EventHubUser, actor: EventHubUser) -> None:
    """Replace the user's password with a random one and email it to them."""
    temporary_password = _temporary_password()
    user.set_password(temporary_password)
    user.save(update_fields=["password"])
    tasks.send_temporary_password.delay(user.email, temporary_password)
    logger.info("admin_password_reset", user_id=str(user.id), actor_id=str(actor.id))


def user_stats() -> schema.AdminUserStatsSchema:
    """Aggregate user counts for the admin dashboard."""
    since = timezone.now() - timedelta(days=settings.ADMIN_STATS_NEW_USER_DAYS)
    by_status = {status: 0 for status in EventHubUser.Status.values}
    for row in EventHubUser.objects.order_by().values("status").annotate(count=Count("id")):
        by_status[row["status"]] = row["count"]
    by_role = {role: EventHubUser.objects.with_role(role).count() for role in EventHubUser.Role.values}
    return schema.AdminUserStatsSchema(
        total=EventHubUser.objects.count(),
        new_users=EventHubUser.objects.filter(date_joined__gte=since).count(),
        by_status=by_status,
        by_role=by_role,
    )

import re
import typing as t
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _
from pydantic import ValidationError as PydanticValidationError

from accounts.profiles import OrganizerProfile, ParticipantProfile


def _default_roles() -> list[str]:
    return [EventHubUser.Role.PARTICIPANT]


class EventHubUserQueryset(models.QuerySet["EventHubUser"]):
    """Queryset for EventHubUser."""

    def with_role(self, role: str) -> t.Self:
        """Users holding the given role.

        Roles are stored as a JSON list; matching the quoted value keeps the lookup
        portable across database backends.
        """
        return self.filter(roles__icontains=f'"{role}"')


class EventHubUserManager(UserManager["EventHubUser"]):
    def get_queryset(self) -> EventHubUserQueryset:
        """Get queryset for EventHubUser."""
        return EventHubUserQueryset(self.model, using=self._db)

    def with_role(self, role: str) -> EventHubUserQueryset:
        return self.get_queryset().with_role(role)


class EventHubUser(AbstractUser):
    class Role(models.TextChoices):
        PARTICIPANT = "PARTICIPANT", _("Participant")
        ORGANIZER = "ORGANIZER", _("Organizer")
        ADMIN = "ADMIN", _("Admin")

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        INACTIVE = "INACTIVE", _("Inactive")
        SUSPENDED = "SUSPENDED", _("Suspended")
        UNVERIFIED = "UNVERIFIED", _("Unverified")

    BLOCKED_STATUSES = (Status.INACTIVE, Status.SUSPENDED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(_("email address"), unique=True)
    roles = models.JSONField(default=_default_roles, help_text="Subset of PARTICIPANT, ORGANIZER, ADMIN")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.UNVERIFIED, db_index=True)
    email_verified = models.BooleanField(default=False)
    avatar_url = models.URLField(blank=True, default="")
    language = models.CharField(
        max_length=7,
        choices=settings.LANGUAGES,
        default=settings.LANGUAGE_CODE,
        help_text="User's preferred language",
    )
    participant_profile = models.JSONField(default=dict, blank=True)
    organizer_profile = models.JSONField(null=True, blank=True)
    saved_events = models.ManyToManyField("events.Event", blank=True, related_name="saved_by")

    objects = EventHubUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        return self.email or self.username

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Normalize roles and profiles, and keep is_active in line with the account status."""
        self.roles = self._normalized_roles()
        self.participant_profile = self.participant.model_dump(mode="json")
        if self.has_role(self.Role.ORGANIZER) or self.organizer_profile:
            self.organizer_profile = self.organizer.model_dump(mode="json")
        self.is_active = self.status not in self.BLOCKED_STATUSES
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "status" in update_fields:
            kwargs["update_fields"] = {*update_fields, "is_active"}
        super().save(*args, **kwargs)

    def _normalized_roles(self) -> list[str]:
        roles = self.roles or []
        if not isinstance(roles, list):
            raise ValidationError({"roles": [_("Roles must be a list.")]})
        unknown = set(roles) - set(self.Role.values)
        if unknown:
            raise ValidationError({"roles": [_("Unknown roles: {roles}").format(roles=", ".join(sorted(unknown)))]})
        # keep the declaration order of Role, drop duplicates
        return [role for role in self.Role.values if role in roles]

    def has_role(self, role: str) -> bool:
        return role in (self.roles or [])

    @property
    def is_organizer(self) -> bool:
        return self.has_role(self.Role.ORGANIZER)

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.has_role(self.Role.ADMIN)

    @property
    def participant(self) -> ParticipantProfile:
        """The participant profile as a typed structure."""
        try:
            return ParticipantProfile.model_validate(self.participant_profile or {})
        except PydanticValidationError as e:
            raise ValidationError({"participant_profile": [str(e)]}) from e

    @property
    def organizer(self) -> OrganizerProfile:
        """The organizer profile as a typed structure."""
        try:
            return OrganizerProfile.model_validate(self.organizer_profile or {})
        except PydanticValidationError as e:
            raise ValidationError({"organizer_profile": [str(e)]}) from e

    @property
    def display_name(self) -> str:
        """Returns the user's full name, or a prettified username as a fallback."""
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()

"""Schema for accounts module."""

import datetime
import typing as t
from uuid import uuid4

from django.conf import settings
from django.db.models import Q
from ninja import FilterSchema, ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field, field_serializer, model_validator

from accounts.profiles import OrganizerProfile, ParticipantProfile
from common.schema import OneToOneFiftyString, StrippedString

from .models import EventHubUser

RoleLiteral = t.Literal["PARTICIPANT", "ORGANIZER", "ADMIN"]
StatusLiteral = t.Literal["ACTIVE", "INACTIVE", "SUSPENDED", "UNVERIFIED"]
LanguageLiteral = t.Literal["en", "ro"]


class EventHubUserSchema(ModelSchema):
    id: UUID4
    display_name: str
    roles: list[RoleLiteral]
    participant_profile: ParticipantProfile
    organizer_profile: OrganizerProfile | None = None

    class Meta:
        model = EventHubUser
        fields = [
            "username",
            "email",
            "first_name",
            "last_name",
            "status",
            "email_verified",
            "avatar_url",
            "language",
            "date_joined",
        ]


class MinimalUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = EventHubUser
        fields = ["username", "email", "first_name", "last_name"]


class PasswordMixin(Schema):
    password1: str = Field(..., description="Password", min_length=8, max_length=150)
    password2: str = Field(..., description="Password confirmation", min_length=8, max_length=150)

    @model_validator(mode="after")
    def password_match(self) -> t.Self:
        """Validate that the passwords match."""
        if self.password1 != self.password2:
            raise ValueError("Passwords do not match")
        return self


class SignupSchema(PasswordMixin):
    username: OneToOneFiftyString
    email: EmailStr
    first_name: StrippedString = ""
    last_name: StrippedString = ""
    as_organizer: bool = Field(False, description="Also grant the organizer role.")


class LoginSchema(Schema):
    email: EmailStr
    password: str


class LoginResponseSchema(Schema):
    user: EventHubUserSchema
    access: str


class VerifyEmailSchema(Schema):
    token: str


class ResendVerificationSchema(Schema):
    email: EmailStr


class _BaseEmailJWTPayloadSchema(Schema):
    user_id: UUID4
    email: EmailStr
    exp: datetime.datetime
    jti: str = Field(default_factory=lambda: str(uuid4()))
    aud: str = Field(default_factory=lambda: settings.JWT_AUDIENCE)

    @field_serializer("exp")
    def serialize_exp(self, value: datetime.datetime) -> int:
        return int(value.timestamp())


class VerifyEmailJWTPayloadSchema(_BaseEmailJWTPayloadSchema):
    type: t.Literal["email_verification"] = "email_verification"


class PasswordResetJWTPayloadSchema(_BaseEmailJWTPayloadSchema):
    type: t.Literal["password_reset"] = "password_reset"


class PasswordResetRequestSchema(Schema):
    email: EmailStr


class PasswordResetSchema(PasswordMixin):
    token: str


class ProfileUpdateSchema(Schema):
    """Schema for updating the current user's profile.

    Omitted fields are left untouched. Profiles are replaced as a whole when given.
    """

    first_name: str | None = Field(None, max_length=150)
    last_name: str | None = Field(None, max_length=150)
    avatar_url: str | None = Field(None, max_length=200)
    language: LanguageLiteral | None = None
    participant_profile: ParticipantProfile | None = None
    organizer_profile: OrganizerProfile | None = None


# Admin user management


UserSortLiteral = t.Literal[
    "date_joined", "-date_joined", "email", "-email", "username", "-username", "last_login", "-last_login"
]


class AdminUserFilterSchema(FilterSchema):
    search: str | None = None
    role: RoleLiteral | None = None
    status: StatusLiteral | None = None
    sort_by: UserSortLiteral = "-date_joined"

    def filter_search(self, search: str | None) -> Q:
        """Case-insensitive match on username, email and names."""
        if not search:
            return Q()
        return (
            Q(username__icontains=search)
            | Q(email__icontains=search)
            | Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
        )

    def filter_role(self, role: str | None) -> Q:
        if not role:
            return Q()
        return Q(roles__icontains=f'"{role}"')

    def filter_sort_by(self, sort_by: str) -> Q:
        # applied as ordering by the service
        return Q()


class AdminUserCreateSchema(Schema):
    username: OneToOneFiftyString
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=150)
    first_name: StrippedString = ""
    last_name: StrippedString = ""
    roles: list[RoleLiteral] = Field(default_factory=lambda: ["PARTICIPANT"], min_length=1)
    status: StatusLiteral = "ACTIVE"


class AdminUserUpdateSchema(Schema):
    username: OneToOneFiftyString | None = None
    email: EmailStr | None = None
    first_name: str | None = Field(None, max_length=150)
    last_name: str | None = Field(None, max_length=150)
    roles: list[RoleLiteral] | None = Field(None, min_length=1)
    organizer_profile: OrganizerProfile | None = None


class AdminUserStatusSchema(Schema):
    status: StatusLiteral
    reason: str = Field("", max_length=500)


class AdminUserStatsSchema(Schema):
    total: int
    new_users: int
    by_status: dict[str, int]
    by_role: dict[str, int]

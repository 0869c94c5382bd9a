"""Typed role-specific profile structures.

Profiles are persisted as JSON on the user model and always read and written
through these models, so a stored blob is validated on the way in and has a
stable shape on the way out.
"""

import typing as t
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class _Profile(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)


class PriceRange(_Profile):
    min: Decimal = Field(Decimal("0"), ge=0)
    max: Decimal | None = Field(None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> t.Self:
        """The upper bound, when given, must not be below the lower one."""
        if self.max is not None and self.max < self.min:
            raise ValueError("max must be greater than or equal to min")
        return self


class ParticipantPreferences(_Profile):
    event_types: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=PriceRange)


class ParticipantContactInfo(_Profile):
    phone: str = Field("", max_length=32)
    address: str = Field("", max_length=255)


class SocialMedia(_Profile):
    facebook: str = ""
    instagram: str = ""
    twitter: str = ""
    linkedin: str = ""


class ParticipantProfile(_Profile):
    preferences: ParticipantPreferences = Field(default_factory=ParticipantPreferences)
    contact_info: ParticipantContactInfo = Field(default_factory=ParticipantContactInfo)
    social_media: SocialMedia = Field(default_factory=SocialMedia)
    description: str = Field("", max_length=2000)


class OrganizerContactInfo(_Profile):
    business_email: EmailStr | None = None
    phone: str = Field("", max_length=32)
    website: str = Field("", max_length=255)


class OrganizerProfile(_Profile):
    description: str = Field("", max_length=2000)
    verification_status: t.Literal["PENDING", "VERIFIED", "REJECTED"] = "PENDING"
    subscription_plan: t.Literal["FREE", "PREMIUM", "ENTERPRISE"] = "FREE"
    contact_info: OrganizerContactInfo = Field(default_factory=OrganizerContactInfo)
    social_media: SocialMedia = Field(default_factory=SocialMedia)

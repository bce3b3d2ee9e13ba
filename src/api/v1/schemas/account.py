"""Pydantic schemas for Account API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.account import MAX_STARTERS, Account


class SocialHandlesSchema(BaseModel):
    """Social handles (all optional)."""

    instagram: str | None = Field(None, max_length=100)
    linkedin: str | None = Field(None, max_length=200)
    whatsapp: str | None = Field(None, max_length=30)


class AccountUpdate(BaseModel):
    """Schema for updating an account profile (all fields optional).

    ``role`` and ``unlock_count`` are honoured for admins only.
    """

    name: str | None = Field(None, max_length=100)
    photo_url: str | None = Field(None, max_length=500)
    bio: str | None = Field(None, max_length=2000)
    nationality: str | None = Field(None, max_length=100)
    starters: list[str] | None = Field(None, max_length=MAX_STARTERS)
    interests: list[str] | None = Field(None, max_length=30)
    socials: SocialHandlesSchema | None = None
    visible: bool | None = None
    role: str | None = Field(None, pattern="^(participant|host|admin)$")
    unlock_count: int | None = Field(None, ge=0)

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        data = self.model_dump(exclude_unset=True)
        if self.socials is not None:
            data["socials"] = self.socials.model_dump(exclude_unset=True)
        return data


class AccountResponse(BaseModel):
    """Schema for the caller's own account."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None
    role: str
    visible: bool
    name: str | None
    photo_url: str | None
    bio: str | None
    nationality: str | None
    starters: list[str]
    interests: list[str]
    socials: SocialHandlesSchema
    unlocked_targets: list[str]
    unlock_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, account: Account) -> "AccountResponse":
        profile = account.profile
        return cls(
            id=account.id,
            email=account.email,
            role=account.role.value,
            visible=account.visible,
            name=profile.name,
            photo_url=profile.photo_url,
            bio=profile.bio,
            nationality=profile.nationality,
            starters=list(profile.starters),
            interests=list(profile.interests),
            socials=SocialHandlesSchema(**profile.socials.as_dict()),
            unlocked_targets=sorted(account.unlocked_targets),
            unlock_count=account.unlock_count,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class AccountDetailResponse(BaseModel):
    """Schema for single Account response."""

    data: AccountResponse

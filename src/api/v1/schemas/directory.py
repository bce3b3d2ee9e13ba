"""Pydantic schemas for Directory API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.directory import ProjectedProfile


class ProjectedProfileResponse(BaseModel):
    """A host profile as the caller may see it.

    Locked profiles carry ``id``, ``name`` and ``first_starter`` only.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "host-123",
                "is_unlocked": False,
                "name": "Ana",
                "first_starter": "Ask me about the best pastel de nata in town",
            }
        },
    )

    id: str
    is_unlocked: bool
    name: str | None = None
    first_starter: str | None = None
    role: str | None = None
    photo_url: str | None = None
    bio: str | None = None
    nationality: str | None = None
    starters: list[str] | None = None
    interests: list[str] | None = None
    socials: dict[str, str | None] | None = None
    visible: bool | None = None
    unlock_count: int | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, profile: ProjectedProfile) -> "ProjectedProfileResponse":
        if not profile.is_unlocked:
            return cls(
                id=profile.id,
                is_unlocked=False,
                name=profile.name,
                first_starter=profile.first_starter,
            )
        return cls(
            id=profile.id,
            is_unlocked=True,
            name=profile.name,
            first_starter=profile.first_starter,
            role=profile.role.value if profile.role else None,
            photo_url=profile.photo_url,
            bio=profile.bio,
            nationality=profile.nationality,
            starters=profile.starters,
            interests=profile.interests,
            socials=profile.socials,
            visible=profile.visible,
            unlock_count=profile.unlock_count,
            updated_at=profile.updated_at,
        )


class DirectoryListResponse(BaseModel):
    """Schema for the host directory listing."""

    data: list[ProjectedProfileResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ProfileDetailResponse(BaseModel):
    """Schema for a single projected profile."""

    data: ProjectedProfileResponse

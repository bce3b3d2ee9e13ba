"""Directory projection entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from domain.entities.account import Account, AccountRole


class Visibility(str, Enum):
    """How much of a target profile a viewer may see."""

    FULL = "full"
    LOCKED = "locked"
    HIDDEN = "hidden"


@dataclass
class ProjectedProfile:
    """A host profile shaped for one particular viewer.

    Locked projections only carry ``id``, ``name`` and ``first_starter``;
    every other field stays at its empty default.
    """

    id: str
    is_unlocked: bool
    name: str | None = None
    first_starter: str | None = None
    role: AccountRole | None = None
    photo_url: str | None = None
    bio: str | None = None
    nationality: str | None = None
    starters: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    socials: dict[str, str | None] = field(default_factory=dict)
    visible: bool | None = None
    unlock_count: int | None = None
    updated_at: datetime | None = None

    @classmethod
    def locked(cls, account: Account) -> "ProjectedProfile":
        """Minimal public subset of a host profile."""
        return cls(
            id=account.id,
            is_unlocked=False,
            name=account.profile.name,
            first_starter=account.profile.first_starter,
        )

    @classmethod
    def full(cls, account: Account) -> "ProjectedProfile":
        """Complete profile."""
        profile = account.profile
        return cls(
            id=account.id,
            is_unlocked=True,
            name=profile.name,
            first_starter=profile.first_starter,
            role=account.role,
            photo_url=profile.photo_url,
            bio=profile.bio,
            nationality=profile.nationality,
            starters=list(profile.starters),
            interests=list(profile.interests),
            socials=profile.socials.as_dict(),
            visible=account.visible,
            unlock_count=account.unlock_count,
            updated_at=account.updated_at,
        )

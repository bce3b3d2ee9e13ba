"""Account domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

MAX_STARTERS = 3


class AccountRole(str, Enum):
    """Closed set of account roles."""

    PARTICIPANT = "participant"
    HOST = "host"
    ADMIN = "admin"


@dataclass
class SocialHandles:
    """Optional social handles shown on a full profile."""

    instagram: str | None = None
    linkedin: str | None = None
    whatsapp: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {
            "instagram": self.instagram,
            "linkedin": self.linkedin,
            "whatsapp": self.whatsapp,
        }


@dataclass
class ProfileFields:
    """Editable profile content of an account."""

    name: str | None = None
    photo_url: str | None = None
    bio: str | None = None
    nationality: str | None = None
    starters: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    socials: SocialHandles = field(default_factory=SocialHandles)

    @property
    def first_starter(self) -> str | None:
        """First non-blank conversation starter, if any."""
        for starter in self.starters:
            if starter and starter.strip():
                return starter
        return None


def normalize_starters(starters: list[str] | None) -> list[str]:
    """Drop blank starters and keep at most ``MAX_STARTERS``."""
    if not starters:
        return []
    return [s.strip() for s in starters if s and s.strip()][:MAX_STARTERS]


@dataclass
class Account:
    """Domain entity for an account, keyed by the identity provider's subject id."""

    id: str
    role: AccountRole = AccountRole.PARTICIPANT
    email: str | None = None
    visible: bool = True
    profile: ProfileFields = field(default_factory=ProfileFields)
    unlocked_targets: frozenset[str] = field(default_factory=frozenset)
    unlock_count: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    last_unlocked_at: datetime | None = None

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def is_host(self) -> bool:
        return self.role == AccountRole.HOST

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN

    def has_unlocked(self, target_id: str) -> bool:
        return target_id in self.unlocked_targets

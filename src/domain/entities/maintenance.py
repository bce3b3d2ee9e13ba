"""Maintenance sweep entities."""

from dataclasses import dataclass, field
from enum import Enum


class SweepMode(str, Enum):
    """Which accounts a maintenance sweep targets."""

    CLEANUP_INACTIVE_PARTICIPANTS = "cleanup_inactive_participants"
    CLEANUP_EMPTY_HOSTS = "cleanup_empty_hosts"
    CLEANUP_ALL_EXCEPT_PRESERVED = "cleanup_all_except_preserved"


class FailureStage(str, Enum):
    """Which half of a two-system delete failed."""

    RECORD = "record"
    IDENTITY = "identity"


@dataclass
class PreservePolicy:
    """Accounts the full cleanup must keep.

    Substantial host profiles are always kept in addition to this list.
    """

    emails: frozenset[str] = frozenset()
    account_ids: frozenset[str] = frozenset()
    preserve_admins: bool = True

    @classmethod
    def build(
        cls,
        emails: list[str] | None = None,
        account_ids: list[str] | None = None,
        preserve_admins: bool = True,
    ) -> "PreservePolicy":
        return cls(
            emails=frozenset(e.strip().lower() for e in emails or [] if e.strip()),
            account_ids=frozenset(account_ids or []),
            preserve_admins=preserve_admins,
        )

    def merged_with(self, other: "PreservePolicy") -> "PreservePolicy":
        return PreservePolicy(
            emails=self.emails | other.emails,
            account_ids=self.account_ids | other.account_ids,
            preserve_admins=self.preserve_admins or other.preserve_admins,
        )


@dataclass
class SweepFailure:
    """One account the sweep could not fully remove."""

    account_id: str
    stage: FailureStage
    error: str


@dataclass
class SweepResult:
    """Outcome of one maintenance sweep."""

    mode: SweepMode
    scanned: int = 0
    matched: int = 0
    deleted: int = 0
    errors: int = 0
    identity_errors: int = 0
    failures: list[SweepFailure] = field(default_factory=list)


@dataclass
class DeletionReport:
    """Outcome of deleting a single account from both systems."""

    account_id: str
    record_deleted: bool
    identity_deleted: bool
    identity_error: str | None = None


@dataclass
class MaintenanceStats:
    """Counts an operator checks before running a destructive sweep."""

    total_accounts: int = 0
    participants: int = 0
    hosts: int = 0
    admins: int = 0
    inactive_participants: int = 0
    empty_hosts: int = 0
    visible_hosts: int = 0
    substantial_hosts: int = 0
    with_name: int = 0
    with_bio: int = 0
    with_photo: int = 0
    with_socials: int = 0

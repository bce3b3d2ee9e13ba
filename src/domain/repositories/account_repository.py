"""Account repository protocol."""

from collections.abc import AsyncIterator
from enum import Enum
from typing import Any, Protocol

from domain.entities.account import Account, AccountRole


class AppendResult(str, Enum):
    """Outcome of a conditional append to an account's unlock set."""

    APPENDED = "appended"
    ALREADY_PRESENT = "already_present"


class IAccountRepository(Protocol):
    """Repository interface for Account entities."""

    async def get(self, id: str) -> Account | None:
        """Get an account by subject id, including its unlock set."""
        ...

    async def query(
        self, role: AccountRole | None = None, visible: bool | None = None
    ) -> list[Account]:
        """Get all accounts matching the filter, including unlock sets."""
        ...

    def stream(
        self, role: AccountRole | None = None, visible: bool | None = None
    ) -> AsyncIterator[Account]:
        """Iterate matching accounts without materializing them.

        Unlock sets are not loaded on streamed accounts.
        """
        ...

    async def create(self, account: Account) -> Account:
        """Create a new account."""
        ...

    async def set_merge(self, id: str, fields: dict[str, Any]) -> Account | None:
        """Overwrite the given fields, leaving the rest untouched."""
        ...

    async def append_unlock(self, viewer_id: str, target_id: str) -> AppendResult:
        """Add target_id to the viewer's unlock set unless already present."""
        ...

    async def increment_unlock_count(self, target_id: str) -> bool:
        """Atomically add one to the target's unlock counter."""
        ...

    async def delete(self, id: str) -> bool:
        """Delete an account and return success status."""
        ...

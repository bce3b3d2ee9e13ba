"""Shared fixtures for unit tests."""

import asyncio
from collections.abc import AsyncIterator
from dataclasses import replace
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.account import Account, AccountRole, SocialHandles
from domain.repositories.account_repository import AppendResult
from domain.repositories.identity_repository import IdentityDeletion


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked account repository."""

    def __init__(self) -> None:
        self.accounts = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class InMemoryAccountRepository:
    """Dict-backed account store.

    Reads yield to the event loop so concurrent callers interleave, while
    ``append_unlock`` checks and adds without yielding, which makes it atomic
    the same way the database's primary key is.
    """

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.increment_calls: list[str] = []
        self.fail_increment = False
        self.fail_delete_ids: set[str] = set()

    def add(self, account: Account) -> Account:
        self.accounts[account.id] = account
        return account

    async def get(self, id: str) -> Account | None:
        await asyncio.sleep(0)
        account = self.accounts.get(id)
        return replace(account) if account else None

    async def query(
        self, role: AccountRole | None = None, visible: bool | None = None
    ) -> list[Account]:
        await asyncio.sleep(0)
        return [
            replace(a)
            for a in self.accounts.values()
            if (role is None or a.role == role) and (visible is None or a.visible == visible)
        ]

    async def stream(
        self, role: AccountRole | None = None, visible: bool | None = None
    ) -> AsyncIterator[Account]:
        for account in await self.query(role=role, visible=visible):
            # Unlock sets are not loaded on streamed accounts
            yield replace(account, unlocked_targets=frozenset())

    async def create(self, account: Account) -> Account:
        self.accounts[account.id] = account
        return replace(account)

    async def set_merge(self, id: str, fields: dict[str, Any]) -> Account | None:
        account = self.accounts.get(id)
        if not account:
            return None
        profile = account.profile
        for key, value in fields.items():
            if key in ("email", "visible", "unlock_count"):
                setattr(account, key, value)
            elif key == "role":
                account.role = AccountRole(value)
            elif key == "socials":
                profile.socials = SocialHandles(**value)
            else:
                setattr(profile, key, value)
        account.updated_at = datetime.utcnow()
        return replace(account)

    async def append_unlock(self, viewer_id: str, target_id: str) -> AppendResult:
        viewer = self.accounts[viewer_id]
        if target_id in viewer.unlocked_targets:
            return AppendResult.ALREADY_PRESENT
        viewer.unlocked_targets = viewer.unlocked_targets | {target_id}
        viewer.last_unlocked_at = datetime.utcnow()
        return AppendResult.APPENDED

    async def increment_unlock_count(self, target_id: str) -> bool:
        await asyncio.sleep(0)
        if self.fail_increment:
            raise ConnectionError("store went away")
        self.increment_calls.append(target_id)
        target = self.accounts.get(target_id)
        if not target:
            return False
        target.unlock_count += 1
        return True

    async def delete(self, id: str) -> bool:
        if id in self.fail_delete_ids:
            raise ConnectionError(f"could not delete {id}")
        removed = self.accounts.pop(id, None)
        for account in self.accounts.values():
            account.unlocked_targets = account.unlocked_targets - {id}
        return removed is not None


class InMemoryUnitOfWork:
    """Unit of Work over a shared in-memory repository."""

    def __init__(self, accounts: InMemoryAccountRepository) -> None:
        self.accounts = accounts
        self.committed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        pass

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class RecordingIdentityRepository:
    """Identity provider stand-in that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.deleted: list[str] = []
        self.missing: set[str] = set()
        self.failing: dict[str, Exception] = {}

    async def delete_identity(self, subject_id: str) -> IdentityDeletion:
        if subject_id in self.failing:
            raise self.failing[subject_id]
        if subject_id in self.missing:
            return IdentityDeletion.NOT_FOUND
        self.deleted.append(subject_id)
        return IdentityDeletion.DELETED


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def store() -> InMemoryAccountRepository:
    """Create an empty in-memory account store."""
    return InMemoryAccountRepository()


@pytest.fixture
def memory_uow_factory(store: InMemoryAccountRepository) -> Any:
    """UoW factory sharing one in-memory store across units of work."""
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def identities() -> RecordingIdentityRepository:
    """Create a recording identity repository."""
    return RecordingIdentityRepository()


@pytest.fixture
def viewer_id() -> str:
    """A participant subject id."""
    return "participant-1"


@pytest.fixture
def host_id() -> str:
    """A host subject id (distinct from viewer_id)."""
    return "host-1"

"""Unit tests for DirectoryService."""

from collections.abc import AsyncIterator

import pytest

from core.exceptions import AccountNotFoundError
from domain.entities.account import Account, AccountRole, ProfileFields, SocialHandles
from domain.entities.directory import ProjectedProfile
from domain.services.directory_service import DirectoryService
from tests.unit.conftest import FakeUnitOfWork, InMemoryAccountRepository


def _host(host_id: str, visible: bool = True, **profile) -> Account:
    return Account(
        id=host_id,
        role=AccountRole.HOST,
        visible=visible,
        profile=ProfileFields(**profile),
    )


async def _collect(items: AsyncIterator[ProjectedProfile]) -> dict[str, ProjectedProfile]:
    return {p.id: p async for p in items}


@pytest.fixture
def service(memory_uow_factory) -> DirectoryService:
    return DirectoryService(memory_uow_factory)


@pytest.fixture
def directory(store: InMemoryAccountRepository) -> InMemoryAccountRepository:
    store.add(
        _host(
            "h1",
            name="Ana",
            bio="Porto local",
            starters=["", "Ask me about surfing", "Ask me about wine"],
            socials=SocialHandles(instagram="@ana"),
        )
    )
    store.add(_host("h2", name="Bruno", starters=["Ask me about trams"]))
    store.add(_host("h3", visible=False, name="Carla"))
    store.add(Account(id="p1", unlocked_targets=frozenset({"h1", "h3"})))
    store.add(Account(id="p2"))
    return store


# --- list_targets ---


class TestListTargets:
    @pytest.mark.asyncio
    async def test_participant_sees_locked_and_unlocked_hosts(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        result = await _collect(service.list_targets("p1"))

        assert set(result) == {"h1", "h2"}
        assert result["h1"].is_unlocked is True
        assert result["h1"].bio == "Porto local"
        assert result["h1"].socials["instagram"] == "@ana"
        assert result["h2"].is_unlocked is False

    @pytest.mark.asyncio
    async def test_locked_projection_exposes_only_public_subset(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        result = await _collect(service.list_targets("p2"))

        locked = result["h1"]
        assert locked.name == "Ana"
        assert locked.first_starter == "Ask me about surfing"
        assert locked.bio is None
        assert locked.photo_url is None
        assert locked.starters == []
        assert locked.socials == {}
        assert locked.unlock_count is None

    @pytest.mark.asyncio
    async def test_hidden_host_omitted_even_when_unlocked(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        result = await _collect(service.list_targets("p1"))

        assert "h3" not in result

    @pytest.mark.asyncio
    async def test_host_sees_every_host_in_full(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        result = await _collect(service.list_targets("h2"))

        assert set(result) == {"h1", "h2", "h3"}
        assert all(p.is_unlocked for p in result.values())

    @pytest.mark.asyncio
    async def test_participants_are_never_listed(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        result = await _collect(service.list_targets("h1"))

        assert "p1" not in result
        assert "p2" not in result

    @pytest.mark.asyncio
    async def test_unknown_viewer_browses_as_participant(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        result = await _collect(service.list_targets("ghost"))

        assert set(result) == {"h1", "h2"}
        assert not any(p.is_unlocked for p in result.values())

    @pytest.mark.asyncio
    async def test_malformed_host_is_skipped(self, uow: FakeUnitOfWork):
        good = _host("h1", name="Ana")
        # A record without profile content cannot be shaped
        broken = _host("h2")
        broken.profile = None  # type: ignore[assignment]

        async def _stream(**kwargs):
            yield broken
            yield good

        uow.accounts.get.return_value = Account(id="p1")
        uow.accounts.stream = _stream
        service = DirectoryService(lambda: uow)

        result = await _collect(service.list_targets("p1"))

        assert list(result) == ["h1"]

    @pytest.mark.asyncio
    async def test_store_failure_mid_stream_ends_listing(self, uow: FakeUnitOfWork):
        async def _stream(**kwargs):
            yield _host("h1", name="Ana")
            raise ConnectionError("connection reset")
            yield _host("h2", name="Bruno")

        uow.accounts.get.return_value = Account(id="p1")
        uow.accounts.stream = _stream
        service = DirectoryService(lambda: uow)

        result = await _collect(service.list_targets("p1"))

        assert list(result) == ["h1"]

    @pytest.mark.asyncio
    async def test_store_failure_before_first_host_gives_empty_listing(
        self, uow: FakeUnitOfWork
    ):
        async def _stream(**kwargs):
            raise ConnectionError("connection reset")
            yield  # pragma: no cover

        uow.accounts.get.return_value = Account(id="p1")
        uow.accounts.stream = _stream
        service = DirectoryService(lambda: uow)

        result = await _collect(service.list_targets("p1"))

        assert result == {}


# --- get_profile ---


class TestGetProfile:
    @pytest.mark.asyncio
    async def test_unlocked_profile_in_full(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        profile = await service.get_profile("p1", "h1")

        assert profile.is_unlocked is True
        assert profile.starters == ["", "Ask me about surfing", "Ask me about wine"]

    @pytest.mark.asyncio
    async def test_locked_profile(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        profile = await service.get_profile("p2", "h2")

        assert profile.is_unlocked is False
        assert profile.first_starter == "Ask me about trams"

    @pytest.mark.asyncio
    async def test_hidden_profile_reported_as_not_found(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        with pytest.raises(AccountNotFoundError):
            await service.get_profile("p1", "h3")

    @pytest.mark.asyncio
    async def test_participant_profile_not_found_for_others(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        with pytest.raises(AccountNotFoundError):
            await service.get_profile("h1", "p1")

    @pytest.mark.asyncio
    async def test_owner_sees_own_hidden_profile(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        profile = await service.get_profile("h3", "h3")

        assert profile.is_unlocked is True
        assert profile.visible is False

    @pytest.mark.asyncio
    async def test_missing_target(
        self, service: DirectoryService, directory: InMemoryAccountRepository
    ):
        with pytest.raises(AccountNotFoundError):
            await service.get_profile("p1", "nobody")

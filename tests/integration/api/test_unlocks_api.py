"""Integration tests for Unlocks API."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from domain.entities.account import AccountRole
from infrastructure.database.models import AccountModel


@pytest.fixture
async def host(seed_account) -> str:
    await seed_account("h1", role=AccountRole.HOST, name="Ana")
    await seed_account("p1")
    return "h1"


async def _unlock_count(session_factory, account_id: str) -> int:
    async with session_factory() as session:
        result = await session.execute(
            select(AccountModel.unlock_count).where(AccountModel.id == account_id)
        )
        return result.scalar_one()


class TestUnlock:
    @pytest.mark.asyncio
    async def test_first_unlock_then_idempotent_repeat(
        self, api_client: AsyncClient, host: str, headers_for, session_factory
    ):
        first = await api_client.post(
            "/api/v1/unlocks", json={"target_id": host}, headers=headers_for("p1")
        )
        second = await api_client.post(
            "/api/v1/unlocks", json={"target_id": host}, headers=headers_for("p1")
        )

        assert first.status_code == 201
        assert first.json()["status"] == "unlocked_now"
        assert second.status_code == 200
        assert second.json()["status"] == "already_unlocked"
        assert await _unlock_count(session_factory, host) == 1

    @pytest.mark.asyncio
    async def test_unlock_shows_up_in_directory(
        self, api_client: AsyncClient, host: str, headers_for
    ):
        await api_client.post(
            "/api/v1/unlocks", json={"target_id": host}, headers=headers_for("p1")
        )

        state = await api_client.get(f"/api/v1/unlocks/{host}", headers=headers_for("p1"))
        listing = await api_client.get("/api/v1/directory", headers=headers_for("p1"))

        assert state.json()["is_unlocked"] is True
        assert listing.json()["data"][0]["is_unlocked"] is True

    @pytest.mark.asyncio
    async def test_self_unlock_rejected(self, api_client: AsyncClient, host: str, headers_for):
        response = await api_client.post(
            "/api/v1/unlocks", json={"target_id": host}, headers=headers_for(host)
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_VIEWER"

    @pytest.mark.asyncio
    async def test_participant_target_rejected(
        self, api_client: AsyncClient, host: str, headers_for, seed_account
    ):
        await seed_account("p2")

        response = await api_client.post(
            "/api/v1/unlocks", json={"target_id": "p2"}, headers=headers_for("p1")
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_TARGET"

    @pytest.mark.asyncio
    async def test_unknown_target(self, api_client: AsyncClient, host: str, headers_for):
        response = await api_client.post(
            "/api/v1/unlocks", json={"target_id": "nobody"}, headers=headers_for("p1")
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_unlock_on_behalf_of_others(
        self, api_client: AsyncClient, host: str, headers_for, seed_account
    ):
        await seed_account("p2")

        response = await api_client.post(
            "/api/v1/unlocks",
            json={"target_id": host, "viewer_id": "p2"},
            headers=headers_for("p1"),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_first_scan_creates_viewer_account(
        self, api_client: AsyncClient, host: str, headers_for, session_factory
    ):
        response = await api_client.post(
            "/api/v1/unlocks",
            json={"target_id": host},
            headers=headers_for("anon-scanner"),
        )

        assert response.status_code == 201
        assert await _unlock_count(session_factory, host) == 1

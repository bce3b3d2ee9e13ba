"""Identity provider admin client (Supabase Auth admin API)."""

from typing import Optional

import httpx
import structlog

from core.config import settings
from core.exceptions import IdentityDeletionError
from domain.repositories.identity_repository import IdentityDeletion

logger = structlog.get_logger()


class SupabaseIdentityRepository:
    """Deletes identities through ``/auth/v1/admin/users/{id}``.

    Requires the service role key. A 404 from the provider means the
    identity is already gone and is reported as ``NOT_FOUND``.
    """

    def __init__(
        self,
        base_url: str = settings.supabase_url,
        service_role_key: str = settings.supabase_service_role_key,
        timeout: float = settings.identity_timeout_seconds,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._service_role_key = service_role_key
        self._timeout = timeout
        self._transport = transport

    async def delete_identity(self, subject_id: str) -> IdentityDeletion:
        """Delete an identity from the provider."""
        url = f"{self._base_url}/auth/v1/admin/users/{subject_id}"
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.delete(url, headers=headers)
        except httpx.HTTPError as exc:
            raise IdentityDeletionError(subject_id, f"request failed: {exc}") from exc

        if response.status_code == 404:
            return IdentityDeletion.NOT_FOUND
        if response.is_success:
            logger.info("identity_deleted", account_id=subject_id)
            return IdentityDeletion.DELETED

        raise IdentityDeletionError(
            subject_id, f"provider returned HTTP {response.status_code}"
        )


class NullIdentityRepository:
    """Used when no identity provider is configured; nothing to delete."""

    async def delete_identity(self, subject_id: str) -> IdentityDeletion:
        return IdentityDeletion.NOT_FOUND

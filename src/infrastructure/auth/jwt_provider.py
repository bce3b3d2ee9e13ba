"""JWT authentication provider.

Production tokens are issued by Supabase Auth and signed with ES256; their
public keys come from the project's JWKS endpoint. Tests and local runs use
HS256 tokens signed with ``jwt_secret_key``.

Relevant claims::

    sub           subject id, used as the account id
    email         absent for anonymous sign-ins
    is_anonymous  true for participants who have not registered
    user_metadata display name, if the user set one
"""

from datetime import datetime, timedelta
from typing import Any, Optional

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()

# kid -> JWK, fetched lazily and dropped when an unknown kid shows up
_jwks_cache: dict[str, Any] | None = None

_DISPLAY_NAME_KEYS = ("display_name", "name", "full_name")


async def _get_jwks_keys() -> dict[str, Any]:
    """Fetch the signing keys once and serve them from memory afterwards."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = settings.supabase_jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=settings.identity_timeout_seconds)
            response.raise_for_status()
            keys = response.json().get("keys", [])
    except Exception:
        logger.exception("jwks_fetch_failed", jwks_url=jwks_url)
        return {}

    _jwks_cache = {key["kid"]: key for key in keys if key.get("kid")}
    logger.info("jwks_fetched", key_count=len(_jwks_cache))
    return _jwks_cache


def _display_name(payload: dict[str, Any]) -> Optional[str]:
    metadata = payload.get("user_metadata") or {}
    for key in _DISPLAY_NAME_KEYS:
        if metadata.get(key):
            return metadata[key]
    return payload.get("name")


class JWTAuthProvider:
    """Validates Supabase (ES256) and local (HS256) tokens."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Verify a token and return its caller, or None if it is unusable.

        The header's ``alg`` picks the path: ES256 goes through JWKS,
        anything else is checked against the shared secret. Tokens without
        a subject are rejected; tokens without an email are not.
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg", self._algorithm) == "ES256":
                payload = await self._validate_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if not payload or not payload.get("sub"):
            return None

        return TokenUser(
            id=str(payload["sub"]),
            email=payload.get("email") or None,
            display_name=_display_name(payload),
            role=payload.get("role"),
            is_anonymous=bool(payload.get("is_anonymous", False)),
        )

    async def _validate_es256(self, token: str, header: dict) -> Optional[dict]:
        """Verify an ES256 token, refetching JWKS once on an unknown kid."""
        global _jwks_cache

        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            # Keys may have rotated since the cache was filled
            _jwks_cache = None
            key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            logger.warning("jwks_key_not_found", kid=kid)
            return None

        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """Sign an HS256 token shaped like a Supabase one (tests only)."""
        payload: dict[str, Any] = {
            "sub": user.id,
            "aud": "authenticated",
            "role": "authenticated",
            "is_anonymous": user.is_anonymous,
            "exp": datetime.utcnow() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {"display_name": user.display_name},
        }
        if user.email:
            payload["email"] = user.email

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

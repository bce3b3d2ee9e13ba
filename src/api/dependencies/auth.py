"""Authentication dependencies for FastAPI."""

import secrets
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies.services import get_account_service
from core.config import settings
from core.exceptions import (
    AccountNotFoundError,
    AuthenticationError,
    AuthorizationError,
    ErrorCode,
)
from domain.entities.account import Account
from domain.services.account_service import AccountService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: JWTAuthProvider | None = None


def get_auth_provider() -> JWTAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> TokenUser:
    """
    Dependency to get the current authenticated user.

    Raises:
        AuthenticationError: If no token provided or token is invalid
    """
    if not credentials:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    token = credentials.credentials
    user = await auth_provider.validate_token(token)

    if not user:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    return user


async def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> TokenUser | None:
    """
    Dependency to get the current user if authenticated.

    Returns:
        TokenUser if authenticated, None otherwise (no exception raised)
    """
    if not credentials:
        return None

    return await auth_provider.validate_token(credentials.credentials)


# Type alias for convenience in route handlers
CurrentUser = Annotated[TokenUser, Depends(get_current_user)]
OptionalUser = Annotated[TokenUser | None, Depends(get_optional_user)]


async def get_current_account(
    user: CurrentUser,
    service: AccountService = Depends(get_account_service),
) -> Account:
    """Resolve the caller's account, creating it on first login."""
    return await service.ensure_account(user.id, user.email)


CurrentAccount = Annotated[Account, Depends(get_current_account)]


@dataclass
class AdminActor:
    """Who is performing a privileged call."""

    account_id: str | None
    via_admin_key: bool = False


async def require_admin(
    user: OptionalUser,
    x_admin_key: Annotated[str | None, Header()] = None,
    service: AccountService = Depends(get_account_service),
) -> AdminActor:
    """
    Dependency for privileged endpoints.

    Accepts either the configured admin key in ``X-Admin-Key`` or a bearer
    token whose account has the admin role.

    Raises:
        AuthenticationError: If neither credential is present
        AuthorizationError: If the caller is authenticated but not an admin
    """
    expected_key = settings.admin_api_key
    if expected_key and x_admin_key and secrets.compare_digest(x_admin_key, expected_key):
        return AdminActor(account_id=None, via_admin_key=True)

    if user is None:
        raise AuthenticationError(message="Admin credentials required")

    try:
        account = await service.get(user.id)
    except AccountNotFoundError:
        account = None

    if account is None or not account.is_admin:
        raise AuthorizationError(
            message="Admin access required",
            error_code=ErrorCode.ADMIN_REQUIRED,
        )
    return AdminActor(account_id=account.id)


Admin = Annotated[AdminActor, Depends(require_admin)]


def resolve_viewer_id(caller: Account, requested_viewer_id: str | None) -> str:
    """Pick the viewer for a request; acting for someone else needs admin."""
    if not requested_viewer_id or requested_viewer_id == caller.id:
        return caller.id
    if not caller.is_admin:
        raise AuthorizationError("You can only act as yourself")
    return requested_viewer_id

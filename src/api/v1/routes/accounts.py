"""Account API routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentAccount, CurrentUser
from api.dependencies.services import get_account_service
from api.v1.schemas.account import AccountDetailResponse, AccountResponse, AccountUpdate
from core.rate_limit import limiter
from domain.services.account_service import AccountService

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get(
    "/me",
    response_model=AccountDetailResponse,
    summary="Get my account",
    responses={
        200: {"description": "The caller's account (created on first call)"},
        401: {"description": "Not authenticated"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_my_account(
    request: Request,
    account: CurrentAccount,
) -> AccountDetailResponse:
    """Return the caller's account, creating a participant record on first login."""
    return AccountDetailResponse(data=AccountResponse.from_entity(account))


@router.post(
    "/me/host",
    response_model=AccountDetailResponse,
    summary="Register as a host",
    responses={
        200: {"description": "The caller is now a host"},
        400: {"description": "Role change not allowed"},
        401: {"description": "Not authenticated"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def register_host(
    request: Request,
    user: CurrentUser,
    service: AccountService = Depends(get_account_service),
) -> AccountDetailResponse:
    """Register the caller as a host, or promote a fresh participant account."""
    account = await service.register_host(user.id, user.email)
    return AccountDetailResponse(data=AccountResponse.from_entity(account))


@router.patch(
    "/{account_id}",
    response_model=AccountDetailResponse,
    summary="Update a profile",
    responses={
        200: {"description": "Profile updated"},
        400: {"description": "Invalid profile data"},
        403: {"description": "Not the owner and not an admin"},
        404: {"description": "Account not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_account(
    request: Request,
    account_id: str,
    body: AccountUpdate,
    caller: CurrentAccount,
    service: AccountService = Depends(get_account_service),
) -> AccountDetailResponse:
    """Update profile fields. Owners edit their own profile; admins edit any."""
    account = await service.update_profile(caller.id, account_id, body.changes())
    return AccountDetailResponse(data=AccountResponse.from_entity(account))

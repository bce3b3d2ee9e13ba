"""Unlock API routes."""

from fastapi import APIRouter, Depends, Request, Response, status

from api.dependencies.auth import CurrentAccount, resolve_viewer_id
from api.dependencies.services import get_unlock_service
from api.v1.schemas.unlock import UnlockRequest, UnlockResponse, UnlockStateResponse
from core.rate_limit import limiter
from domain.entities.unlock import UnlockStatus
from domain.services.unlock_service import UnlockService

router = APIRouter(prefix="/unlocks", tags=["unlocks"])


@router.post(
    "",
    response_model=UnlockResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Unlock a host profile",
    responses={
        200: {"description": "Profile was already unlocked"},
        201: {"description": "Profile unlocked now"},
        400: {"description": "Self-unlock, or target is not a visible host"},
        403: {"description": "viewer_id given for someone else without admin role"},
        404: {"description": "Target or viewer not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def unlock_profile(
    request: Request,
    response: Response,
    body: UnlockRequest,
    caller: CurrentAccount,
    service: UnlockService = Depends(get_unlock_service),
) -> UnlockResponse:
    """
    Unlock a host profile for the viewer.

    Idempotent: repeating the call for the same pair returns
    ``already_unlocked`` and changes nothing.
    """
    viewer_id = resolve_viewer_id(caller, body.viewer_id)
    result = await service.unlock(viewer_id, body.target_id)
    if result == UnlockStatus.ALREADY_UNLOCKED:
        response.status_code = status.HTTP_200_OK
    return UnlockResponse(viewer_id=viewer_id, target_id=body.target_id, status=result.value)


@router.get(
    "/{target_id}",
    response_model=UnlockStateResponse,
    summary="Check unlock state",
    responses={200: {"description": "Whether the caller has unlocked the host"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_unlock_state(
    request: Request,
    target_id: str,
    caller: CurrentAccount,
    service: UnlockService = Depends(get_unlock_service),
) -> UnlockStateResponse:
    """Check whether the caller has unlocked a host."""
    unlocked = await service.is_unlocked(caller.id, target_id)
    return UnlockStateResponse(target_id=target_id, is_unlocked=unlocked)

"""Directory API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentAccount, resolve_viewer_id
from api.dependencies.services import get_directory_service
from api.v1.schemas.directory import (
    DirectoryListResponse,
    ProfileDetailResponse,
    ProjectedProfileResponse,
)
from core.rate_limit import limiter
from domain.services.directory_service import DirectoryService

router = APIRouter(prefix="/directory", tags=["directory"])


@router.get(
    "",
    response_model=DirectoryListResponse,
    summary="List discoverable hosts",
    responses={
        200: {"description": "Hosts shaped for the viewer"},
        403: {"description": "viewer_id given for someone else without admin role"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_directory(
    request: Request,
    caller: CurrentAccount,
    viewer_id: str | None = Query(None, max_length=128),
    service: DirectoryService = Depends(get_directory_service),
) -> DirectoryListResponse:
    """
    List every host the viewer may discover.

    Unlocked hosts (and every host, for host viewers) come back in full;
    the rest only expose name and first conversation starter. Order follows
    the store and is not guaranteed. The service streams hosts, but the page
    is collected here because the envelope carries totals in `meta`.
    """
    viewer = resolve_viewer_id(caller, viewer_id)
    data = [
        ProjectedProfileResponse.from_entity(profile)
        async for profile in service.list_targets(viewer)
    ]
    unlocked = sum(1 for p in data if p.is_unlocked)
    return DirectoryListResponse(
        data=data,
        meta={"total": len(data), "unlocked": unlocked, "locked": len(data) - unlocked},
    )


@router.get(
    "/{target_id}",
    response_model=ProfileDetailResponse,
    summary="Get one profile",
    responses={
        200: {"description": "Profile shaped for the caller"},
        404: {"description": "Profile not found or hidden"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    target_id: str,
    caller: CurrentAccount,
    service: DirectoryService = Depends(get_directory_service),
) -> ProfileDetailResponse:
    """Get one profile as the caller is allowed to see it."""
    profile = await service.get_profile(caller.id, target_id)
    return ProfileDetailResponse(data=ProjectedProfileResponse.from_entity(profile))

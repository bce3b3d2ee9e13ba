"""Maintenance API routes (privileged)."""

import structlog
from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import Admin
from api.dependencies.services import get_maintenance_service
from api.v1.schemas.maintenance import (
    DeletionResponse,
    StatsResponse,
    SweepRequest,
    SweepResponse,
)
from core.rate_limit import limiter
from domain.entities.maintenance import PreservePolicy
from domain.services.maintenance_service import MaintenanceService

logger = structlog.get_logger()

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Data-quality statistics",
    responses={
        200: {"description": "Current counts per role and data-quality class"},
        401: {"description": "No admin credentials"},
        403: {"description": "Caller is not an admin"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_stats(
    request: Request,
    admin: Admin,
    service: MaintenanceService = Depends(get_maintenance_service),
) -> StatsResponse:
    """Counts to check before running a destructive sweep."""
    return StatsResponse.from_entity(await service.stats())


@router.post(
    "/sweep",
    response_model=SweepResponse,
    summary="Run a cleanup sweep",
    responses={
        200: {"description": "Sweep finished (check errors for partial failures)"},
        401: {"description": "No admin credentials"},
        403: {"description": "Caller is not an admin"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def run_sweep(
    request: Request,
    body: SweepRequest,
    admin: Admin,
    service: MaintenanceService = Depends(get_maintenance_service),
) -> SweepResponse:
    """
    Delete empty or inactive accounts from the store and the identity provider.

    Per-account failures are reported in ``failures`` and never abort the
    sweep. Re-running is safe.
    """
    preserve = PreservePolicy.build(
        emails=body.preserve_emails,
        account_ids=body.preserve_account_ids
        + ([admin.account_id] if admin.account_id else []),
    )
    logger.info(
        "sweep_requested",
        mode=body.mode.value,
        admin_id=admin.account_id,
        via_admin_key=admin.via_admin_key,
    )
    result = await service.sweep(body.mode, preserve)
    return SweepResponse.from_entity(result)


@router.delete(
    "/accounts/{account_id}",
    response_model=DeletionResponse,
    summary="Delete one account",
    responses={
        200: {"description": "Deletion report for both systems"},
        401: {"description": "No admin credentials"},
        403: {"description": "Caller is not an admin"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_account(
    request: Request,
    account_id: str,
    admin: Admin,
    service: MaintenanceService = Depends(get_maintenance_service),
) -> DeletionResponse:
    """Delete an account record and its identity, reporting each half."""
    logger.info("account_delete_requested", account_id=account_id, admin_id=admin.account_id)
    return DeletionResponse.from_entity(await service.delete_account(account_id))

"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.accounts import router as accounts_router
from api.v1.routes.directory import router as directory_router
from api.v1.routes.maintenance import router as maintenance_router
from api.v1.routes.unlocks import router as unlocks_router

router = APIRouter()
router.include_router(accounts_router)
router.include_router(directory_router)
router.include_router(unlocks_router)
router.include_router(maintenance_router)

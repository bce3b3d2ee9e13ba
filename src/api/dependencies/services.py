"""Service factories shared by the v1 routes and the auth dependencies."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.entities.maintenance import PreservePolicy
from domain.repositories.identity_repository import IIdentityRepository
from domain.services.account_service import AccountService
from domain.services.directory_service import DirectoryService
from domain.services.maintenance_service import MaintenanceService
from domain.services.unlock_service import UnlockService
from infrastructure.auth.supabase_admin import (
    NullIdentityRepository,
    SupabaseIdentityRepository,
)
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_identity_repository() -> IIdentityRepository:
    """Get the identity provider admin client."""
    if settings.supabase_url and settings.supabase_service_role_key:
        return SupabaseIdentityRepository()
    return NullIdentityRepository()


@lru_cache
def get_account_service() -> AccountService:
    """Get Account service instance."""
    return AccountService(get_uow_factory())


@lru_cache
def get_unlock_service() -> UnlockService:
    """Get Unlock service instance."""
    return UnlockService(get_uow_factory())


@lru_cache
def get_directory_service() -> DirectoryService:
    """Get Directory service instance."""
    return DirectoryService(get_uow_factory())


@lru_cache
def get_maintenance_service() -> MaintenanceService:
    """Get Maintenance service instance."""
    return MaintenanceService(
        get_uow_factory(),
        identity_repository=get_identity_repository(),
        preserve_policy=PreservePolicy.build(emails=settings.preserve_emails_list),
    )

"""Unlock service: the one-way viewer -> host unlock transition."""

from collections.abc import Callable

import structlog

from core.exceptions import AccountNotFoundError, InvalidTargetError, InvalidViewerError
from domain.entities.account import AccountRole
from domain.entities.unlock import UnlockStatus
from domain.repositories.account_repository import AppendResult
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class UnlockService:
    """Records unlocks and keeps the host's unlock counter in step.

    The viewer's unlock set is the source of truth. The conditional append on
    that set decides which caller performs the counter increment, so repeated
    or concurrent requests for the same pair increment at most once.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def unlock(self, viewer_id: str, target_id: str) -> UnlockStatus:
        """Unlock a host profile for a viewer.

        Raises:
            InvalidViewerError: If the viewer tries to unlock themselves
            AccountNotFoundError: If the target or the viewer does not exist
            InvalidTargetError: If the target is not a visible host
        """
        if viewer_id == target_id:
            raise InvalidViewerError(viewer_id)

        async with self._uow_factory() as uow:
            target = await uow.accounts.get(target_id)
            if not target:
                raise AccountNotFoundError(target_id)
            if target.role != AccountRole.HOST:
                raise InvalidTargetError(target_id, "not a host")
            if not target.visible:
                raise InvalidTargetError(target_id, "profile is hidden")

            viewer = await uow.accounts.get(viewer_id)
            if not viewer:
                raise AccountNotFoundError(viewer_id)

            if viewer.has_unlocked(target_id):
                return UnlockStatus.ALREADY_UNLOCKED

            result = await uow.accounts.append_unlock(viewer_id, target_id)
            if result == AppendResult.ALREADY_PRESENT:
                # A concurrent request for the same pair got there first
                logger.info(
                    "unlock_race_lost",
                    viewer_id=viewer_id,
                    target_id=target_id,
                )
                return UnlockStatus.ALREADY_UNLOCKED

            await uow.commit()

        logger.info("unlock_recorded", viewer_id=viewer_id, target_id=target_id)
        await self._increment_counter(viewer_id, target_id)
        return UnlockStatus.UNLOCKED_NOW

    async def is_unlocked(self, viewer_id: str, target_id: str) -> bool:
        """Check whether the viewer has recorded an unlock for the target."""
        async with self._uow_factory() as uow:
            viewer = await uow.accounts.get(viewer_id)
            return bool(viewer and viewer.has_unlocked(target_id))

    async def _increment_counter(self, viewer_id: str, target_id: str) -> None:
        """Bump the host's counter. Failures leave tolerated drift, not errors."""
        try:
            async with self._uow_factory() as uow:
                updated = await uow.accounts.increment_unlock_count(target_id)
                await uow.commit()
        except Exception:
            logger.exception(
                "unlock_counter_increment_failed",
                viewer_id=viewer_id,
                target_id=target_id,
            )
            return

        if not updated:
            logger.warning(
                "unlock_counter_target_missing",
                viewer_id=viewer_id,
                target_id=target_id,
            )

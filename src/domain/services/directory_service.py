"""Directory service: host listings shaped per viewer."""

from collections.abc import AsyncIterator, Callable

import structlog

from core.exceptions import AccountNotFoundError
from domain.entities.account import Account, AccountRole
from domain.entities.directory import ProjectedProfile, Visibility
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.visibility_policy import decide

logger = structlog.get_logger()


class DirectoryService:
    """Service layer for host discovery."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_targets(self, viewer_id: str) -> AsyncIterator[ProjectedProfile]:
        """Yield every host the viewer may discover, shaped for that viewer.

        Hosts are streamed from the store in store order. A host that cannot
        be shaped is skipped rather than failing the whole listing, and a
        store failure mid-stream ends the listing with the hosts already
        yielded.
        """
        async with self._uow_factory() as uow:
            viewer = await uow.accounts.get(viewer_id)
            viewer_role, unlocked = self._viewer_context(viewer)

            yielded = 0
            try:
                async for host in uow.accounts.stream(role=AccountRole.HOST):
                    try:
                        projected = self._project(viewer_role, unlocked, host)
                    except Exception:
                        logger.warning(
                            "directory_entry_skipped",
                            viewer_id=viewer_id,
                            target_id=getattr(host, "id", None),
                            exc_info=True,
                        )
                        continue
                    if projected is not None:
                        yielded += 1
                        yield projected
            except Exception:
                logger.warning(
                    "directory_stream_interrupted",
                    viewer_id=viewer_id,
                    yielded=yielded,
                    exc_info=True,
                )

    async def get_profile(self, viewer_id: str, target_id: str) -> ProjectedProfile:
        """Get a single profile as the viewer is allowed to see it.

        The owner always gets their own record in full. Hidden profiles are
        reported as not found.
        """
        async with self._uow_factory() as uow:
            target = await uow.accounts.get(target_id)
            if not target:
                raise AccountNotFoundError(target_id)

            if viewer_id == target_id:
                return ProjectedProfile.full(target)

            viewer = await uow.accounts.get(viewer_id)
            viewer_role, unlocked = self._viewer_context(viewer)

            projected = self._project(viewer_role, unlocked, target)
            if projected is None:
                raise AccountNotFoundError(target_id)
            return projected

    @staticmethod
    def _viewer_context(viewer: Account | None) -> tuple[AccountRole, frozenset[str]]:
        # Unknown viewers browse as participants with nothing unlocked
        if viewer is None:
            return AccountRole.PARTICIPANT, frozenset()
        return viewer.role, viewer.unlocked_targets

    @staticmethod
    def _project(
        viewer_role: AccountRole, unlocked: frozenset[str], target: Account
    ) -> ProjectedProfile | None:
        visibility = decide(viewer_role, unlocked, target.id, target.role, target.visible)
        if visibility == Visibility.FULL:
            return ProjectedProfile.full(target)
        if visibility == Visibility.LOCKED:
            return ProjectedProfile.locked(target)
        return None

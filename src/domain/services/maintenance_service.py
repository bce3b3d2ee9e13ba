"""Maintenance service: data-quality sweeps and account removal."""

from collections.abc import Callable

import structlog

from domain.entities.account import Account, AccountRole
from domain.entities.maintenance import (
    DeletionReport,
    FailureStage,
    MaintenanceStats,
    PreservePolicy,
    SweepFailure,
    SweepMode,
    SweepResult,
)
from domain.repositories.identity_repository import IdentityDeletion, IIdentityRepository
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.data_quality import (
    has_substantial_profile,
    is_empty_host,
    is_inactive_participant,
    profile_signals,
)

logger = structlog.get_logger()

_CANDIDATE_ROLES: dict[SweepMode, AccountRole | None] = {
    SweepMode.CLEANUP_INACTIVE_PARTICIPANTS: AccountRole.PARTICIPANT,
    SweepMode.CLEANUP_EMPTY_HOSTS: AccountRole.HOST,
    SweepMode.CLEANUP_ALL_EXCEPT_PRESERVED: None,
}


class MaintenanceService:
    """Removes empty and inactive accounts from the store and the identity provider.

    Every account is deleted in two independent steps: the record first, then
    the identity. A failed identity deletion is reported but never undoes the
    record deletion, and no single account failure stops a sweep.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        identity_repository: IIdentityRepository,
        preserve_policy: PreservePolicy | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._identities = identity_repository
        self._preserve = preserve_policy or PreservePolicy()

    async def sweep(
        self, mode: SweepMode, preserve: PreservePolicy | None = None
    ) -> SweepResult:
        """Delete every account the mode's classifier matches.

        Re-running a sweep is safe: already removed accounts are simply no
        longer candidates. Each candidate is classified again right before it
        is deleted, and one that gained unlocks or content since the scan is
        kept and not counted as deleted.
        """
        policy = self._preserve if preserve is None else self._preserve.merged_with(preserve)
        result = SweepResult(mode=mode)

        async with self._uow_factory() as uow:
            candidates = await uow.accounts.query(role=_CANDIDATE_ROLES[mode])

        result.scanned = len(candidates)
        matched = [a for a in candidates if self._matches(mode, a, policy)]
        result.matched = len(matched)

        logger.info(
            "sweep_started",
            mode=mode.value,
            scanned=result.scanned,
            matched=result.matched,
        )

        for account in matched:
            try:
                removed = await self._delete_if_still_matching(mode, account.id, policy)
            except Exception as exc:
                logger.exception("sweep_record_delete_failed", account_id=account.id)
                result.errors += 1
                result.failures.append(
                    SweepFailure(account_id=account.id, stage=FailureStage.RECORD, error=str(exc))
                )
                continue

            if removed is None:
                continue
            if removed:
                result.deleted += 1

            identity_error = await self._delete_identity(account.id)
            if identity_error:
                result.errors += 1
                result.identity_errors += 1
                result.failures.append(
                    SweepFailure(
                        account_id=account.id,
                        stage=FailureStage.IDENTITY,
                        error=identity_error,
                    )
                )

        logger.info(
            "sweep_completed",
            mode=mode.value,
            scanned=result.scanned,
            matched=result.matched,
            deleted=result.deleted,
            errors=result.errors,
            identity_errors=result.identity_errors,
        )
        return result

    async def delete_account(self, account_id: str) -> DeletionReport:
        """Delete one account from both systems.

        The identity is removed even when the record is already gone, so an
        operator can use this to reconcile drift left by earlier failures.
        """
        record_deleted = await self._delete_record(account_id)
        identity_error = await self._delete_identity(account_id)
        report = DeletionReport(
            account_id=account_id,
            record_deleted=record_deleted,
            identity_deleted=identity_error is None,
            identity_error=identity_error,
        )
        logger.info(
            "account_deleted",
            account_id=account_id,
            record_deleted=record_deleted,
            identity_deleted=report.identity_deleted,
        )
        return report

    async def stats(self) -> MaintenanceStats:
        """Count accounts per role and per data-quality class."""
        async with self._uow_factory() as uow:
            accounts = await uow.accounts.query()

        stats = MaintenanceStats(total_accounts=len(accounts))
        for account in accounts:
            signals = profile_signals(account)
            stats.with_name += "name" in signals
            stats.with_bio += "bio" in signals
            stats.with_photo += "photo" in signals
            stats.with_socials += "socials" in signals

            if account.role == AccountRole.PARTICIPANT:
                stats.participants += 1
                stats.inactive_participants += is_inactive_participant(account)
            elif account.role == AccountRole.HOST:
                stats.hosts += 1
                stats.empty_hosts += is_empty_host(account)
                stats.visible_hosts += account.visible
                stats.substantial_hosts += has_substantial_profile(account)
            elif account.role == AccountRole.ADMIN:
                stats.admins += 1
        return stats

    # --- Internal helpers ---

    def _matches(self, mode: SweepMode, account: Account, policy: PreservePolicy) -> bool:
        if mode == SweepMode.CLEANUP_INACTIVE_PARTICIPANTS:
            return is_inactive_participant(account)
        if mode == SweepMode.CLEANUP_EMPTY_HOSTS:
            empty = is_empty_host(account)
            if not empty:
                logger.debug(
                    "sweep_host_kept",
                    account_id=account.id,
                    signals=profile_signals(account),
                )
            return empty
        return not self._is_preserved(account, policy)

    @staticmethod
    def _is_preserved(account: Account, policy: PreservePolicy) -> bool:
        if account.id in policy.account_ids:
            return True
        if account.email and account.email.lower() in policy.emails:
            return True
        if policy.preserve_admins and account.is_admin:
            return True
        return has_substantial_profile(account)

    async def _delete_if_still_matching(
        self, mode: SweepMode, account_id: str, policy: PreservePolicy
    ) -> bool | None:
        """Delete a sweep candidate unless it changed since the scan.

        Returns None when the account no longer matches and was kept.
        """
        async with self._uow_factory() as uow:
            current = await uow.accounts.get(account_id)
            if current is not None and not self._matches(mode, current, policy):
                logger.info("sweep_candidate_changed", account_id=account_id, mode=mode.value)
                return None
            deleted = await uow.accounts.delete(account_id)
            await uow.commit()
            return deleted

    async def _delete_record(self, account_id: str) -> bool:
        async with self._uow_factory() as uow:
            deleted = await uow.accounts.delete(account_id)
            await uow.commit()
            return deleted

    async def _delete_identity(self, account_id: str) -> str | None:
        """Delete the identity; return an error description on failure."""
        try:
            outcome = await self._identities.delete_identity(account_id)
        except Exception as exc:
            logger.warning(
                "identity_delete_failed",
                account_id=account_id,
                error=str(exc),
            )
            return str(exc) or type(exc).__name__

        if outcome == IdentityDeletion.NOT_FOUND:
            logger.info("identity_already_absent", account_id=account_id)
        return None

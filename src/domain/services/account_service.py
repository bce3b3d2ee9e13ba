"""Account service layer: creation, host registration and profile edits."""

from collections.abc import Callable
from typing import Any

import structlog

from core.exceptions import (
    AccountNotFoundError,
    AuthorizationError,
    InvalidRoleChangeError,
    ProfileValidationError,
)
from domain.entities.account import Account, AccountRole, normalize_starters
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

OWNER_FIELDS = frozenset(
    {"name", "photo_url", "bio", "nationality", "starters", "interests", "socials", "visible"}
)
ADMIN_FIELDS = OWNER_FIELDS | {"role", "unlock_count"}


class AccountService:
    """Service layer for the account lifecycle."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get(self, account_id: str) -> Account:
        """Get an account by id."""
        async with self._uow_factory() as uow:
            account = await uow.accounts.get(account_id)
            if not account:
                raise AccountNotFoundError(account_id)
            return account

    async def ensure_account(self, account_id: str, email: str | None = None) -> Account:
        """Return the caller's account, creating a participant on first login."""
        async with self._uow_factory() as uow:
            account = await uow.accounts.get(account_id)
            if account:
                if email and not account.email:
                    account = await uow.accounts.set_merge(account_id, {"email": email})
                    await uow.commit()
                return account  # type: ignore[return-value]

            created = await uow.accounts.create(
                Account(id=account_id, email=email, role=AccountRole.PARTICIPANT)
            )
            await uow.commit()
            logger.info("account_created", account_id=account_id, role=created.role.value)
            return created

    async def register_host(self, account_id: str, email: str | None = None) -> Account:
        """Register the caller as a host.

        New accounts are created as hosts. A participant that has not unlocked
        anyone yet is promoted; any other role change is refused.
        """
        async with self._uow_factory() as uow:
            account = await uow.accounts.get(account_id)
            if not account:
                created = await uow.accounts.create(
                    Account(id=account_id, email=email, role=AccountRole.HOST)
                )
                await uow.commit()
                logger.info("host_registered", account_id=account_id, promoted=False)
                return created

            if account.role == AccountRole.HOST:
                return account

            if account.role != AccountRole.PARTICIPANT or account.unlocked_targets:
                raise InvalidRoleChangeError(
                    account_id, account.role.value, AccountRole.HOST.value
                )

            fields: dict[str, Any] = {"role": AccountRole.HOST, "visible": True}
            if email and not account.email:
                fields["email"] = email
            promoted = await uow.accounts.set_merge(account_id, fields)
            await uow.commit()
            logger.info("host_registered", account_id=account_id, promoted=True)
            return promoted  # type: ignore[return-value]

    async def update_profile(
        self, actor_id: str, account_id: str, changes: dict[str, Any]
    ) -> Account:
        """Update an account's profile. Owner or admin only.

        Owners may edit profile content and visibility; admins may also
        change the role and the unlock counter. Unknown keys are ignored.
        """
        async with self._uow_factory() as uow:
            is_admin = False
            if actor_id != account_id:
                actor = await uow.accounts.get(actor_id)
                is_admin = bool(actor and actor.is_admin)
                if not is_admin:
                    raise AuthorizationError("You can only update your own profile")

            account = await uow.accounts.get(account_id)
            if not account:
                raise AccountNotFoundError(account_id)

            allowed = ADMIN_FIELDS if is_admin else OWNER_FIELDS
            fields = self._clean_changes(
                account, {k: v for k, v in changes.items() if k in allowed}
            )
            if not fields:
                return account

            updated = await uow.accounts.set_merge(account_id, fields)
            await uow.commit()
            logger.info(
                "profile_updated",
                account_id=account_id,
                actor_id=actor_id,
                fields=sorted(fields),
            )
            return updated  # type: ignore[return-value]

    # --- Internal helpers ---

    @staticmethod
    def _clean_changes(account: Account, changes: dict[str, Any]) -> dict[str, Any]:
        """Validate and normalise a profile change set."""
        fields = dict(changes)

        if "name" in fields:
            name = fields["name"]
            if name is None or not str(name).strip():
                raise ProfileValidationError("name", "Name cannot be empty")
            fields["name"] = str(name).strip()

        if "starters" in fields:
            fields["starters"] = normalize_starters(fields["starters"])

        if "interests" in fields:
            fields["interests"] = [i.strip() for i in fields["interests"] or [] if i and i.strip()]

        if "socials" in fields:
            merged = account.profile.socials.as_dict()
            merged.update(fields["socials"] or {})
            fields["socials"] = merged

        if "role" in fields:
            fields["role"] = AccountRole(fields["role"])

        if "unlock_count" in fields and fields["unlock_count"] < 0:
            raise ProfileValidationError("unlock_count", "Unlock count cannot be negative")

        return fields

"""SQLAlchemy implementation of Account repository."""

from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

from sqlalchemy import Select, delete, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from domain.entities.account import (
    Account,
    AccountRole,
    ProfileFields,
    SocialHandles,
)
from domain.repositories.account_repository import AppendResult
from infrastructure.database.models import AccountModel, AccountUnlockModel

STREAM_BATCH_SIZE = 200

_MERGEABLE_FIELDS = frozenset(
    {
        "email",
        "role",
        "visible",
        "name",
        "photo_url",
        "bio",
        "nationality",
        "starters",
        "interests",
        "socials",
        "unlock_count",
    }
)


class SQLAlchemyAccountRepository:
    """SQLAlchemy implementation of IAccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: str) -> Account | None:
        """Get an account by ID, including its unlock set."""
        stmt = (
            select(AccountModel)
            .options(selectinload(AccountModel.unlocks))
            .where(AccountModel.id == id)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model, self._unlock_set(model)) if model else None

    async def query(
        self, role: AccountRole | None = None, visible: bool | None = None
    ) -> list[Account]:
        """Get all accounts matching the filter, including unlock sets."""
        stmt = self._filtered(
            select(AccountModel).options(selectinload(AccountModel.unlocks)),
            role,
            visible,
        ).order_by(AccountModel.created_at)
        result = await self._session.execute(stmt)
        return [self._to_entity(model, self._unlock_set(model)) for model in result.scalars()]

    async def stream(
        self, role: AccountRole | None = None, visible: bool | None = None
    ) -> AsyncIterator[Account]:
        """Stream matching accounts in batches. Unlock sets are not loaded."""
        stmt = self._filtered(select(AccountModel), role, visible).execution_options(
            yield_per=STREAM_BATCH_SIZE
        )
        result = await self._session.stream_scalars(stmt)
        async for model in result:
            yield self._to_entity(model, frozenset())

    async def create(self, account: Account) -> Account:
        """Create a new account."""
        model = self._to_model(account)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model, frozenset())

    async def set_merge(self, id: str, fields: dict[str, Any]) -> Account | None:
        """Overwrite the named fields of an account (last write wins)."""
        unknown = set(fields) - _MERGEABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown account fields: {sorted(unknown)}")

        stmt = (
            select(AccountModel)
            .options(selectinload(AccountModel.unlocks))
            .where(AccountModel.id == id)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None

        for key, value in fields.items():
            if key == "role":
                value = AccountRole(value).value
            elif key in ("starters", "interests"):
                value = list(value or [])
            elif key == "socials":
                value = dict(value or {})
            setattr(model, key, value)
        model.updated_at = datetime.utcnow()

        await self._session.flush()
        return self._to_entity(model, self._unlock_set(model))

    async def append_unlock(self, viewer_id: str, target_id: str) -> AppendResult:
        """Conditionally append target_id to the viewer's unlock set.

        Relies on the composite primary key: of two concurrent inserts for
        the same pair, exactly one affects a row.
        """
        now = datetime.utcnow()
        insert = sqlite_insert if self._dialect_name() == "sqlite" else pg_insert
        stmt = (
            insert(AccountUnlockModel.__table__)
            .values(viewer_id=viewer_id, target_id=target_id, unlocked_at=now)
            .on_conflict_do_nothing(index_elements=["viewer_id", "target_id"])
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            return AppendResult.ALREADY_PRESENT

        await self._session.execute(
            update(AccountModel)
            .where(AccountModel.id == viewer_id)
            .values(last_unlocked_at=now, updated_at=now)
        )
        return AppendResult.APPENDED

    async def increment_unlock_count(self, target_id: str) -> bool:
        """Add one to the target's counter in a single statement."""
        now = datetime.utcnow()
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == target_id)
            .values(
                unlock_count=AccountModel.unlock_count + 1,
                last_unlocked_at=now,
                updated_at=now,
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, id: str) -> bool:
        """Delete an account together with unlock entries that reference it."""
        await self._session.execute(
            delete(AccountUnlockModel).where(
                or_(
                    AccountUnlockModel.viewer_id == id,
                    AccountUnlockModel.target_id == id,
                )
            )
        )
        result = await self._session.execute(delete(AccountModel).where(AccountModel.id == id))
        return result.rowcount > 0

    # --- Internal helpers ---

    def _dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    @staticmethod
    def _filtered(
        stmt: Select[tuple[AccountModel]],
        role: AccountRole | None,
        visible: bool | None,
    ) -> Select[tuple[AccountModel]]:
        if role is not None:
            stmt = stmt.where(AccountModel.role == role.value)
        if visible is not None:
            stmt = stmt.where(AccountModel.visible == visible)
        return stmt

    @staticmethod
    def _unlock_set(model: AccountModel) -> frozenset[str]:
        return frozenset(unlock.target_id for unlock in model.unlocks)

    def _to_entity(self, model: AccountModel, unlocked: frozenset[str]) -> Account:
        """Convert ORM model to domain entity."""
        socials = model.socials or {}
        return Account(
            id=model.id,
            email=model.email,
            role=AccountRole(model.role),
            visible=model.visible if model.visible is not None else True,
            profile=ProfileFields(
                name=model.name,
                photo_url=model.photo_url,
                bio=model.bio,
                nationality=model.nationality,
                starters=list(model.starters or []),
                interests=list(model.interests or []),
                socials=SocialHandles(
                    instagram=socials.get("instagram"),
                    linkedin=socials.get("linkedin"),
                    whatsapp=socials.get("whatsapp"),
                ),
            ),
            unlocked_targets=unlocked,
            unlock_count=model.unlock_count or 0,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_unlocked_at=model.last_unlocked_at,
        )

    def _to_model(self, entity: Account) -> AccountModel:
        """Convert domain entity to ORM model."""
        profile = entity.profile
        return AccountModel(
            id=entity.id,
            email=entity.email,
            role=entity.role.value,
            visible=entity.visible,
            name=profile.name,
            photo_url=profile.photo_url,
            bio=profile.bio,
            nationality=profile.nationality,
            starters=list(profile.starters),
            interests=list(profile.interests),
            socials=profile.socials.as_dict(),
            unlock_count=entity.unlock_count,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            last_unlocked_at=entity.last_unlocked_at,
        )

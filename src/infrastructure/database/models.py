"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class AccountModel(Base):
    """Account record, keyed by the identity provider's subject id."""

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            "role IN ('participant', 'host', 'admin')",
            name="ck_accounts_role",
        ),
        CheckConstraint("unlock_count >= 0", name="ck_accounts_unlock_count"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="participant", index=True
    )
    visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Profile
    name: Mapped[str | None] = mapped_column(String(100))
    photo_url: Mapped[str | None] = mapped_column(String(500))
    bio: Mapped[str | None] = mapped_column(Text)
    nationality: Mapped[str | None] = mapped_column(String(100))
    starters: Mapped[list[str]] = mapped_column(JSONB, default=list)
    interests: Mapped[list[str]] = mapped_column(JSONB, default=list)
    socials: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict)

    unlock_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
    last_unlocked_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    unlocks: Mapped[list["AccountUnlockModel"]] = relationship(
        "AccountUnlockModel",
        back_populates="viewer",
        cascade="all, delete-orphan",
        foreign_keys="AccountUnlockModel.viewer_id",
    )


class AccountUnlockModel(Base):
    """One entry of a viewer's unlock set.

    The composite primary key makes appending the same target twice
    impossible, which is what serialises concurrent unlocks of one pair.
    """

    __tablename__ = "account_unlocks"

    viewer_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    target_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    unlocked_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    viewer: Mapped["AccountModel"] = relationship(
        "AccountModel",
        back_populates="unlocks",
        foreign_keys=[viewer_id],
    )

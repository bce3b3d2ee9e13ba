"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.account_repository import IAccountRepository


class IUnitOfWork(Protocol):
    """One short transaction against the account store.

    Writes are discarded unless ``commit`` is called before the context
    exits. Services open a fresh unit for every independent write, so a
    failure in a later step never rolls back an earlier one.
    """

    accounts: IAccountRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Roll back uncommitted work and release the connection."""
        ...

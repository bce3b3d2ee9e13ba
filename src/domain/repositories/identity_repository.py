"""Identity provider protocol."""

from enum import Enum
from typing import Protocol


class IdentityDeletion(str, Enum):
    """Outcome of removing an identity from the identity provider."""

    DELETED = "deleted"
    NOT_FOUND = "not_found"


class IIdentityRepository(Protocol):
    """Administrative access to the external identity provider."""

    async def delete_identity(self, subject_id: str) -> IdentityDeletion:
        """Delete an identity.

        Raises:
            IdentityDeletionError: If the provider rejects or fails the call
        """
        ...

"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class TokenUser:
    """Caller identity taken from a verified bearer token.

    ``id`` is the identity provider's subject and is used unchanged as the
    account id. Participants who scan a QR code before registering sign in
    anonymously, so ``email`` may be missing.
    """

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[str] = None
    is_anonymous: bool = False


class IAuthProvider(Protocol):
    """Verifies bearer tokens and, for tests, mints them."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the caller for a valid token, None otherwise."""
        ...

    def create_token(self, user: TokenUser) -> str:
        """Sign a token for ``user``."""
        ...

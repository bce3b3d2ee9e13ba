"""Unlock domain entities."""

from enum import Enum


class UnlockStatus(str, Enum):
    """Outcome of an unlock request."""

    UNLOCKED_NOW = "unlocked_now"
    ALREADY_UNLOCKED = "already_unlocked"

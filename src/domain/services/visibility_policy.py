"""Visibility policy for host profiles.

Decides, per (viewer, target) pair, how much of the target's profile the
viewer may see. The decision is a pure function of roles, the target's
visibility flag and the viewer's unlock set, so it never touches the store.
"""

from collections.abc import Collection

from domain.entities.account import AccountRole
from domain.entities.directory import Visibility


def decide(
    viewer_role: AccountRole,
    viewer_unlock_set: Collection[str],
    target_id: str,
    target_role: AccountRole,
    target_visible: bool,
) -> Visibility:
    """Classify a target profile for a viewer.

    Rules are applied in order:

    1. Only hosts are discoverable; any other target is HIDDEN.
    2. A host that switched visibility off is HIDDEN to everyone but hosts.
    3. Hosts see every other host in full.
    4. A host the viewer has unlocked is FULL.
    5. Anything else is LOCKED.
    """
    if target_role != AccountRole.HOST:
        return Visibility.HIDDEN
    if not target_visible and viewer_role != AccountRole.HOST:
        return Visibility.HIDDEN
    if viewer_role == AccountRole.HOST:
        return Visibility.FULL
    if target_id in viewer_unlock_set:
        return Visibility.FULL
    return Visibility.LOCKED


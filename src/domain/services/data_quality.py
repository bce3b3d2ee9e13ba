"""Data-quality predicates used by maintenance.

All predicates lean towards keeping data: a single piece of real content is
enough for an account to count as non-empty.
"""

from domain.entities.account import Account, AccountRole

SUBSTANTIAL_BIO_LENGTH = 50


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def _any_filled(values: list[str] | None) -> bool:
    return any(_filled(v) for v in values or [])


def profile_signals(account: Account) -> list[str]:
    """Names of the profile sections that carry content."""
    profile = account.profile
    socials = profile.socials
    signals = []
    if _filled(profile.name):
        signals.append("name")
    if _filled(profile.bio):
        signals.append("bio")
    if _filled(profile.photo_url):
        signals.append("photo")
    if _filled(profile.nationality):
        signals.append("nationality")
    if _any_filled(profile.starters):
        signals.append("starters")
    if _any_filled(profile.interests):
        signals.append("interests")
    if _filled(socials.instagram) or _filled(socials.linkedin) or _filled(socials.whatsapp):
        signals.append("socials")
    return signals


def is_empty_host(account: Account) -> bool:
    """True for a host that has not filled in any profile content."""
    return account.role == AccountRole.HOST and not profile_signals(account)


def is_inactive_participant(account: Account) -> bool:
    """True for a participant that has never unlocked a profile."""
    return account.role == AccountRole.PARTICIPANT and not account.unlocked_targets


def has_substantial_profile(account: Account) -> bool:
    """True for a host with a name and a bio of real length."""
    profile = account.profile
    return (
        account.role == AccountRole.HOST
        and _filled(profile.name)
        and profile.bio is not None
        and len(profile.bio.strip()) >= SUBSTANTIAL_BIO_LENGTH
    )

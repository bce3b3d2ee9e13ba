"""Unit tests for the visibility policy."""

import itertools

import pytest

from domain.entities.account import AccountRole
from domain.entities.directory import Visibility
from domain.services.visibility_policy import decide

TARGET_ID = "target-1"

ROLES = [AccountRole.PARTICIPANT, AccountRole.HOST]


def _expected(
    viewer_role: AccountRole, unlocked: bool, target_role: AccountRole, visible: bool
) -> Visibility:
    if target_role != AccountRole.HOST:
        return Visibility.HIDDEN
    if not visible and viewer_role != AccountRole.HOST:
        return Visibility.HIDDEN
    if viewer_role == AccountRole.HOST or unlocked:
        return Visibility.FULL
    return Visibility.LOCKED


class TestDecide:
    @pytest.mark.parametrize(
        "viewer_role,unlocked,target_role,visible",
        list(itertools.product(ROLES, [True, False], ROLES, [True, False])),
    )
    def test_every_combination(
        self,
        viewer_role: AccountRole,
        unlocked: bool,
        target_role: AccountRole,
        visible: bool,
    ):
        unlock_set = {TARGET_ID} if unlocked else set()

        result = decide(viewer_role, unlock_set, TARGET_ID, target_role, visible)

        assert result == _expected(viewer_role, unlocked, target_role, visible)

    def test_participant_sees_unlocked_host_in_full(self):
        assert (
            decide(AccountRole.PARTICIPANT, {"h1"}, "h1", AccountRole.HOST, True)
            == Visibility.FULL
        )

    def test_participant_sees_other_hosts_locked(self):
        assert (
            decide(AccountRole.PARTICIPANT, {"h1"}, "h2", AccountRole.HOST, True)
            == Visibility.LOCKED
        )

    def test_hidden_host_is_hidden_even_when_unlocked(self):
        assert (
            decide(AccountRole.PARTICIPANT, {"h1"}, "h1", AccountRole.HOST, False)
            == Visibility.HIDDEN
        )

    def test_host_sees_hidden_host_in_full(self):
        assert (
            decide(AccountRole.HOST, set(), "h1", AccountRole.HOST, False)
            == Visibility.FULL
        )

    def test_participant_target_is_never_listed(self):
        assert (
            decide(AccountRole.HOST, {"p1"}, "p1", AccountRole.PARTICIPANT, True)
            == Visibility.HIDDEN
        )

    def test_admin_target_is_hidden(self):
        assert (
            decide(AccountRole.HOST, set(), "a1", AccountRole.ADMIN, True)
            == Visibility.HIDDEN
        )

    def test_admin_viewer_follows_participant_rules(self):
        assert (
            decide(AccountRole.ADMIN, set(), "h1", AccountRole.HOST, True)
            == Visibility.LOCKED
        )
        assert (
            decide(AccountRole.ADMIN, set(), "h1", AccountRole.HOST, False)
            == Visibility.HIDDEN
        )


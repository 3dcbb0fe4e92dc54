"""Tests for avatar state."""

from datetime import datetime

import pytest

from lifesim.core.avatar import get_avatar_emoji, get_avatar_message, get_avatar_state, is_night_time
from lifesim.core.schema import AvatarState, Session


@pytest.mark.parametrize(
    "hour, night",
    [(22, False), (23, True), (0, True), (5, True), (6, False), (12, False)],
)
def test_night_time(hour, night):
    assert is_night_time(datetime(2024, 1, 1, hour, 30)) is night


def test_working_wins_at_night():
    session = Session(task_id="t1")
    assert get_avatar_state(session, datetime(2024, 1, 1, 2, 0)) == AvatarState.working


def test_resting_and_idle():
    assert get_avatar_state(None, datetime(2024, 1, 1, 2, 0)) == AvatarState.resting
    assert get_avatar_state(None, datetime(2024, 1, 1, 14, 0)) == AvatarState.idle


def test_every_state_has_emoji_and_message():
    for state in AvatarState:
        assert get_avatar_emoji(state)
        assert get_avatar_message(state)

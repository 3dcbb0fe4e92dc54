"""Avatar state derived from the active session and the time of day."""

from __future__ import annotations

from datetime import datetime

from lifesim.core.schema import AvatarState, Session

_EMOJI = {
    AvatarState.working: "\N{FIRE}",
    AvatarState.resting: "\N{SLEEPING FACE}",
    AvatarState.idle: "\N{SPARKLES}",
}

_MESSAGES = {
    AvatarState.working: "In the zone...",
    AvatarState.resting: "Recharging...",
    AvatarState.idle: "Ready for action!",
}


def is_night_time(when: datetime | None = None) -> bool:
    """23:00 to 06:00 local time."""
    hour = (when or datetime.now()).hour
    return hour >= 23 or hour < 6


def get_avatar_state(active_session: Session | None, when: datetime | None = None) -> AvatarState:
    if active_session is not None:
        return AvatarState.working
    if is_night_time(when):
        return AvatarState.resting
    return AvatarState.idle


def get_avatar_emoji(state: AvatarState) -> str:
    return _EMOJI[state]


def get_avatar_message(state: AvatarState) -> str:
    return _MESSAGES[state]

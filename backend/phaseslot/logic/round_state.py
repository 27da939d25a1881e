"""Round state machine for a player session."""
from enum import Enum

from phaseslot.errors import ErrorCode, GameError


class RoundState(str, Enum):
    """Where the current round is in its lifecycle."""
    IDLE = "idle"
    SPINNING = "spinning"
    RESOLVING_WIN = "resolving_win"
    ANIMATING_BIG_WIN = "animating_big_win"


# A new spin may interrupt a plain win reveal, not a big-win animation
ALLOWED_TRANSITIONS: dict[RoundState, frozenset[RoundState]] = {
    RoundState.IDLE: frozenset({RoundState.SPINNING}),
    RoundState.SPINNING: frozenset({
        RoundState.IDLE,
        RoundState.RESOLVING_WIN,
        RoundState.ANIMATING_BIG_WIN,
    }),
    RoundState.RESOLVING_WIN: frozenset({RoundState.SPINNING, RoundState.IDLE}),
    RoundState.ANIMATING_BIG_WIN: frozenset({RoundState.IDLE}),
}


def can_transition(current: RoundState, target: RoundState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition(current: RoundState, target: RoundState) -> RoundState:
    """
    Move from current to target.

    Raises ROUND_IN_PROGRESS when the transition is not allowed.
    """
    if not can_transition(current, target):
        raise GameError(
            ErrorCode.ROUND_IN_PROGRESS,
            f"Cannot move round from {current.value} to {target.value}.",
        )
    return target


def can_spin(current: RoundState) -> bool:
    return can_transition(current, RoundState.SPINNING)


def settled_state(total_win: float, big_win: bool) -> RoundState:
    """State a round lands in once its result is credited."""
    if big_win:
        return RoundState.ANIMATING_BIG_WIN
    if total_win > 0:
        return RoundState.RESOLVING_WIN
    return RoundState.IDLE

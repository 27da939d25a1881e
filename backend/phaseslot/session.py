"""Player session: balance, bet deduction/credit and round state."""
import logging

from pydantic import BaseModel

from phaseslot.config import settings
from phaseslot.errors import ErrorCode, GameError
from phaseslot.logic.engine import is_big_win
from phaseslot.logic.models import GameConfig, SpinResult
from phaseslot.logic.phase import Phase, phase_from_elapsed
from phaseslot.logic.round_state import (
    RoundState,
    can_spin,
    settled_state,
    transition,
)


logger = logging.getLogger(__name__)


class SessionState(BaseModel):
    """
    Persisted session state.

    started_at_ms is fixed when the session is created and never changes;
    the phase clock is always measured from it.
    """
    session_id: str
    started_at_ms: int
    balance: float
    round_state: RoundState = RoundState.IDLE
    last_round_id: str | None = None

    def elapsed_ms(self, now_ms: int) -> int:
        # Clock skew must not produce negative elapsed time
        return max(0, now_ms - self.started_at_ms)

    def phase_at(self, now_ms: int) -> Phase:
        return phase_from_elapsed(self.elapsed_ms(now_ms))


def new_session(session_id: str, now_ms: int) -> SessionState:
    """Create a session starting now with the configured balance."""
    return SessionState(
        session_id=session_id,
        started_at_ms=now_ms,
        balance=settings.starting_balance,
    )


def build_game_config(bet_amount: float) -> GameConfig:
    """Config snapshot for one spin."""
    return GameConfig(
        volatility_profile=settings.volatility_profile,
        big_win_threshold_multiplier=settings.big_win_threshold_multiplier,
        bet_amount=bet_amount,
    )


def begin_spin(session: SessionState, bet_amount: float) -> SessionState:
    """
    Deduct the bet and move the round to spinning.

    Raises:
        ROUND_IN_PROGRESS if the round state does not allow a new spin.
        INSUFFICIENT_FUNDS if balance is below the bet.
    """
    if not can_spin(session.round_state):
        raise GameError(
            ErrorCode.ROUND_IN_PROGRESS,
            f"Round is {session.round_state.value}; complete it before spinning.",
        )
    if session.balance < bet_amount:
        raise GameError(
            ErrorCode.INSUFFICIENT_FUNDS,
            f"Balance {session.balance:.2f} is below bet {bet_amount:.2f}.",
        )

    return session.model_copy(update={
        "balance": session.balance - bet_amount,
        "round_state": transition(session.round_state, RoundState.SPINNING),
    })


def settle_spin(
    session: SessionState,
    result: SpinResult,
    config: GameConfig,
    round_id: str,
) -> tuple[SessionState, bool]:
    """
    Credit the win and move the round to its settled state.

    Returns (next session, big win flag).
    """
    big_win = is_big_win(
        result.total_win, config.bet_amount, config.big_win_threshold_multiplier
    )
    target = settled_state(result.total_win, big_win)
    next_session = session.model_copy(update={
        "balance": session.balance + result.total_win,
        "round_state": transition(session.round_state, target),
        "last_round_id": round_id,
    })
    if big_win:
        logger.info(
            "Big win session=%s round=%s total_win=%.2f bet=%.2f",
            session.session_id,
            round_id,
            result.total_win,
            config.bet_amount,
        )
    return next_session, big_win


def complete_round(session: SessionState) -> SessionState:
    """Finish a win reveal and return the round to idle."""
    if session.round_state == RoundState.IDLE:
        return session
    return session.model_copy(update={
        "round_state": transition(session.round_state, RoundState.IDLE),
    })

"""Spin resolver: grid generation, line evaluation and phase multiplier."""
import logging

from phaseslot.logic.grid import generate_grid
from phaseslot.logic.models import GameConfig, SpinResult
from phaseslot.logic.paylines import evaluate_grid
from phaseslot.logic.phase import Phase, phase_multiplier
from phaseslot.logic.rng import ProductionRNG, RNGBase


logger = logging.getLogger(__name__)


class GameEngine:
    """
    Spin resolution engine.

    Implements:
    - Phase-conditioned grid generation
    - Payline evaluation (5 lines, wild substitution, quantum jackpot)
    - Phase multiplier and bet scaling

    Holds no game state; the only thing it owns is its random source.
    """

    def __init__(self, rng: RNGBase | None = None):
        self.rng = rng or ProductionRNG()

    def resolve_spin(self, phase: Phase | str, config: GameConfig) -> SpinResult:
        """
        Resolve one spin.

        Args:
            phase: Phase captured when the spin started
            config: Config snapshot captured when the spin started

        Returns:
            SpinResult with grid, line wins, and final win
        """
        phase = Phase(phase)
        snapshot = config.model_copy(deep=True)

        # 1) Generate grid (complete before evaluation)
        grid = generate_grid(phase, snapshot, self.rng)

        # 2) Evaluate paylines
        base_win, lines_won = evaluate_grid(grid)

        # 3) Apply bet and phase multiplier
        multiplier = phase_multiplier(phase)
        total_win = base_win * snapshot.bet_amount * multiplier

        result = SpinResult(
            phase=phase,
            grid=grid,
            lines_won=tuple(lines_won),
            base_win=base_win,
            multiplier=multiplier,
            total_win=total_win,
            applied_modifiers=(phase.value, f"x{multiplier}"),
        )
        logger.debug(
            "Spin resolved phase=%s base_win=%s bet=%s total_win=%s lines=%s",
            phase.value,
            base_win,
            snapshot.bet_amount,
            total_win,
            [line.line_id for line in lines_won],
        )
        return result


def resolve_spin(
    phase: Phase | str, config: GameConfig, rng: RNGBase | None = None
) -> SpinResult:
    """Resolve a spin with a one-off engine."""
    return GameEngine(rng=rng).resolve_spin(phase, config)


def is_big_win(total_win: float, bet_amount: float, threshold_multiplier: float) -> bool:
    """Big win when the payout reaches threshold_multiplier times the bet."""
    return total_win > 0 and total_win >= bet_amount * threshold_multiplier

"""Phase-conditioned symbol weights and grid generation."""
from phaseslot.logic.models import (
    GRID_COLS,
    GRID_ROWS,
    GameConfig,
    Grid,
    Symbol,
    VolatilityProfile,
)
from phaseslot.logic.phase import Phase
from phaseslot.logic.rng import RNGBase

# Standard profile before phase adjustments
BASE_SYMBOL_WEIGHTS: dict[Symbol, int] = {
    Symbol.CAT: 30,
    Symbol.DOG: 25,
    Symbol.BIRD: 20,
    Symbol.ALLIGATOR: 15,
    Symbol.WHALE: 10,
    Symbol.ELEPHANT: 5,
    Symbol.WILD: 2,
    Symbol.QUANTUM_WILD: 0,
}


def build_symbol_weights(
    phase: Phase, volatility: VolatilityProfile | str | None = None
) -> list[tuple[Symbol, int]]:
    """
    Build the weight table for a phase.

    Calm: frequent low-tier lines, plenty of wilds, no elephants.
    Surge: mid-tier animals boosted.
    Quantum: filler animals cut back, standard wilds replaced by quantum wilds.

    ``volatility`` is accepted for interface compatibility and does not
    change the weights.
    """
    phase = Phase(phase)
    weights = dict(BASE_SYMBOL_WEIGHTS)

    if phase == Phase.CALM:
        weights[Symbol.CAT] += 100
        weights[Symbol.DOG] += 80
        weights[Symbol.BIRD] += 40
        weights[Symbol.WILD] = 10
        weights[Symbol.WHALE] = 1
        weights[Symbol.ELEPHANT] = 0
    elif phase == Phase.SURGE:
        weights[Symbol.ALLIGATOR] += 20
        weights[Symbol.WHALE] += 10
        weights[Symbol.WILD] = 5
    elif phase == Phase.QUANTUM:
        weights[Symbol.CAT] = 10
        weights[Symbol.DOG] = 10
        weights[Symbol.BIRD] = 10
        weights[Symbol.QUANTUM_WILD] = 8
        weights[Symbol.WILD] = 0

    return [(symbol, weights[symbol]) for symbol in Symbol]


def generate_grid(phase: Phase, config: GameConfig, rng: RNGBase) -> Grid:
    """Draw a 3x3 grid, each cell independently from the phase weight table."""
    weights = build_symbol_weights(phase, config.volatility_profile)
    rows = []
    for _ in range(GRID_ROWS):
        row = []
        for _ in range(GRID_COLS):
            row.append(rng.pick_weighted(weights))
        rows.append(tuple(row))
    return tuple(rows)

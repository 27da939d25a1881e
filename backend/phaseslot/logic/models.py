"""Core value objects for grid generation and win evaluation."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from phaseslot.logic.phase import Phase


class Symbol(str, Enum):
    """Reel symbols. Declaration order is the weight table order."""
    CAT = "cat"
    DOG = "dog"
    BIRD = "bird"
    ALLIGATOR = "alligator"
    WHALE = "whale"
    ELEPHANT = "elephant"
    WILD = "wild"
    QUANTUM_WILD = "quantum_wild"


WILD_SYMBOLS = frozenset({Symbol.WILD, Symbol.QUANTUM_WILD})


class VolatilityProfile(str, Enum):
    """Volatility profile carried in the game config."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# 3 rows of 3 symbols, row-major
Grid = tuple[tuple[Symbol, ...], ...]
Coordinate = tuple[int, int]

GRID_ROWS = 3
GRID_COLS = 3


class GameConfig(BaseModel):
    """
    Player-facing game configuration.

    Frozen: the resolver always works on the snapshot it was handed.
    Bet changes between spins produce a new config via model_copy(update=...).
    """
    model_config = ConfigDict(frozen=True)

    volatility_profile: VolatilityProfile = VolatilityProfile.MEDIUM
    big_win_threshold_multiplier: float = 5
    bet_amount: float = 1.0


class LineWin(BaseModel):
    """A winning payline."""
    model_config = ConfigDict(frozen=True)

    line_id: int
    symbol: Symbol
    count: int = 3
    payout: float  # pre-bet, pre-multiplier
    coordinates: tuple[Coordinate, ...]


class SpinResult(BaseModel):
    """Result of one resolved spin."""
    model_config = ConfigDict(frozen=True)

    phase: Phase
    grid: Grid
    lines_won: tuple[LineWin, ...] = Field(default_factory=tuple)
    base_win: float = 0.0
    multiplier: int = 1
    total_win: float = 0.0
    applied_modifiers: tuple[str, ...] = Field(default_factory=tuple)

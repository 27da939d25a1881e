"""Wire models for the session API."""
from pydantic import BaseModel, Field

from phaseslot.config import settings
from phaseslot.logic.models import LineWin, SpinResult
from phaseslot.logic.paylines import PAYTABLE
from phaseslot.logic.phase import (
    LOOP_DURATION_MS,
    PHASE_MULTIPLIERS,
    PHASE_THRESHOLDS,
    CyclePosition,
)
from phaseslot.logic.round_state import RoundState


# === Request Models ===


class SpinRequest(BaseModel):
    """POST /spin request body."""

    clientRequestId: str = Field(..., description="Idempotency key")
    betAmount: float = Field(..., description="Must be in allowedBets")


# === Response Models ===


class Configuration(BaseModel):
    """Configuration object in /init response."""

    currency: str = settings.currency
    allowedBets: list[float] = settings.allowed_bets
    defaultBet: float = settings.default_bet
    bigWinThresholdMultiplier: float = settings.big_win_threshold_multiplier
    loopDurationMs: int = LOOP_DURATION_MS
    phaseThresholds: dict[str, int] = Field(
        default_factory=lambda: {p.value: v for p, v in PHASE_THRESHOLDS.items()}
    )
    phaseMultipliers: dict[str, int] = Field(
        default_factory=lambda: {p.value: v for p, v in PHASE_MULTIPLIERS.items()}
    )
    paytable: dict[str, float] = Field(
        default_factory=lambda: {s.value: v for s, v in PAYTABLE.items()}
    )


class Cycle(BaseModel):
    """Current position in the phase loop."""

    phase: str
    offsetMs: int
    progress: float
    nextPhase: str
    msUntilNextPhase: int

    @classmethod
    def from_position(cls, position: CyclePosition) -> "Cycle":
        return cls(
            phase=position.phase.value,
            offsetMs=position.offset_ms,
            progress=position.progress,
            nextPhase=position.next_phase.value,
            msUntilNextPhase=position.ms_until_next_phase,
        )


class SessionSnapshot(BaseModel):
    """Session object in /init and /round/complete responses."""

    balance: float
    roundState: RoundState
    cycle: Cycle


class InitResponse(BaseModel):
    """GET /init response."""

    protocolVersion: str = settings.protocol_version
    configuration: Configuration = Field(default_factory=Configuration)
    session: SessionSnapshot


class WireLineWin(BaseModel):
    """Line win as sent to the client."""

    lineId: int
    symbolId: str
    count: int
    payout: float
    coordinates: list[list[int]]

    @classmethod
    def from_line_win(cls, line: LineWin) -> "WireLineWin":
        return cls(
            lineId=line.line_id,
            symbolId=line.symbol.value,
            count=line.count,
            payout=line.payout,
            coordinates=[list(c) for c in line.coordinates],
        )


class Outcome(BaseModel):
    """Outcome object in spin response."""

    grid: list[list[str]]
    linesWon: list[WireLineWin] = Field(default_factory=list)
    baseWin: float
    multiplier: int
    totalWin: float
    appliedModifiers: list[str] = Field(default_factory=list)
    isBigWin: bool = False

    @classmethod
    def from_result(cls, result: SpinResult, big_win: bool) -> "Outcome":
        return cls(
            grid=[[s.value for s in row] for row in result.grid],
            linesWon=[WireLineWin.from_line_win(line) for line in result.lines_won],
            baseWin=result.base_win,
            multiplier=result.multiplier,
            totalWin=result.total_win,
            appliedModifiers=list(result.applied_modifiers),
            isBigWin=big_win,
        )


class SpinResponse(BaseModel):
    """POST /spin response."""

    protocolVersion: str = settings.protocol_version
    roundId: str
    phase: str
    betAmount: float
    outcome: Outcome
    balanceBefore: float
    balanceAfter: float
    roundState: RoundState


class CompleteRoundResponse(BaseModel):
    """POST /round/complete response."""

    protocolVersion: str = settings.protocol_version
    session: SessionSnapshot

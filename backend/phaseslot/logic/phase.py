"""Phase clock: maps session elapsed time to a volatility phase."""
from enum import Enum

from pydantic import BaseModel


class Phase(str, Enum):
    """Volatility phase of the time cycle."""
    CALM = "Calm"
    SURGE = "Surge"
    QUANTUM = "Quantum"


LOOP_DURATION_MS = 15000

# Exclusive end of each phase window within one loop
PHASE_THRESHOLDS: dict[Phase, int] = {
    Phase.CALM: 6000,
    Phase.SURGE: 11000,
    Phase.QUANTUM: LOOP_DURATION_MS,
}

PHASE_ORDER: tuple[Phase, ...] = (Phase.CALM, Phase.SURGE, Phase.QUANTUM)

PHASE_MULTIPLIERS: dict[Phase, int] = {
    Phase.CALM: 1,
    Phase.SURGE: 2,
    Phase.QUANTUM: 5,
}


class CyclePosition(BaseModel):
    """Where a given elapsed time falls inside the phase loop."""
    phase: Phase
    offset_ms: int
    progress: float
    next_phase: Phase
    ms_until_next_phase: int


def _check_elapsed(elapsed_ms: int) -> int:
    if elapsed_ms < 0:
        raise ValueError(f"elapsed_ms must be non-negative, got {elapsed_ms}")
    return int(elapsed_ms) % LOOP_DURATION_MS


def phase_from_elapsed(elapsed_ms: int) -> Phase:
    """
    Return the phase for elapsed milliseconds since session start.

    Windows are half-open: [0, 6000) Calm, [6000, 11000) Surge,
    [11000, 15000) Quantum. Time wraps every LOOP_DURATION_MS.
    """
    t = _check_elapsed(elapsed_ms)
    if t < PHASE_THRESHOLDS[Phase.CALM]:
        return Phase.CALM
    if t < PHASE_THRESHOLDS[Phase.SURGE]:
        return Phase.SURGE
    return Phase.QUANTUM


def phase_multiplier(phase: Phase | str) -> int:
    """Win multiplier for a phase. Unknown phase names raise ValueError."""
    return PHASE_MULTIPLIERS[Phase(phase)]


def cycle_position(elapsed_ms: int) -> CyclePosition:
    """Describe the loop position for a time-cycle display."""
    t = _check_elapsed(elapsed_ms)
    phase = phase_from_elapsed(t)
    idx = PHASE_ORDER.index(phase)
    next_phase = PHASE_ORDER[(idx + 1) % len(PHASE_ORDER)]
    return CyclePosition(
        phase=phase,
        offset_ms=t,
        progress=t / LOOP_DURATION_MS,
        next_phase=next_phase,
        ms_until_next_phase=PHASE_THRESHOLDS[phase] - t,
    )

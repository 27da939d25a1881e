"""Payline definitions, paytable and line evaluation."""
from typing import Sequence

from phaseslot.logic.models import (
    GRID_COLS,
    GRID_ROWS,
    WILD_SYMBOLS,
    Coordinate,
    LineWin,
    Symbol,
)

# Order defines line_id and the reveal order of wins
PAYLINES: tuple[tuple[Coordinate, ...], ...] = (
    ((0, 0), (0, 1), (0, 2)),  # top
    ((1, 0), (1, 1), (1, 2)),  # middle
    ((2, 0), (2, 1), (2, 2)),  # bottom
    ((0, 0), (1, 1), (2, 2)),  # diagonal TL-BR
    ((2, 0), (1, 1), (0, 2)),  # diagonal BL-TR
)

# 3-of-a-kind payout per symbol, in units of bet
PAYTABLE: dict[Symbol, float] = {
    Symbol.CAT: 2,
    Symbol.DOG: 4,
    Symbol.BIRD: 8,
    Symbol.ALLIGATOR: 15,
    Symbol.WHALE: 30,
    Symbol.ELEPHANT: 50,
    Symbol.WILD: 0,
    Symbol.QUANTUM_WILD: 100,
}

PAYOUT_THREE_WILDS = 80
PAYOUT_QUANTUM_JACKPOT = PAYTABLE[Symbol.QUANTUM_WILD]


def _check_grid(grid: Sequence[Sequence[Symbol | str]]) -> None:
    if len(grid) != GRID_ROWS or any(len(row) != GRID_COLS for row in grid):
        raise ValueError(f"Grid must be {GRID_ROWS}x{GRID_COLS}, got {grid!r}")


def evaluate_line(
    grid: Sequence[Sequence[Symbol | str]], line_id: int
) -> LineWin | None:
    """
    Evaluate one payline.

    Three quantum wilds pay the jackpot. Any other all-wild line pays the
    three-wilds constant. Otherwise the first non-wild symbol is the target
    and the line wins only if every symbol is the target or a wild.
    """
    coordinates = PAYLINES[line_id]
    symbols = [Symbol(grid[row][col]) for row, col in coordinates]

    if all(s == Symbol.QUANTUM_WILD for s in symbols):
        return LineWin(
            line_id=line_id,
            symbol=Symbol.QUANTUM_WILD,
            payout=PAYOUT_QUANTUM_JACKPOT,
            coordinates=coordinates,
        )

    non_wilds = [s for s in symbols if s not in WILD_SYMBOLS]
    if not non_wilds:
        return LineWin(
            line_id=line_id,
            symbol=Symbol.WILD,
            payout=PAYOUT_THREE_WILDS,
            coordinates=coordinates,
        )

    target = non_wilds[0]
    if all(s == target or s in WILD_SYMBOLS for s in symbols):
        return LineWin(
            line_id=line_id,
            symbol=target,
            payout=PAYTABLE[target],
            coordinates=coordinates,
        )

    return None


def evaluate_grid(
    grid: Sequence[Sequence[Symbol | str]],
) -> tuple[float, list[LineWin]]:
    """
    Evaluate all paylines in order.

    Returns (base_win, line wins). base_win is pre-bet, pre-multiplier.
    """
    _check_grid(grid)

    base_win = 0.0
    lines_won: list[LineWin] = []
    for line_id in range(len(PAYLINES)):
        line_win = evaluate_line(grid, line_id)
        if line_win is not None:
            base_win += line_win.payout
            lines_won.append(line_win)

    return base_win, lines_won

"""Spin resolver tests."""
import pytest
from pydantic import ValidationError

from phaseslot.logic.engine import GameEngine, is_big_win, resolve_spin
from phaseslot.logic.models import GameConfig, Symbol
from phaseslot.logic.paylines import evaluate_grid
from phaseslot.logic.phase import Phase
from phaseslot.logic.rng import SeededRNG
from tests.conftest import NO_WIN_GRID, TOP_CAT_GRID, rng_for_grid


class TestResolveSpin:
    def test_calm_bet_one(self):
        engine = GameEngine(rng=rng_for_grid(TOP_CAT_GRID, Phase.CALM))
        result = engine.resolve_spin(Phase.CALM, GameConfig(bet_amount=1))

        assert result.grid == TOP_CAT_GRID
        assert result.base_win == 2
        assert result.multiplier == 1
        assert result.total_win == 2 * 1 * 1
        assert result.applied_modifiers == ("Calm", "x1")
        assert [line.line_id for line in result.lines_won] == [0]

    def test_quantum_bet_two(self):
        engine = GameEngine(rng=rng_for_grid(TOP_CAT_GRID, Phase.QUANTUM))
        result = engine.resolve_spin(Phase.QUANTUM, GameConfig(bet_amount=2))

        assert result.base_win == 2
        assert result.multiplier == 5
        assert result.total_win == 2 * 2 * 5
        assert result.applied_modifiers == ("Quantum", "x5")

    def test_surge_multiplier(self):
        result = resolve_spin(
            "Surge",
            GameConfig(bet_amount=0.5),
            rng=rng_for_grid(TOP_CAT_GRID, Phase.SURGE),
        )
        assert result.phase == Phase.SURGE
        assert result.total_win == 2 * 0.5 * 2
        assert result.applied_modifiers == ("Surge", "x2")

    def test_no_win(self):
        result = resolve_spin(
            Phase.QUANTUM, GameConfig(bet_amount=25), rng=rng_for_grid(NO_WIN_GRID, Phase.QUANTUM)
        )
        assert result.lines_won == ()
        assert result.total_win == 0

    def test_quantum_jackpot_line(self):
        rows = (
            (Symbol.QUANTUM_WILD, Symbol.QUANTUM_WILD, Symbol.QUANTUM_WILD),
            (Symbol.CAT, Symbol.ALLIGATOR, Symbol.BIRD),
            (Symbol.DOG, Symbol.BIRD, Symbol.CAT),
        )
        result = resolve_spin(
            Phase.QUANTUM, GameConfig(bet_amount=1), rng=rng_for_grid(rows, Phase.QUANTUM)
        )
        assert [line.line_id for line in result.lines_won] == [0]
        assert result.base_win == 100
        assert result.total_win == 500

    def test_zero_bet_pays_nothing(self):
        result = resolve_spin(
            Phase.CALM, GameConfig(bet_amount=0), rng=rng_for_grid(TOP_CAT_GRID, Phase.CALM)
        )
        assert result.base_win == 2
        assert result.total_win == 0

    def test_total_matches_evaluation(self):
        engine = GameEngine(rng=SeededRNG(2025))
        config = GameConfig(bet_amount=5)
        for phase in Phase:
            for _ in range(200):
                result = engine.resolve_spin(phase, config)
                base_win, lines = evaluate_grid(result.grid)
                assert result.base_win == base_win
                assert list(result.lines_won) == lines
                assert result.total_win == base_win * 5 * result.multiplier

    def test_seeded_engines_agree(self):
        config = GameConfig(bet_amount=1)
        a = GameEngine(rng=SeededRNG(7))
        b = GameEngine(rng=SeededRNG(7))
        for phase in [Phase.CALM, Phase.SURGE, Phase.QUANTUM] * 10:
            assert a.resolve_spin(phase, config) == b.resolve_spin(phase, config)

    def test_unknown_phase_rejected(self):
        with pytest.raises(ValueError):
            resolve_spin("Chaos", GameConfig(), rng=SeededRNG(1))


class TestSnapshots:
    def test_config_is_frozen(self):
        config = GameConfig(bet_amount=1)
        with pytest.raises(ValidationError):
            config.bet_amount = 10

    def test_result_is_frozen(self):
        result = resolve_spin(Phase.CALM, GameConfig(), rng=SeededRNG(1))
        with pytest.raises(ValidationError):
            result.total_win = 1_000_000

    def test_bet_change_makes_new_config(self):
        config = GameConfig(bet_amount=1)
        changed = config.model_copy(update={"bet_amount": 5})
        assert config.bet_amount == 1
        assert changed.bet_amount == 5


class TestBigWin:
    @pytest.mark.parametrize(
        "total_win, bet, threshold, expected",
        [
            (0, 1, 5, False),
            (4.99, 1, 5, False),
            (5, 1, 5, True),
            (20, 2, 10, True),
            (19.5, 2, 10, False),
            (0, 0, 5, False),
        ],
    )
    def test_threshold(self, total_win, bet, threshold, expected):
        assert is_big_win(total_win, bet, threshold) is expected

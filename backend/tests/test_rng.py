"""RNG primitive tests."""
from collections import Counter

import pytest

from phaseslot.logic.rng import ProductionRNG, SeededRNG, pick_weighted, random_int
from tests.conftest import ScriptedRNG


class TestRandInt:
    """randint must be uniform over an inclusive range."""

    def test_bounds_inclusive(self):
        rng = ScriptedRNG([0.0, 0.999999])
        assert rng.randint(3, 7) == 3
        assert rng.randint(3, 7) == 7

    def test_single_value_range(self):
        assert SeededRNG(1).randint(5, 5) == 5

    def test_rejects_reversed_bounds(self):
        with pytest.raises(ValueError):
            SeededRNG(1).randint(4, 2)

    def test_covers_whole_range(self):
        rng = SeededRNG(42)
        values = {rng.randint(1, 6) for _ in range(2000)}
        assert values == {1, 2, 3, 4, 5, 6}

    def test_module_helper_uses_injected_rng(self):
        assert random_int(0, 9, rng=ScriptedRNG([0.55])) == 5


class TestPickWeighted:
    """Cumulative-walk weighted selection."""

    def test_zero_weight_items_never_picked(self):
        rng = SeededRNG(7)
        items = [("a", 0), ("b", 0), ("c", 5)]
        assert {rng.pick_weighted(items) for _ in range(500)} == {"c"}

    def test_all_zero_weights_returns_last(self):
        rng = SeededRNG(7)
        items = [("a", 0), ("b", 0)]
        assert {rng.pick_weighted(items) for _ in range(100)} == {"b"}

    def test_walk_boundaries(self):
        items = [("a", 1), ("b", 3)]
        # r = 0.25 * 4 = 1.0 is not < 1, falls into b
        assert pick_weighted(items, rng=ScriptedRNG([0.25])) == "b"
        assert pick_weighted(items, rng=ScriptedRNG([0.2499])) == "a"

    def test_probability_mass_matches_weights(self):
        rng = SeededRNG(2025)
        items = [("a", 1), ("b", 2), ("c", 7)]
        n = 50_000
        counts = Counter(rng.pick_weighted(items) for _ in range(n))
        assert counts["a"] / n == pytest.approx(0.1, abs=0.01)
        assert counts["b"] / n == pytest.approx(0.2, abs=0.01)
        assert counts["c"] / n == pytest.approx(0.7, abs=0.01)

    def test_empty_items_rejected(self):
        with pytest.raises(ValueError):
            SeededRNG(1).pick_weighted([])

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            SeededRNG(1).pick_weighted([("a", 1), ("b", -1)])


class TestSources:
    def test_seeded_rng_is_reproducible(self):
        a = SeededRNG(99)
        b = SeededRNG(99)
        assert [a.random() for _ in range(10)] == [b.random() for _ in range(10)]

    def test_production_rng_in_unit_interval(self):
        rng = ProductionRNG()
        for _ in range(1000):
            value = rng.random()
            assert 0.0 <= value < 1.0

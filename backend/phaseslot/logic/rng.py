"""RNG primitives for grid generation.

All randomness in the engine flows through an ``RNGBase`` instance so tests
and audit runs can inject a seeded or scripted source.
"""
import math
import random
import secrets
from abc import ABC, abstractmethod
from typing import Sequence, TypeVar

T = TypeVar("T")


class RNGBase(ABC):
    """Abstract RNG interface."""

    @abstractmethod
    def random(self) -> float:
        """Return random float in [0, 1)."""
        pass

    def randint(self, a: int, b: int) -> int:
        """Return uniformly distributed int in [a, b] inclusive."""
        if a > b:
            raise ValueError(f"randint bounds out of order: {a} > {b}")
        return math.floor(self.random() * (b - a + 1)) + a

    def pick_weighted(self, items: Sequence[tuple[T, int | float]]) -> T:
        """
        Pick one value with probability proportional to its weight.

        Walks the items in order, subtracting each weight from a draw in
        [0, total). If nothing is selected (all weights zero) the last
        value is returned.
        """
        if not items:
            raise ValueError("pick_weighted requires at least one item")

        total = 0
        for value, weight in items:
            if weight < 0:
                raise ValueError(f"Negative weight {weight} for {value!r}")
            total += weight

        r = self.random() * total
        for value, weight in items:
            if r < weight:
                return value
            r -= weight

        return items[-1][0]


class ProductionRNG(RNGBase):
    """
    Production RNG.

    Uses cryptographically secure source, no fixed seed.
    """

    def random(self) -> float:
        return secrets.randbelow(2**32) / (2**32)


class SeededRNG(RNGBase):
    """
    Test/Simulation RNG.

    Deterministic, fully controlled by seed.
    """

    def __init__(self, seed: int):
        self._rng = random.Random(seed)
        self.seed = seed

    def random(self) -> float:
        return self._rng.random()


_default_rng: RNGBase = ProductionRNG()


def random_int(a: int, b: int, rng: RNGBase | None = None) -> int:
    """Uniform int in [a, b] from the given or default RNG."""
    return (rng or _default_rng).randint(a, b)


def pick_weighted(
    items: Sequence[tuple[T, int | float]], rng: RNGBase | None = None
) -> T:
    """Weighted pick from the given or default RNG."""
    return (rng or _default_rng).pick_weighted(items)

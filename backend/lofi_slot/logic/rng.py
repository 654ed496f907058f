"""RNG sources for reel shuffles and position draws."""
import random
from abc import ABC, abstractmethod


class RNGBase(ABC):
    """Abstract RNG interface."""

    @abstractmethod
    def random(self) -> float:
        """Return random float in [0, 1)."""
        pass

    @abstractmethod
    def randint(self, a: int, b: int) -> int:
        """Return random int in [a, b] inclusive."""
        pass


class ProductionRNG(RNGBase):
    """
    Production RNG.

    Ordinary pseudorandom source seeded from the OS, no fixed seed.
    Not cryptographically secure; play credits carry no real value.
    """

    def __init__(self):
        self._rng = random.Random()

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


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

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

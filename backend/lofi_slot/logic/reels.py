"""Reel generation and circular reel lookups."""
from collections.abc import Sequence

from lofi_slot.logic.models import Reel
from lofi_slot.logic.rng import ProductionRNG, RNGBase

REEL_COUNT = 3


class ReelGenerator:
    """Produces independently shuffled reels over a fixed symbol alphabet."""

    def __init__(self, symbols: Sequence[str], rng: RNGBase | None = None):
        self.symbols: Reel = tuple(symbols)
        self.rng = rng or ProductionRNG()

    def generate(self) -> Reel:
        """
        Return a uniformly random permutation of the alphabet.

        Backwards shuffle: for i from last to 1, swap with a uniform j in [0, i].
        """
        reel = list(self.symbols)
        for i in range(len(reel) - 1, 0, -1):
            j = self.rng.randint(0, i)
            reel[i], reel[j] = reel[j], reel[i]
        return tuple(reel)

    def generate_set(self) -> list[Reel]:
        """Generate a fresh reel set, one independent reel per column."""
        return [self.generate() for _ in range(REEL_COUNT)]

    def random_position(self, reel: Reel) -> int:
        """Uniform index into a reel."""
        return self.rng.randint(0, len(reel) - 1)


def symbol_at(reel: Reel, position: int, offset: int = 0) -> str:
    """Symbol shown `offset` rows away from the middle cell at `position`."""
    return reel[(position + offset) % len(reel)]


def visible_window(reels: Sequence[Reel], positions: Sequence[int]) -> tuple[tuple[str, ...], ...]:
    """Rows top/mid/bot as seen through the cabinet, one symbol per reel."""
    return tuple(
        tuple(symbol_at(reel, pos, offset) for reel, pos in zip(reels, positions))
        for offset in (-1, 0, 1)
    )

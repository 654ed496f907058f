"""Pytest fixtures for backend tests."""
from collections.abc import Sequence
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from lofi_slot import main
from lofi_slot.config import DEFAULT_SYMBOLS
from lofi_slot.logic.engine import EVENTS, GameController
from lofi_slot.logic.models import Reel
from lofi_slot.logic.reels import ReelGenerator
from lofi_slot.logic.rng import SeededRNG
from lofi_slot.logic.scheduler import ManualScheduler


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (run full simulations)"
    )


class RiggedReelGenerator(ReelGenerator):
    """Generator that always deals the same reels and lands on one position."""

    def __init__(self, reels: Sequence[Reel], position: int = 0):
        super().__init__(DEFAULT_SYMBOLS, SeededRNG(seed=0))
        self.reels = [tuple(r) for r in reels]
        self.position = position

    def generate_set(self) -> list[Reel]:
        return list(self.reels)

    def random_position(self, reel: Reel) -> int:
        return self.position


class EventRecorder:
    """Subscribes to every controller event and keeps the payloads."""

    def __init__(self, controller: GameController):
        self.events: list[tuple[str, Any]] = []
        for event in EVENTS:
            controller.subscribe(event, self._recorder(event))

    def _recorder(self, event: str):
        def record(payload: Any) -> None:
            self.events.append((event, payload))
        return record

    def of(self, event: str) -> list[Any]:
        return [payload for name, payload in self.events if name == event]

    def clear(self) -> None:
        self.events.clear()


def rig_reels(controller: GameController, reels: Sequence[Reel], position: int = 0) -> None:
    """Make every following spin deal `reels` and settle on `position`."""
    rigged = RiggedReelGenerator(reels, position)
    controller.generator = rigged
    controller.machine.generator = rigged


S = DEFAULT_SYMBOLS

# Top row triple (index 11), center pair (index 0), bottom nothing (index 1)
TOP_TRIPLE_MID_PAIR_REELS = [
    tuple(S),
    (S[0], S[2], S[1], *S[3:]),
    (S[5], S[3], S[0], S[1], S[2], S[4], *S[6:]),
]

# Identical reels: every row is a triple
ALL_TRIPLE_REELS = [tuple(S)] * 3


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock; nothing fires until the test advances it."""
    return ManualScheduler()


@pytest.fixture
def controller(scheduler: ManualScheduler) -> GameController:
    """Controller with default settings, seeded RNG and a manual clock."""
    return GameController(rng=SeededRNG(seed=1234), scheduler=scheduler)


@pytest.fixture
def recorder(controller: GameController) -> EventRecorder:
    return EventRecorder(controller)


@pytest.fixture
def client_with_manual_clock(
    controller: GameController, monkeypatch: pytest.MonkeyPatch
) -> Generator[TestClient, None, None]:
    """TestClient whose game session runs on the manual clock."""
    monkeypatch.setattr(main, "controller", controller)
    with TestClient(main.app) as client:
        yield client

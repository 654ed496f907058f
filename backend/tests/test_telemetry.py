"""Telemetry emission tests."""
from typing import Any

from lofi_slot.config import Settings
from lofi_slot.config_hash import get_config_hash
from lofi_slot.logic.engine import GameController
from lofi_slot.logic.rng import SeededRNG
from lofi_slot.logic.scheduler import ManualScheduler
from lofi_slot.telemetry import (
    SpinRejectedEvent,
    TelemetryService,
)
from tests.conftest import ALL_TRIPLE_REELS, rig_reels


class RecordingSink:
    """Sink that keeps every emitted event."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        self.events.append((event_name, data))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class FailingSink:
    """Sink that always raises."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        raise ConnectionError("collector down")


class TestTelemetryEvents:
    """Spin lifecycle events reach the sink."""

    def test_spin_emits_started_then_resolved(
        self, controller: GameController, scheduler: ManualScheduler
    ):
        sink = RecordingSink()
        TelemetryService(sink).attach(controller)
        rig_reels(controller, ALL_TRIPLE_REELS)

        controller.spin()
        scheduler.run_until_idle()

        assert sink.names == ["spin_started", "spin_resolved"]
        started = sink.events[0][1]
        assert started["bet"] == 1
        assert started["line_count"] == 1
        assert started["cost"] == 1
        assert started["credits_after"] == 99

        resolved = sink.events[1][1]
        assert resolved["round_id"] == started["round_id"]
        assert resolved["win_lines"] == ["mid"]
        assert resolved["total_win"] == 5
        assert resolved["credits_after"] == 104
        assert resolved["positions"] == [0, 0, 0]
        assert resolved["config_hash"] == get_config_hash()

    def test_rejected_spin_emits_rejection(self, scheduler: ManualScheduler):
        controller = GameController(
            config=Settings(starting_credits=0), rng=SeededRNG(seed=2), scheduler=scheduler
        )
        sink = RecordingSink()
        TelemetryService(sink).attach(controller)

        controller.spin()

        assert sink.events == [
            ("spin_rejected", {"reason": "INSUFFICIENT_CREDITS", "cost": 1, "credits": 0})
        ]

    def test_ignored_double_spin_emits_once(
        self, controller: GameController, scheduler: ManualScheduler
    ):
        sink = RecordingSink()
        TelemetryService(sink).attach(controller)
        controller.spin()
        controller.spin()
        scheduler.run_until_idle()
        assert sink.names == ["spin_started", "spin_resolved"]


class TestTelemetryDelivery:
    """Sink failures never break a spin."""

    def test_failing_sink_is_counted(
        self, controller: GameController, scheduler: ManualScheduler
    ):
        service = TelemetryService(FailingSink())
        service.attach(controller)

        controller.spin()
        scheduler.run_until_idle()

        assert service._sink_errors == 2
        assert controller.state.spinning is False

    def test_set_sink(self):
        service = TelemetryService(FailingSink())
        sink = RecordingSink()
        service.set_sink(sink)
        service.emit_spin_rejected(SpinRejectedEvent(reason="INSUFFICIENT_CREDITS", cost=3, credits=1))
        assert sink.names == ["spin_rejected"]

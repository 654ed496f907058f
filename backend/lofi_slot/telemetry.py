"""Server-side telemetry for spin lifecycle events."""
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from lofi_slot.config_hash import get_config_hash
from lofi_slot.logic.engine import (
    SPIN_REJECTED,
    SPIN_RESOLVED,
    SPIN_STARTED,
    GameController,
)
from lofi_slot.logic.models import SpinRejected, SpinResolved, SpinStarted


logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Protocol for telemetry sinks."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit a telemetry event."""
        ...


class LoggingTelemetrySink:
    """Default sink that logs telemetry events."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Log telemetry event."""
        logger.info("TELEMETRY %s: %s", event_name, data)


@dataclass
class SpinStartedEvent:
    """spin_started telemetry event."""

    round_id: str
    bet: int
    line_count: int
    cost: int
    credits_after: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "round_id": self.round_id,
            "bet": self.bet,
            "line_count": self.line_count,
            "cost": self.cost,
            "credits_after": self.credits_after,
        }


@dataclass
class SpinResolvedEvent:
    """spin_resolved telemetry event."""

    round_id: str
    bet: int
    extra_lines: bool
    positions: list[int]
    win_lines: list[str]
    total_win: int
    credits_after: int
    config_hash: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "round_id": self.round_id,
            "bet": self.bet,
            "extra_lines": self.extra_lines,
            "positions": self.positions,
            "win_lines": self.win_lines,
            "total_win": self.total_win,
            "credits_after": self.credits_after,
            "config_hash": self.config_hash,
        }


@dataclass
class SpinRejectedEvent:
    """spin_rejected telemetry event."""

    reason: str  # "INSUFFICIENT_CREDITS"
    cost: int
    credits: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "reason": self.reason,
            "cost": self.cost,
            "credits": self.credits,
        }


class TelemetryService:
    """Service for emitting server telemetry events."""

    def __init__(self, sink: TelemetrySink | None = None):
        self._sink = sink or LoggingTelemetrySink()
        self._sink_errors = 0  # Counter for sink failures

    def set_sink(self, sink: TelemetrySink) -> None:
        """Set the telemetry sink (useful for testing)."""
        self._sink = sink

    def _safe_emit(self, event_name: str, data: dict[str, Any]) -> None:
        """
        Emit event with exception safety.

        Sink failures MUST NOT break the spin timeline.
        """
        try:
            self._sink.emit(event_name, data)
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Telemetry sink error (count=%d): %s - %s",
                self._sink_errors,
                event_name,
                str(e),
            )

    def emit_spin_started(self, event: SpinStartedEvent) -> None:
        self._safe_emit("spin_started", event.to_dict())

    def emit_spin_resolved(self, event: SpinResolvedEvent) -> None:
        self._safe_emit("spin_resolved", event.to_dict())

    def emit_spin_rejected(self, event: SpinRejectedEvent) -> None:
        self._safe_emit("spin_rejected", event.to_dict())

    def attach(self, controller: GameController) -> None:
        """Subscribe to a controller's spin lifecycle hooks."""
        config_hash = get_config_hash(controller.config)

        def on_started(started: SpinStarted) -> None:
            self.emit_spin_started(SpinStartedEvent(**started.model_dump()))

        def on_resolved(resolved: SpinResolved) -> None:
            snapshot = resolved.snapshot
            self.emit_spin_resolved(
                SpinResolvedEvent(
                    round_id=snapshot.round_id,
                    bet=snapshot.bet,
                    extra_lines=snapshot.extra_lines,
                    positions=list(snapshot.positions),
                    win_lines=[w.line.value for w in resolved.wins],
                    total_win=resolved.total_win,
                    credits_after=resolved.credits_after,
                    config_hash=config_hash,
                )
            )

        def on_rejected(rejected: SpinRejected) -> None:
            self.emit_spin_rejected(SpinRejectedEvent(**rejected.model_dump()))

        controller.subscribe(SPIN_STARTED, on_started)
        controller.subscribe(SPIN_RESOLVED, on_resolved)
        controller.subscribe(SPIN_REJECTED, on_rejected)


# Global instance
telemetry_service = TelemetryService()

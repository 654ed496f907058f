"""Game controller: the single entry point for the UI layer."""
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from lofi_slot.config import Settings, settings
from lofi_slot.errors import AlreadySpinning, ErrorCode, InsufficientCredits
from lofi_slot.logic.models import (
    GameSnapshot,
    GameState,
    SpinRejected,
    SpinResolved,
)
from lofi_slot.logic.paylines import total_payout
from lofi_slot.logic.reels import ReelGenerator, symbol_at, visible_window
from lofi_slot.logic.rng import ProductionRNG, RNGBase
from lofi_slot.logic.scheduler import AsyncioScheduler, Scheduler
from lofi_slot.logic.spin import SpinStateMachine
from lofi_slot.logic.wallet import CreditManager
from lofi_slot.validators import validate_game_settings

logger = logging.getLogger(__name__)

NOT_ENOUGH_CREDITS_MESSAGE = "Not enough credits for that spin."

# Events a subscriber can listen to
STATE_CHANGED = "state_changed"
SPIN_STARTED = "spin_started"
SPIN_RESOLVED = "spin_resolved"
SPIN_WON = "spin_won"
SPIN_REJECTED = "spin_rejected"
EVENTS = (STATE_CHANGED, SPIN_STARTED, SPIN_RESOLVED, SPIN_WON, SPIN_REJECTED)


class GameController:
    """
    Game session facade.

    Implements:
    - Commands: spin, reset, set_bet, set_extra_lines
    - Read access: snapshot, symbol_at
    - Fire-and-forget event hooks for sound cues and telemetry
    """

    def __init__(
        self,
        config: Settings | None = None,
        rng: RNGBase | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.config = config or settings
        validate_game_settings(self.config)

        self.rng = rng or ProductionRNG()
        self.state = GameState()
        self.wallet = CreditManager(
            self.state,
            max_bet=self.config.max_bet,
            starting_credits=self.config.starting_credits,
        )
        self.generator = ReelGenerator(self.config.symbols, self.rng)
        self.machine = SpinStateMachine(
            self.state,
            self.wallet,
            self.generator,
            scheduler or AsyncioScheduler(),
            self.config,
            on_update=self._publish,
            on_resolved=self._spin_resolved,
        )
        self._listeners: dict[str, list[Callable[[Any], None]]] = defaultdict(list)
        self._listener_errors = 0
        self.reset()

    # === Event hooks ===

    def subscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        """Register callback for one of EVENTS."""
        if event not in EVENTS:
            raise ValueError(f"Unknown event {event!r}, expected one of {EVENTS}")
        self._listeners[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def _emit(self, event: str, payload: Any) -> None:
        """
        Notify listeners with exception safety.

        A failing listener must never break the spin timeline.
        """
        for callback in list(self._listeners[event]):
            try:
                callback(payload)
            except Exception as e:
                self._listener_errors += 1
                logger.warning(
                    "Listener error (count=%d): %s - %s",
                    self._listener_errors,
                    event,
                    str(e),
                )

    def _publish(self) -> None:
        if self._listeners[STATE_CHANGED]:
            self._emit(STATE_CHANGED, self.snapshot())

    def _spin_resolved(self, resolved: SpinResolved) -> None:
        self._publish()
        self._emit(SPIN_RESOLVED, resolved)
        if resolved.wins:
            self._emit(SPIN_WON, resolved)

    # === Commands ===

    def spin(self) -> GameSnapshot:
        """
        Start a spin if none is in flight and the cost is affordable.

        A spin requested mid-spin is ignored; an unaffordable one only
        updates the status message.
        """
        try:
            started = self.machine.start()
        except AlreadySpinning:
            logger.debug("Spin ignored: round %s in progress", self.state.round_id)
            return self.snapshot()
        except InsufficientCredits as e:
            logger.warning("Spin rejected: %s", e.message)
            self.state.message = NOT_ENOUGH_CREDITS_MESSAGE
            self._publish()
            self._emit(SPIN_REJECTED, SpinRejected(
                reason=ErrorCode.INSUFFICIENT_CREDITS.value,
                cost=e.cost,
                credits=e.credits,
            ))
            return self.snapshot()

        self._publish()
        self._emit(SPIN_STARTED, started)
        return self.snapshot()

    def reset(self) -> GameSnapshot:
        """Cancel any spin and restore the canonical starting state."""
        self.machine.reset()
        self.wallet.reset()
        self.state.message = self.config.initial_message
        logger.info("Game reset: credits=%d", self.state.credits)
        self._publish()
        return self.snapshot()

    def set_bet(self, bet: int) -> GameSnapshot:
        self.wallet.set_bet(bet)
        self._publish()
        return self.snapshot()

    def set_extra_lines(self, enabled: bool) -> GameSnapshot:
        self.wallet.set_extra_lines(enabled)
        self._publish()
        return self.snapshot()

    def shutdown(self) -> None:
        """Drop pending timers, e.g. when the event loop is closing."""
        self.machine.cancel()

    # === Read access ===

    def symbol_at(self, reel_index: int, offset: int = 0) -> str:
        """Symbol currently shown on a reel, offset rows from the middle."""
        return symbol_at(
            self.state.reels[reel_index], self.state.positions[reel_index], offset
        )

    def snapshot(self) -> GameSnapshot:
        state = self.state
        return GameSnapshot(
            credits=state.credits,
            bet=state.bet,
            spin_cost=self.wallet.spin_cost(),
            bet_cap=self.wallet.bet_cap(),
            extra_lines=state.extra_lines,
            positions=tuple(state.positions),
            window=visible_window(state.reels, state.positions),
            spinning=state.spinning,
            phase=state.phase,
            reel_states=tuple(state.reel_states),
            wins=tuple(state.wins),
            total_win=total_payout(state.wins),
            message=state.message,
            round_id=state.round_id,
        )

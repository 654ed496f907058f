"""Timed spin state machine: IDLE -> SPINNING -> RESOLVING -> IDLE."""
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from lofi_slot.config import Settings
from lofi_slot.errors import AlreadySpinning
from lofi_slot.logic.models import (
    GameState,
    Reel,
    ReelState,
    SpinPhase,
    SpinResolved,
    SpinSnapshot,
    SpinStarted,
)
from lofi_slot.logic.paylines import describe_wins, evaluate, total_payout
from lofi_slot.logic.reels import REEL_COUNT, ReelGenerator
from lofi_slot.logic.scheduler import Scheduler, TimerHandle
from lofi_slot.logic.wallet import CreditManager

logger = logging.getLogger(__name__)


@dataclass
class SpinRun:
    """
    Everything one spin's timer callbacks need.

    Created at spin start and bound into each callback, so a callback only
    ever sees the reels, bet and line mode of its own spin.
    """

    round_id: str
    reels: tuple[Reel, ...]
    bet: int
    extra_lines: bool
    final_positions: list[int | None] = field(default_factory=lambda: [None] * REEL_COUNT)
    tick_handles: list[TimerHandle | None] = field(default_factory=lambda: [None] * REEL_COUNT)
    settle_handles: list[TimerHandle | None] = field(default_factory=lambda: [None] * REEL_COUNT)
    resolve_handle: TimerHandle | None = None
    settled: int = 0

    def cancel(self) -> None:
        """Cancel every timer this spin still has pending."""
        for handle in [*self.tick_handles, *self.settle_handles, self.resolve_handle]:
            if handle is not None:
                handle.cancel()
        self.tick_handles = [None] * REEL_COUNT
        self.settle_handles = [None] * REEL_COUNT
        self.resolve_handle = None


class SpinStateMachine:
    """
    Orchestrates the timeline of a spin across three reels.

    Timeline (defaults):
    - every reel rolls with its own 70ms tick, drawing a random position
    - reels settle at 900ms, 1250ms and 1600ms on a fresh random position
    - 80ms after the last reel settles the spin resolves in one step:
      snapshot, evaluate, credit, publish
    """

    def __init__(
        self,
        state: GameState,
        wallet: CreditManager,
        generator: ReelGenerator,
        scheduler: Scheduler,
        config: Settings,
        on_update: Callable[[], None],
        on_resolved: Callable[[SpinResolved], None],
    ):
        self.state = state
        self.wallet = wallet
        self.generator = generator
        self.scheduler = scheduler
        self.tick_s = config.tick_ms / 1000
        self.settle_s = [ms / 1000 for ms in config.settle_ms]
        self.resolve_grace_s = config.resolve_grace_ms / 1000
        self._on_update = on_update
        self._on_resolved = on_resolved
        self._run: SpinRun | None = None

    @property
    def in_flight(self) -> bool:
        return self._run is not None

    def start(self) -> SpinStarted:
        """
        Charge the spin and start the reels rolling.

        Raises AlreadySpinning if a spin is in flight and InsufficientCredits
        if the cost is not covered. Timers are scheduled before anything is
        charged, so a scheduler failure (e.g. no running event loop) also
        propagates with nothing mutated.
        """
        if self.state.spinning:
            raise AlreadySpinning()

        bet = self.state.bet
        extra_lines = self.state.extra_lines
        line_count = self.wallet.active_line_count
        cost = self.wallet.spin_cost()
        self.wallet.ensure_affordable(cost)

        reels = tuple(self.generator.generate_set())
        positions = [self.generator.random_position(reel) for reel in reels]
        run = SpinRun(
            round_id=str(uuid.uuid4()),
            reels=reels,
            bet=bet,
            extra_lines=extra_lines,
        )
        try:
            self._schedule(run)
        except Exception:
            run.cancel()
            raise

        self.wallet.charge(cost)
        self._run = run

        state = self.state
        state.reels = list(reels)
        state.positions = positions
        state.wins = []
        state.message = ""
        state.round_id = run.round_id
        state.spinning = True
        state.phase = SpinPhase.SPINNING
        state.reel_states = [ReelState.ROLLING] * REEL_COUNT

        logger.info(
            "Spin %s started: bet=%d lines=%d cost=%d credits=%d",
            run.round_id, bet, line_count, cost, state.credits,
        )
        return SpinStarted(
            round_id=run.round_id,
            bet=bet,
            line_count=line_count,
            cost=cost,
            credits_after=state.credits,
        )

    def _schedule(self, run: SpinRun) -> None:
        for r in range(REEL_COUNT):
            run.tick_handles[r] = self.scheduler.call_later(
                self.tick_s, partial(self._tick, run, r)
            )
            run.settle_handles[r] = self.scheduler.call_later(
                self.settle_s[r], partial(self._settle, run, r)
            )

    def _tick(self, run: SpinRun, reel_index: int) -> None:
        self.state.positions[reel_index] = self.generator.random_position(run.reels[reel_index])
        run.tick_handles[reel_index] = self.scheduler.call_later(
            self.tick_s, partial(self._tick, run, reel_index)
        )
        self._on_update()

    def _settle(self, run: SpinRun, reel_index: int) -> None:
        tick = run.tick_handles[reel_index]
        if tick is not None:
            tick.cancel()
            run.tick_handles[reel_index] = None
        run.settle_handles[reel_index] = None

        final = self.generator.random_position(run.reels[reel_index])
        run.final_positions[reel_index] = final
        self.state.positions[reel_index] = final
        self.state.reel_states[reel_index] = ReelState.SETTLED
        run.settled += 1
        logger.debug("Spin %s reel %d settled at %d", run.round_id, reel_index, final)

        if run.settled == REEL_COUNT:
            run.resolve_handle = self.scheduler.call_later(
                self.resolve_grace_s, partial(self._resolve, run)
            )
        self._on_update()

    def _resolve(self, run: SpinRun) -> None:
        run.resolve_handle = None
        state = self.state
        state.phase = SpinPhase.RESOLVING

        snapshot = SpinSnapshot(
            round_id=run.round_id,
            reels=run.reels,
            positions=tuple(run.final_positions),
            bet=run.bet,
            extra_lines=run.extra_lines,
        )
        state.spinning = False

        wins = evaluate(snapshot)
        total = total_payout(wins)
        self.wallet.credit(total)
        state.wins = wins
        state.message = describe_wins(wins)
        state.phase = SpinPhase.IDLE
        self._run = None

        logger.info(
            "Spin %s resolved: wins=%d total=%d credits=%d",
            run.round_id, len(wins), total, state.credits,
        )
        self._on_resolved(SpinResolved(
            snapshot=snapshot,
            wins=tuple(wins),
            total_win=total,
            credits_after=state.credits,
        ))

    def cancel(self) -> None:
        """Cancel the in-flight spin's timers without touching credits."""
        if self._run is not None:
            logger.info("Spin %s cancelled", self._run.round_id)
            self._run.cancel()
            self._run = None

    def reset(self) -> None:
        """Cancel any spin and return to IDLE with a fresh reel set."""
        self.cancel()
        state = self.state
        state.phase = SpinPhase.IDLE
        state.spinning = False
        state.reel_states = [ReelState.SETTLED] * REEL_COUNT
        state.positions = [0] * REEL_COUNT
        state.reels = self.generator.generate_set()
        state.wins = []
        state.round_id = None

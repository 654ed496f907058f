"""Credit and bet bookkeeping for the game session."""
import logging

from lofi_slot.errors import InsufficientCredits
from lofi_slot.logic.models import GameState

logger = logging.getLogger(__name__)

EXTRA_LINE_COUNT = 3


class CreditManager:
    """
    Owns credits, bet size and payline mode on the game state.

    Every credit-changing operation re-clamps the bet before returning, so
    no observer ever sees a bet the current credits cannot cover.
    """

    def __init__(self, state: GameState, max_bet: int, starting_credits: int):
        self.state = state
        self.max_bet = max_bet
        self.starting_credits = starting_credits

    @property
    def active_line_count(self) -> int:
        return EXTRA_LINE_COUNT if self.state.extra_lines else 1

    def spin_cost(self) -> int:
        """Cost of the next spin: bet on every active line."""
        return self.state.bet * self.active_line_count

    def bet_cap(self) -> int:
        """Largest affordable bet, never below 1."""
        return max(1, min(self.max_bet, self.state.credits // self.active_line_count))

    def clamp_bet(self) -> None:
        self.state.bet = min(max(self.state.bet, 1), self.bet_cap())

    def set_bet(self, bet: int) -> None:
        """Set the bet, clamped into [1, bet_cap]. Ignored while spinning."""
        if self.state.spinning:
            return
        self.state.bet = min(max(bet, 1), self.bet_cap())

    def set_extra_lines(self, enabled: bool) -> None:
        """Switch payline mode and re-clamp the bet. Ignored while spinning."""
        if self.state.spinning:
            return
        self.state.extra_lines = enabled
        self.clamp_bet()

    def ensure_affordable(self, amount: int) -> None:
        if self.state.credits < amount:
            raise InsufficientCredits(cost=amount, credits=self.state.credits)

    def charge(self, amount: int) -> None:
        """
        Deduct amount from credits.

        Raises InsufficientCredits and leaves credits untouched if the
        balance does not cover it.
        """
        self.ensure_affordable(amount)
        self.state.credits -= amount
        self.clamp_bet()

    def credit(self, amount: int) -> None:
        """Add a payout to credits."""
        if amount < 0:
            raise ValueError(f"Payout must not be negative: {amount}")
        self.state.credits += amount
        self.clamp_bet()

    def reset(self) -> None:
        """Restore default credits, bet and line mode."""
        self.state.credits = self.starting_credits
        self.state.bet = 1
        self.state.extra_lines = False
        self.clamp_bet()
        logger.debug("Credits reset to %d", self.starting_credits)

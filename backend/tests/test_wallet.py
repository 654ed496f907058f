"""Credit and bet bookkeeping tests."""
import pytest

from lofi_slot.errors import ErrorCode, InsufficientCredits
from lofi_slot.logic.models import GameState
from lofi_slot.logic.rng import SeededRNG
from lofi_slot.logic.wallet import CreditManager


def make_wallet(credits: int = 100, bet: int = 1, extra_lines: bool = False) -> CreditManager:
    state = GameState(credits=credits, bet=bet, extra_lines=extra_lines)
    return CreditManager(state, max_bet=10, starting_credits=100)


class TestSpinCost:
    """spin_cost = bet x active lines."""

    def test_single_line_cost(self):
        wallet = make_wallet(bet=4)
        assert wallet.spin_cost() == 4

    def test_extra_lines_triple_cost(self):
        wallet = make_wallet(bet=4, extra_lines=True)
        assert wallet.active_line_count == 3
        assert wallet.spin_cost() == 12


class TestBetCap:
    """bet_cap = min(MAX_BET, credits // lines), floored at 1."""

    def test_cap_limited_by_max_bet(self):
        assert make_wallet(credits=100).bet_cap() == 10

    def test_cap_limited_by_credits(self):
        assert make_wallet(credits=7).bet_cap() == 7

    def test_cap_divides_by_line_count(self):
        assert make_wallet(credits=20, extra_lines=True).bet_cap() == 6

    def test_cap_floored_at_one_when_broke(self):
        assert make_wallet(credits=0).bet_cap() == 1
        assert make_wallet(credits=2, extra_lines=True).bet_cap() == 1


class TestSetBet:
    """set_bet clamps instead of rejecting."""

    def test_bet_within_range_is_kept(self):
        wallet = make_wallet()
        wallet.set_bet(6)
        assert wallet.state.bet == 6

    def test_bet_above_cap_is_clamped(self):
        wallet = make_wallet(credits=5)
        wallet.set_bet(9)
        assert wallet.state.bet == 5

    @pytest.mark.parametrize("bet", [0, -3])
    def test_bet_below_one_is_clamped(self, bet: int):
        wallet = make_wallet(bet=5)
        wallet.set_bet(bet)
        assert wallet.state.bet == 1

    def test_bet_ignored_while_spinning(self):
        wallet = make_wallet(bet=2)
        wallet.state.spinning = True
        wallet.set_bet(8)
        assert wallet.state.bet == 2


class TestSetExtraLines:
    """Switching line mode re-clamps the bet immediately."""

    def test_enabling_extra_lines_clamps_bet(self):
        wallet = make_wallet(credits=12, bet=10)
        wallet.set_extra_lines(True)
        assert wallet.state.extra_lines is True
        assert wallet.state.bet == 4
        assert wallet.spin_cost() == 12

    def test_disabling_extra_lines_keeps_bet(self):
        wallet = make_wallet(credits=12, bet=4, extra_lines=True)
        wallet.set_extra_lines(False)
        assert wallet.state.bet == 4

    def test_mode_change_ignored_while_spinning(self):
        wallet = make_wallet()
        wallet.state.spinning = True
        wallet.set_extra_lines(True)
        assert wallet.state.extra_lines is False


class TestChargeAndCredit:
    """charge deducts or fails cleanly; credit always adds."""

    def test_charge_deducts(self):
        wallet = make_wallet(credits=10)
        wallet.charge(3)
        assert wallet.state.credits == 7

    def test_charge_exact_balance(self):
        wallet = make_wallet(credits=3)
        wallet.charge(3)
        assert wallet.state.credits == 0

    def test_charge_insufficient_raises_without_deducting(self):
        wallet = make_wallet(credits=2, bet=1)
        with pytest.raises(InsufficientCredits) as exc_info:
            wallet.charge(3)
        assert wallet.state.credits == 2
        assert exc_info.value.code == ErrorCode.INSUFFICIENT_CREDITS
        assert exc_info.value.cost == 3
        assert exc_info.value.credits == 2
        assert exc_info.value.recoverable is True

    def test_charge_reclamps_bet(self):
        wallet = make_wallet(credits=15, bet=10)
        wallet.charge(10)
        assert wallet.state.credits == 5
        assert wallet.state.bet == 5

    def test_credit_adds(self):
        wallet = make_wallet(credits=5)
        wallet.credit(14)
        assert wallet.state.credits == 19

    def test_credit_zero_is_noop(self):
        wallet = make_wallet(credits=5)
        wallet.credit(0)
        assert wallet.state.credits == 5

    def test_negative_credit_rejected(self):
        wallet = make_wallet(credits=5)
        with pytest.raises(ValueError):
            wallet.credit(-1)
        assert wallet.state.credits == 5

    def test_reset_restores_defaults(self):
        wallet = make_wallet(credits=3, bet=3, extra_lines=True)
        wallet.reset()
        assert wallet.state.credits == 100
        assert wallet.state.bet == 1
        assert wallet.state.extra_lines is False


class TestAffordabilityClamp:
    """For all reachable states: cost = bet x lines and bet <= cap."""

    def test_random_sweep_keeps_bet_affordable(self):
        rng = SeededRNG(seed=2024)
        for _ in range(1000):
            credits = rng.randint(0, 200)
            wallet = make_wallet(credits=credits, bet=1)
            wallet.set_extra_lines(rng.random() < 0.5)
            wallet.set_bet(rng.randint(-5, 20))

            lines = wallet.active_line_count
            assert 1 <= wallet.state.bet <= wallet.bet_cap()
            assert wallet.spin_cost() == wallet.state.bet * lines

            # Reduce credits and check the bet follows immediately
            wallet.charge(rng.randint(0, wallet.state.credits))
            remaining = wallet.state.credits
            assert 1 <= wallet.state.bet <= max(1, min(10, remaining // lines))
            if remaining >= lines:
                assert wallet.spin_cost() <= remaining

            # Toggling lines never leaves an unaffordable bet either
            wallet.set_extra_lines(not wallet.state.extra_lines)
            assert wallet.state.bet <= wallet.bet_cap()

"""Payline evaluation and payouts."""
from collections.abc import Sequence

from lofi_slot.logic.models import Payline, SpinSnapshot, Win
from lofi_slot.logic.reels import symbol_at

# Bet multiplier by number of matching symbols on a line
PAYOUT_MULTIPLIERS = {3: 5, 2: 2}


def active_paylines(extra_lines: bool) -> list[Payline]:
    """Paylines checked for a spin, in top-to-bottom order."""
    if extra_lines:
        return [Payline.TOP, Payline.MID, Payline.BOT]
    return [Payline.MID]


def payout(bet: int, match_count: int) -> int:
    """Credits awarded for a line with `match_count` equal symbols."""
    return bet * PAYOUT_MULTIPLIERS.get(match_count, 0)


def check_line(symbols: Sequence[str]) -> tuple[int, str | None]:
    """
    Check the three symbols of one line.

    Returns (match_count, matched_symbol); (0, None) when nothing matches.
    Pairs are checked left/middle, middle/right, then left/right.
    """
    s0, s1, s2 = symbols
    if s0 == s1 == s2:
        return 3, s0
    if s0 == s1:
        return 2, s0
    if s1 == s2:
        return 2, s1
    if s0 == s2:
        return 2, s0
    return 0, None


def evaluate(snapshot: SpinSnapshot) -> list[Win]:
    """
    Evaluate every active payline of a settled spin.

    Lines are independent; each qualifying line yields one Win paid at the
    bet captured when the spin started.
    """
    wins: list[Win] = []
    for line in active_paylines(snapshot.extra_lines):
        symbols = [
            symbol_at(reel, pos, line.offset)
            for reel, pos in zip(snapshot.reels, snapshot.positions)
        ]
        match_count, symbol = check_line(symbols)
        if match_count >= 2:
            wins.append(Win(
                line=line,
                symbol=symbol,
                match_count=match_count,
                payout=payout(snapshot.bet, match_count),
            ))
    return wins


def total_payout(wins: Sequence[Win]) -> int:
    return sum(w.payout for w in wins)


def describe_wins(wins: Sequence[Win]) -> str:
    """Status line for a resolved spin."""
    if not wins:
        return "No win — try again!"
    details = " • ".join(
        f"{w.line.label}: {w.symbol} x{w.match_count} (+{w.payout})" for w in wins
    )
    return f"Win on {len(wins)} line(s)! +{total_payout(wins)} — {details}"

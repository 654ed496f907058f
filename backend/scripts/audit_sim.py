#!/usr/bin/env python3
"""
Headless audit simulation.

Drives full spins through the game controller on a virtual clock and
reports return-to-player and hit frequency against the theoretical value.

Usage:
    python -m scripts.audit_sim --lines 1 --rounds 100000 --seed AUDIT_2025
    python -m scripts.audit_sim --lines 3 --rounds 50000 --seed AUDIT_2025 --out out/audit_3.csv
"""
import argparse
import csv
import hashlib
import sys
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from lofi_slot.config import Settings, settings
from lofi_slot.config_hash import get_config_hash
from lofi_slot.logic.engine import SPIN_RESOLVED, SPIN_STARTED, GameController
from lofi_slot.logic.models import SpinResolved, SpinStarted
from lofi_slot.logic.paylines import PAYOUT_MULTIPLIERS
from lofi_slot.logic.rng import SeededRNG
from lofi_slot.logic.scheduler import ManualScheduler

# Enough credits that a simulation never runs dry
SIMULATION_CREDITS = 10**12


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    rounds: int = 0
    total_wagered: int = 0
    total_won: int = 0
    winning_rounds: int = 0
    max_round_win: int = 0
    line_wins: Counter = field(default_factory=Counter)
    match_counts: Counter = field(default_factory=Counter)

    @property
    def rtp(self) -> float:
        return self.total_won / self.total_wagered if self.total_wagered else 0.0

    @property
    def hit_frequency(self) -> float:
        return self.winning_rounds / self.rounds if self.rounds else 0.0


def theoretical_rtp(symbol_count: int) -> float:
    """
    Expected return per credit wagered on one line.

    Three independent uniform symbols: all equal with probability 1/n^2,
    exactly one pair with probability 3(n-1)/n^2.
    """
    n = symbol_count
    p_triple = 1 / n**2
    p_pair = 3 * (n - 1) / n**2
    return PAYOUT_MULTIPLIERS[3] * p_triple + PAYOUT_MULTIPLIERS[2] * p_pair


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def run_simulation(
    rounds: int,
    seed_str: str,
    extra_lines: bool = False,
    bet: int = 1,
    verbose: bool = False,
) -> SimulationStats:
    """
    Run headless simulation.

    Args:
        rounds: Number of spins to simulate
        seed_str: Seed string for reproducibility
        extra_lines: Play all three paylines
        bet: Bet per line
        verbose: Print progress

    Returns:
        SimulationStats with aggregated results
    """
    config = Settings(starting_credits=SIMULATION_CREDITS)
    scheduler = ManualScheduler()
    controller = GameController(
        config=config, rng=SeededRNG(seed=seed_to_int(seed_str)), scheduler=scheduler
    )
    controller.set_extra_lines(extra_lines)
    controller.set_bet(bet)

    stats = SimulationStats()

    def on_started(started: SpinStarted) -> None:
        stats.total_wagered += started.cost

    def on_resolved(resolved: SpinResolved) -> None:
        stats.rounds += 1
        stats.total_won += resolved.total_win
        stats.max_round_win = max(stats.max_round_win, resolved.total_win)
        if resolved.wins:
            stats.winning_rounds += 1
        for win in resolved.wins:
            stats.line_wins[win.line.value] += 1
            stats.match_counts[win.match_count] += 1

    controller.subscribe(SPIN_STARTED, on_started)
    controller.subscribe(SPIN_RESOLVED, on_resolved)

    progress_interval = max(1, rounds // 100)
    for round_count in range(rounds):
        if verbose and round_count % progress_interval == 0:
            pct = (round_count / rounds) * 100
            print(f"\rProgress: {pct:.1f}%", end="", flush=True)
        controller.spin()
        scheduler.run_until_idle()

    if verbose:
        print("\rProgress: 100.0%")
    return stats


def generate_csv(
    rounds: int,
    seed_str: str,
    extra_lines: bool,
    bet: int,
    stats: SimulationStats,
    output_path: str,
) -> None:
    """Write a single summary row."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    row = {
        "config_hash": get_config_hash(),
        "timestamp": get_timestamp_iso(),
        "seed": seed_str,
        "rounds": rounds,
        "lines": 3 if extra_lines else 1,
        "bet": bet,
        "total_wagered": stats.total_wagered,
        "total_won": stats.total_won,
        "rtp": f"{stats.rtp:.6f}",
        "theoretical_rtp": f"{theoretical_rtp(len(settings.symbols)):.6f}",
        "hit_frequency": f"{stats.hit_frequency:.6f}",
        "max_round_win": stats.max_round_win,
        "pairs": stats.match_counts[2],
        "triples": stats.match_counts[3],
    }
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row))
        writer.writeheader()
        writer.writerow(row)


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Headless slot audit simulation")
    parser.add_argument(
        "--lines",
        type=int,
        choices=[1, 3],
        default=1,
        help="Active paylines: 1 (center) or 3 (extra lines)",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        required=True,
        help="Number of spins to simulate",
    )
    parser.add_argument(
        "--seed",
        type=str,
        required=True,
        help="Seed string for reproducibility",
    )
    parser.add_argument(
        "--bet",
        type=int,
        default=1,
        help="Bet per line",
    )
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="Optional output CSV path",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show progress",
    )

    args = parser.parse_args()
    extra_lines = args.lines == 3

    print(f"Running simulation: lines={args.lines}, rounds={args.rounds}, seed={args.seed}")
    print(f"Config hash: {get_config_hash()}")

    stats = run_simulation(
        rounds=args.rounds,
        seed_str=args.seed,
        extra_lines=extra_lines,
        bet=args.bet,
        verbose=args.verbose,
    )

    if args.out:
        generate_csv(
            rounds=args.rounds,
            seed_str=args.seed,
            extra_lines=extra_lines,
            bet=args.bet,
            stats=stats,
            output_path=args.out,
        )

    print("\nSummary:")
    print(f"  Rounds: {stats.rounds}")
    print(f"  Total wagered: {stats.total_wagered}")
    print(f"  Total won: {stats.total_won}")
    print(f"  RTP: {stats.rtp * 100:.4f}% (theoretical {theoretical_rtp(len(settings.symbols)) * 100:.4f}%)")
    print(f"  Hit frequency: {stats.hit_frequency * 100:.4f}%")
    print(f"  Pairs: {stats.match_counts[2]}  Triples: {stats.match_counts[3]}")
    for line, count in sorted(stats.line_wins.items()):
        print(f"  Wins on {line}: {count}")
    print(f"  Max round win: {stats.max_round_win}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Audit simulation script.

Runs the spin resolver headlessly with a seeded RNG and writes one CSV row
of payout metrics, tagged with the config hash for reproducibility.

Usage:
    python -m scripts.audit_sim --phase calm --rounds 100000 --seed AUDIT_2025 --out out/audit_calm.csv
    python -m scripts.audit_sim --phase cycle --rounds 100000 --seed AUDIT_2025 --out out/audit_cycle.csv
"""
import argparse
import csv
import hashlib
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from phaseslot.config_hash import get_config_hash
from phaseslot.logging_setup import configure_logging
from phaseslot.logic.engine import GameEngine, is_big_win
from phaseslot.logic.models import GameConfig, Symbol
from phaseslot.logic.phase import LOOP_DURATION_MS, Phase, phase_from_elapsed
from phaseslot.logic.rng import SeededRNG


logger = logging.getLogger("phaseslot.audit_sim")

PHASE_CHOICES = {
    "calm": Phase.CALM,
    "surge": Phase.SURGE,
    "quantum": Phase.QUANTUM,
}


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    total_wagered: float = 0.0
    total_won: float = 0.0
    rounds: int = 0
    wins: int = 0
    big_wins: int = 0
    lines_won: int = 0
    jackpot_lines: int = 0
    win_x_values: list[float] = field(default_factory=list)
    max_win_x_observed: float = 0.0
    rounds_by_phase: dict[str, int] = field(default_factory=dict)


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def phase_for_round(phase_arg: str, rng: SeededRNG) -> Phase:
    """
    Phase for one simulated round.

    'cycle' samples a uniform point in the loop, which weights each phase
    by the share of time it occupies.
    """
    if phase_arg == "cycle":
        return phase_from_elapsed(rng.randint(0, LOOP_DURATION_MS - 1))
    return PHASE_CHOICES[phase_arg]


def run_simulation(
    phase_arg: str,
    rounds: int,
    seed_str: str,
    bet_amount: float = 1.0,
) -> SimulationStats:
    """
    Run headless simulation.

    Args:
        phase_arg: 'calm', 'surge', 'quantum' or 'cycle'
        rounds: Number of rounds to simulate
        seed_str: Seed string for reproducibility
        bet_amount: Stake per round

    Returns:
        SimulationStats with aggregated results
    """
    rng = SeededRNG(seed=seed_to_int(seed_str))
    engine = GameEngine(rng=rng)
    config = GameConfig(bet_amount=bet_amount)

    stats = SimulationStats()
    progress_interval = max(1, rounds // 10)

    for round_index in range(rounds):
        if round_index and round_index % progress_interval == 0:
            logger.debug("Progress: %d/%d", round_index, rounds)

        phase = phase_for_round(phase_arg, rng)
        result = engine.resolve_spin(phase, config)

        stats.total_wagered += bet_amount
        stats.total_won += result.total_win
        stats.rounds += 1
        stats.rounds_by_phase[phase.value] = stats.rounds_by_phase.get(phase.value, 0) + 1
        stats.lines_won += len(result.lines_won)
        stats.jackpot_lines += sum(
            1 for line in result.lines_won if line.symbol == Symbol.QUANTUM_WILD
        )

        if result.total_win > 0:
            stats.wins += 1
        if is_big_win(result.total_win, bet_amount, config.big_win_threshold_multiplier):
            stats.big_wins += 1

        win_x = result.total_win / bet_amount if bet_amount > 0 else 0
        stats.win_x_values.append(win_x)
        if win_x > stats.max_win_x_observed:
            stats.max_win_x_observed = win_x

    return stats


def calculate_percentile(values: list[float], percentile: float) -> float:
    """Calculate percentile from unsorted list."""
    if not values:
        return 0.0
    sorted_vals = sorted(values)
    idx = int(len(sorted_vals) * percentile / 100)
    idx = min(idx, len(sorted_vals) - 1)
    return sorted_vals[idx]


def build_row(
    phase_arg: str,
    rounds: int,
    seed_str: str,
    stats: SimulationStats,
) -> dict[str, str | int]:
    """Build the CSV row for a finished simulation."""
    rtp = (stats.total_won / stats.total_wagered * 100) if stats.total_wagered > 0 else 0
    hit_freq = (stats.wins / stats.rounds * 100) if stats.rounds > 0 else 0
    big_win_rate = (stats.big_wins / stats.rounds * 100) if stats.rounds > 0 else 0
    lines_per_round = stats.lines_won / stats.rounds if stats.rounds > 0 else 0

    return {
        "timestamp": get_timestamp_iso(),
        "config_hash": get_config_hash(),
        "phase": phase_arg,
        "rounds": rounds,
        "seed": seed_str,
        "rtp": f"{rtp:.4f}",
        "hit_freq": f"{hit_freq:.4f}",
        "big_win_rate": f"{big_win_rate:.4f}",
        "lines_per_round": f"{lines_per_round:.4f}",
        "jackpot_lines": stats.jackpot_lines,
        "p95_win_x": f"{calculate_percentile(stats.win_x_values, 95):.2f}",
        "p99_win_x": f"{calculate_percentile(stats.win_x_values, 99):.2f}",
        "max_win_x": f"{stats.max_win_x_observed:.2f}",
    }


def generate_csv(row: dict[str, str | int], output_path: str) -> None:
    """Write the audit row to CSV."""
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=row.keys())
        writer.writeheader()
        writer.writerow(row)

    logger.info("CSV written to: %s", output_path)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Headless payout audit simulation")
    parser.add_argument(
        "--phase",
        choices=[*PHASE_CHOICES, "cycle"],
        required=True,
        help="Fixed phase, or 'cycle' to sample phases by time share",
    )
    parser.add_argument("--rounds", type=int, required=True, help="Number of rounds to simulate")
    parser.add_argument("--seed", type=str, required=True, help="Seed string for reproducibility")
    parser.add_argument("--out", type=str, required=True, help="Output CSV path")
    parser.add_argument("--bet", type=float, default=1.0, help="Stake per round")
    parser.add_argument("--verbose", action="store_true", help="Show progress")
    args = parser.parse_args(argv)

    if args.rounds <= 0:
        parser.error("--rounds must be positive")

    configure_logging("DEBUG" if args.verbose else "INFO")

    stats = run_simulation(args.phase, args.rounds, args.seed, bet_amount=args.bet)
    row = build_row(args.phase, args.rounds, args.seed, stats)
    generate_csv(row, args.out)

    logger.info(
        "phase=%s rounds=%d rtp=%s%% hit_freq=%s%% max_win_x=%s",
        args.phase, args.rounds, row["rtp"], row["hit_freq"], row["max_win_x"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

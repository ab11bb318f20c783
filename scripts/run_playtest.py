#!/usr/bin/env python3
"""Batch playtest runner for Decree scenarios.

Plays many headless games of one scenario and reports how runs end, which
choices get taken and where world values end up.

Usage:
    python scripts/run_playtest.py \\
        --scenario my_scenario.json \\
        --games 200 \\
        --policy random \\
        --seed 42 \\
        --output playtest_results.json
"""

import argparse
import json
import logging
import sys

from decree.errors import ScenarioLoadError
from decree.scenarios import load_default_scenario, load_scenario
from decree.testing.playtest import DEFAULT_PLAYTEST_TURNS, POLICIES, run_playtest


def print_summary(results: dict) -> None:
    """Print a human-readable summary of the playtest results."""
    metadata = results["metadata"]
    aggregate = results["aggregate"]

    print("\n" + "=" * 80)
    print("PLAYTEST SUMMARY")
    print("=" * 80)
    print(f"\nScenario: {metadata['scenario']}")
    print(f"Games: {metadata['games']}  Policy: {metadata['policy']}  Seed: {metadata['seed']}")
    print(f"Elapsed time: {metadata['elapsed_seconds']}s")

    print("\n" + "-" * 80)
    print("ENDINGS")
    print("-" * 80)
    for ending, count in sorted(aggregate["endings"].items()):
        print(f"{ending:<30} {count:>6} {count / aggregate['total_games'] * 100:>7.1f}%")
    print(f"Average game length: {aggregate['avg_turns']:.1f} turns")

    print("\n" + "-" * 80)
    print("CHOICES TAKEN")
    print("-" * 80)
    for choice, count in aggregate["choices"].items():
        print(f"{choice:<60} {count:>6}")

    print("\n" + "-" * 80)
    print("MEAN FINAL WORLD")
    print("-" * 80)
    for name, value in aggregate["mean_final_resources"].items():
        print(f"Resources.{name:<30} {value:>12.1f}")
    for name, value in aggregate["mean_final_powers"].items():
        print(f"Powers.{name:<33} {value:>12.1f}")

    if aggregate["stuck_rate"] > 0.5:
        print("\nWARNING: most runs get stuck; consider a fallback rule")
    print("=" * 80)


def main():
    """Main entry point for the playtest runner."""
    parser = argparse.ArgumentParser(
        description="Batch playtest runner for Decree.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available policies: {', '.join(sorted(POLICIES))}

Examples:
  # 100 random games of the bundled scenario
  python scripts/run_playtest.py --games 100

  # Reproducible run written to a file
  python scripts/run_playtest.py \\
      --scenario coup.json \\
      --games 50 \\
      --seed 42 \\
      --output results.json
        """
    )

    parser.add_argument(
        "--scenario",
        type=str,
        default=None,
        help="Path to scenario JSON (default: bundled putsch scenario)"
    )

    parser.add_argument(
        "--games",
        type=int,
        default=100,
        help="Number of games (default: 100)"
    )

    parser.add_argument(
        "--policy",
        choices=sorted(POLICIES),
        default="random",
        help="Choice policy (default: random)"
    )

    parser.add_argument(
        "--max-turns",
        type=int,
        default=DEFAULT_PLAYTEST_TURNS,
        help=f"Turn limit per game (default: {DEFAULT_PLAYTEST_TURNS})"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (optional)"
    )

    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path for results JSON (optional)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every game"
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        definition = load_scenario(args.scenario) if args.scenario else load_default_scenario()
    except (FileNotFoundError, ScenarioLoadError) as e:
        print(f"Error loading scenario: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Running {args.games} games of '{definition.title}' with the {args.policy} policy...")

    try:
        results = run_playtest(
            definition,
            games=args.games,
            policy=args.policy,
            seed=args.seed,
            max_turns=args.max_turns,
        )
    except ValueError as e:
        print(f"Error running playtest: {e}", file=sys.stderr)
        sys.exit(1)

    print_summary(results)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults written to: {args.output}")


if __name__ == "__main__":
    main()

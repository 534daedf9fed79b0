"""
Sequence Report
===============

Prints the FLOAT sequence of a day: distribution, early FLOAT slots, and a
compact map of the first slots.

Usage:
    python -m tools.sequence_report [--date 2026-10-19 | --seed 42] [--slots 200]
"""

from __future__ import annotations

import argparse
import sys
from datetime import date

from neondrop.core.config_loader import load_config
from neondrop.core.daily_seed import DailyPackage
from neondrop.core.errors import ConfigurationError
from neondrop.core.float_sequence import FloatSequence


def format_slot_map(sequence: FloatSequence, slots: int, width: int = 50) -> str:
    """Rows of '#' (FLOAT) and '.' (normal), ``width`` slots per row."""
    flags = sequence.flags[:slots]
    rows = []
    for start in range(0, len(flags), width):
        row = "".join("#" if f else "." for f in flags[start:start + width])
        rows.append(f"{start + 1:>5}  {row}")
    return "\n".join(rows)


def main():
    parser = argparse.ArgumentParser(description="Show a day's FLOAT sequence")
    parser.add_argument("--date", type=str, default=None, help="ISO date (default: today)")
    parser.add_argument("--seed", type=int, default=None, help="Explicit seed (overrides the date hash)")
    parser.add_argument("--slots", type=int, default=200, help="Slots to draw in the map")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        day = args.date or date.today().isoformat()
        if args.seed is not None:
            package = DailyPackage(date=day, seed=args.seed)
        else:
            package = DailyPackage.for_date(day)
        sequence = FloatSequence(package.seed, config)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1

    dist = sequence.distribution()

    print("=" * 60)
    print(f"FLOAT SEQUENCE  {package.date}  (seed {package.seed})")
    print("=" * 60)
    print(f"FLOATs:        {dist.total_floats}/{len(sequence)} ({dist.total_percent:.1f}%)")
    print(f"First 100:     {dist.first_100_percent:.1f}%")
    print(f"First 500:     {dist.first_500_percent:.1f}%")
    print(f"Early FLOATs:  {', '.join(str(i) for i in dist.early_floats) or '-'}")
    print(f"Bootstrap:     {'applied' if dist.bootstrap_applied else 'not needed'}")
    print()
    print(format_slot_map(sequence, min(args.slots, len(sequence))))

    return 0


if __name__ == "__main__":
    sys.exit(main())

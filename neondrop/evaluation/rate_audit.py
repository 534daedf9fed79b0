"""
FLOAT Rate Audit
================

Simulates sessions over many seeds and reports how closely the realized
FLOAT rate tracks each sequence's intrinsic rate.

Usage:
    python -m neondrop.evaluation.rate_audit --seeds 1 2 3 --profile ramp
    python -m neondrop.evaluation.rate_audit --dates 2026-10-01 2026-10-02
"""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from neondrop.core.config_loader import GameConfig, get_config, load_config
from neondrop.core.daily_seed import DailyPackage
from neondrop.core.errors import ConfigurationError
from neondrop.core.float_session import FloatSession


@dataclass
class AuditResult:
    """Result for a single seed."""
    seed: int
    date: str
    pieces: int
    floats: int
    realized_percent: float
    intrinsic_percent: float
    mercy_floats: int
    bootstrap_applied: bool

    @property
    def deviation(self) -> float:
        """Realized minus intrinsic, in percentage points."""
        return self.realized_percent - self.intrinsic_percent


@dataclass
class AuditSummary:
    """Summary of the audit across all seeds."""
    mean_percent: float
    std_percent: float
    min_percent: float
    max_percent: float
    median_percent: float
    mean_abs_deviation: float
    total_time: float
    results: List[AuditResult]


def heights_for_profile(profile: str, count: int, max_height: int) -> List[int]:
    """
    Stack-height series for a named profile.

    Profiles:
        flat:<h>   constant height h
        ramp       grows one row every 25 pieces, saturating at the board top
        sawtooth   climbs to 3/4 of the board, then a big clear drops it to 2

    Raises:
        ConfigurationError: For an unknown profile or out-of-range height.
    """
    if profile.startswith("flat:"):
        try:
            height = int(profile.split(":", 1)[1])
        except ValueError:
            raise ConfigurationError(f"Invalid flat profile '{profile}'") from None
        if not 0 <= height <= max_height:
            raise ConfigurationError(f"Profile height {height} outside 0..{max_height}")
        return [height] * count

    if profile == "ramp":
        return [min(i // 25, max_height) for i in range(count)]

    if profile == "sawtooth":
        peak = max(3, (max_height * 3) // 4)
        heights = []
        height = 0
        for _ in range(count):
            heights.append(height)
            height = height + 1 if height < peak else 2
        return heights

    raise ConfigurationError(f"Unknown height profile '{profile}'")


def audit_session(
    package: DailyPackage,
    heights: Sequence[int],
    config: Optional[GameConfig] = None,
    verbose: bool = False
) -> AuditResult:
    """Run one session over a height series."""
    session = FloatSession(package, config)

    mercy_floats = 0
    for height in heights:
        decision = session.spawn(height)
        if decision.reason == "mercy":
            mercy_floats += 1

    stats = session.get_stats()
    result = AuditResult(
        seed=package.seed,
        date=package.date,
        pieces=stats.total_pieces,
        floats=stats.total_floats,
        realized_percent=stats.float_percent,
        intrinsic_percent=session.sequence.rate_percent,
        mercy_floats=mercy_floats,
        bootstrap_applied=session.sequence.bootstrap_applied
    )

    if verbose:
        print(f"  Seed {result.seed}: realized={result.realized_percent:.1f}%, "
              f"intrinsic={result.intrinsic_percent:.1f}%, mercy={result.mercy_floats}")

    return result


def audit_packages(
    packages: Sequence[DailyPackage],
    profile: str = "ramp",
    pieces: Optional[int] = None,
    config: Optional[GameConfig] = None,
    verbose: bool = True
) -> AuditSummary:
    """
    Audit every package under one height profile.

    Args:
        packages: Daily packages to simulate.
        profile: Height profile name (see heights_for_profile).
        pieces: Spawns per session. Defaults to the sequence length.
        config: Game configuration. Uses default if None.
        verbose: If True, print progress and a summary table.
    """
    if config is None:
        config = get_config()
    if not packages:
        raise ConfigurationError("No seeds to audit")
    if pieces is None:
        pieces = config.float.sequence_length

    heights = heights_for_profile(profile, pieces, config.max_stack_height)

    if verbose:
        print(f"Auditing {len(packages)} seed(s), profile '{profile}', {pieces} pieces each...")

    results: List[AuditResult] = []
    total_start = time.time()
    for package in packages:
        results.append(audit_session(package, heights, config, verbose=verbose))
    total_time = time.time() - total_start

    rates = np.array([r.realized_percent for r in results])
    deviations = np.array([r.deviation for r in results])

    summary = AuditSummary(
        mean_percent=float(np.mean(rates)),
        std_percent=float(np.std(rates)),
        min_percent=float(np.min(rates)),
        max_percent=float(np.max(rates)),
        median_percent=float(np.median(rates)),
        mean_abs_deviation=float(np.mean(np.abs(deviations))),
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("FLOAT RATE SUMMARY")
        print("=" * 50)
        print(f"Seeds audited:      {len(results)}")
        print(f"Mean FLOAT rate:    {summary.mean_percent:.2f}%")
        print(f"Std deviation:      {summary.std_percent:.2f}")
        print(f"Min / Max:          {summary.min_percent:.2f}% / {summary.max_percent:.2f}%")
        print(f"Median:             {summary.median_percent:.2f}%")
        print(f"Mean |deviation|:   {summary.mean_abs_deviation:.2f} pts")
        print(f"Total time:         {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_summary(summary: AuditSummary, profile: str, output_path: str) -> None:
    """Save audit results to JSON."""
    data = {
        "profile": profile,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "mean_percent": summary.mean_percent,
        "std_percent": summary.std_percent,
        "min_percent": summary.min_percent,
        "max_percent": summary.max_percent,
        "median_percent": summary.median_percent,
        "mean_abs_deviation": summary.mean_abs_deviation,
        "total_time": summary.total_time,
        "results": [
            {
                "seed": r.seed,
                "date": r.date,
                "pieces": r.pieces,
                "floats": r.floats,
                "realized_percent": r.realized_percent,
                "intrinsic_percent": r.intrinsic_percent,
                "mercy_floats": r.mercy_floats,
                "bootstrap_applied": r.bootstrap_applied,
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Audit NeonDrop FLOAT rates across seeds")
    parser.add_argument("--seeds", type=int, nargs="*", default=[], help="Raw daily seeds")
    parser.add_argument("--dates", type=str, nargs="*", default=[], help="ISO dates (seed = date hash)")
    parser.add_argument("--profile", type=str, default="ramp", help="flat:<h>, ramp, or sawtooth")
    parser.add_argument("--pieces", type=int, default=None, help="Spawns per session")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--output", type=str, default=None, help="Path to save results JSON")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        packages = [DailyPackage(date=f"seed-{s}", seed=s) for s in args.seeds]
        packages += [DailyPackage.for_date(d) for d in args.dates]
        summary = audit_packages(
            packages,
            profile=args.profile,
            pieces=args.pieces,
            config=config,
            verbose=not args.quiet
        )
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1

    if args.output:
        save_summary(summary, args.profile, args.output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Mercy Curve
===========

Pure functions behind the FLOAT probability:

- height law: flat below ``low_height``, then a linear ramp that saturates at
  ``ramp_end_height``
- rate correction: boost when the realized rate lags the target at a
  dangerous height
- mixing random: deterministic [0, 1) value used for the real-time roll

Percentages are on the 0-100 scale throughout.
"""

from __future__ import annotations

import math

from neondrop.core.config_loader import MercyCurveConfig, RateCorrectionConfig


def height_mercy_percent(stack_height: float, curve: MercyCurveConfig) -> float:
    """
    Mercy percentage for a stack height before any rate correction.

    With the default curve: 5% below height 3, 8% at height 3 rising
    linearly to 25% at height 20 and above.
    """
    if stack_height < curve.low_height:
        return curve.low_percent

    t = min((stack_height - curve.low_height) / curve.ramp_span, 1.0)
    return curve.ramp_start_percent + t * (curve.ramp_end_percent - curve.ramp_start_percent)


def realized_rate(total_floats: int, piece_count: int) -> float:
    """Share of spawns that were FLOAT so far (0.0 before the first spawn)."""
    if piece_count <= 0:
        return 0.0
    return total_floats / piece_count


def apply_rate_correction(
    percent: float,
    stack_height: int,
    rate: float,
    correction: RateCorrectionConfig
) -> float:
    """
    Boost a live percentage when the game is behind its target FLOAT rate.

    Only applies at or above ``correction.min_height``; the boosted value is
    capped at ``correction.cap_percent``.
    """
    if rate < correction.target_rate and stack_height >= correction.min_height:
        return min(percent * correction.multiplier, correction.cap_percent)
    return percent


def mixing_random(value: float) -> float:
    """
    Fast deterministic pseudo-random in [0, 1).

    Fractional part of ``sin(value) * 10000``; identical inputs give identical
    outputs on every player's machine.
    """
    x = math.sin(value) * 10000.0
    return x - math.floor(x)

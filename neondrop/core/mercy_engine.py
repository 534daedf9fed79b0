"""
Adaptive Mercy Engine
=====================

Decides, once per piece spawn, whether the piece is a FLOAT.

Two paths can produce a FLOAT:

- sequence: the daily precomputed flag for this spawn index. Never
  suppressed, so every player with the same seed gets that slot.
- mercy: a live roll against a height-dependent percentage, for danger the
  static sequence could not foresee. It only fires when it keeps the
  minimum gap to the previous FLOAT and to the next committed one.

The engine holds no counters of its own. The session passes its MercyState
into every call.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Optional

from neondrop.core.config_loader import GameConfig, get_config
from neondrop.core.errors import ConfigurationError
from neondrop.core.float_sequence import FloatSequence
from neondrop.core.mercy_curve import (
    apply_rate_correction,
    height_mercy_percent,
    mixing_random,
    realized_rate,
)
from neondrop.core.modulation import OscillatorModel


@dataclass
class MercyState:
    """Per-session spawn counters."""
    piece_count: int = 0
    total_floats_given: int = 0
    last_float_index: Optional[int] = None   # None until the first FLOAT

    @property
    def realized_rate(self) -> float:
        return realized_rate(self.total_floats_given, self.piece_count)

    def reset(self) -> None:
        """Zero all counters for a new game."""
        self.piece_count = 0
        self.total_floats_given = 0
        self.last_float_index = None


@dataclass(frozen=True)
class SpawnDecision:
    """Outcome of one spawn decision."""
    index: int              # Spawn index (piece_count before the call)
    is_float: bool
    reason: str             # "sequence", "mercy", or "none"
    mercy_percent: float    # Live percentage used for the mercy roll
    stack_height: int

    def __bool__(self) -> bool:
        return self.is_float


class MercyCurveModel:
    """Piecewise-linear height law with rate correction."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._config = config

    def live_percent(self, stack_height: int, piece_count: int, total_floats: int) -> float:
        fc = self._config.float
        percent = height_mercy_percent(stack_height, fc.mercy_curve)
        return apply_rate_correction(
            percent,
            stack_height,
            realized_rate(total_floats, piece_count),
            fc.rate_correction
        )


def build_probability_model(seed: int, config: GameConfig):
    """Instantiate the live probability model named in the config."""
    if config.float.probability_model == "oscillator":
        return OscillatorModel(seed, config)
    return MercyCurveModel(config)


class AdaptiveMercyEngine:
    """
    Combines the daily sequence with a live probability model.

    Usage:
        engine = AdaptiveMercyEngine(FloatSequence(seed))
        state = MercyState()
        decision = engine.decide(state, stack_height=4)
    """

    def __init__(
        self,
        sequence: FloatSequence,
        config: Optional[GameConfig] = None,
        model=None,
        debug: bool = False
    ):
        """
        Initialize the engine.

        Args:
            sequence: Precomputed daily FLOAT sequence.
            config: Game configuration. Uses default if None.
            model: Live probability model. Built from config if None.
            debug: If True, print every decision.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._sequence = sequence
        self._model = model if model is not None else build_probability_model(sequence.seed, config)
        self._debug = debug

    @property
    def sequence(self) -> FloatSequence:
        return self._sequence

    @property
    def model(self):
        return self._model

    def validate_stack_height(self, stack_height) -> int:
        """
        Reject heights outside [0, board height].

        Raises:
            ConfigurationError: For non-integer or out-of-range heights.
        """
        # numpy integers from board arithmetic are valid heights
        if isinstance(stack_height, bool) or not isinstance(stack_height, numbers.Integral):
            raise ConfigurationError(
                f"Stack height must be an integer, got {type(stack_height).__name__}"
            )
        stack_height = int(stack_height)
        max_height = self._config.max_stack_height
        if not 0 <= stack_height <= max_height:
            raise ConfigurationError(f"Stack height {stack_height} outside 0..{max_height}")
        return stack_height

    def live_percent(self, state: MercyState, stack_height: int) -> float:
        """Live mercy percentage for the next spawn, without side effects."""
        height = self.validate_stack_height(stack_height)
        return self._model.live_percent(height, state.piece_count, state.total_floats_given)

    def _mercy_keeps_gap(self, state: MercyState, index: int) -> bool:
        """True if a mercy FLOAT at ``index`` respects the minimum gap both ways."""
        min_gap = self._config.float.min_gap
        last = state.last_float_index
        if last is not None and index - last < min_gap:
            return False
        ahead = self._sequence.distance_to_next_float(index)
        return ahead is None or ahead >= min_gap

    def decide(self, state: MercyState, stack_height: int) -> SpawnDecision:
        """
        Make the spawn decision for the next piece.

        Increments ``state.piece_count`` exactly once. On a FLOAT also bumps
        ``total_floats_given`` and records ``last_float_index``.

        Raises:
            ConfigurationError: If the stack height is invalid. The state is
                left untouched in that case.
        """
        stack_height = self.validate_stack_height(stack_height)
        percent = self.live_percent(state, stack_height)
        index = state.piece_count

        base_decision = self._sequence.is_float(index)

        roll = mixing_random(self._sequence.seed + index + stack_height) * 100.0
        mercy_decision = (
            not base_decision
            and roll < percent
            and self._mercy_keeps_gap(state, index)
        )

        is_float = base_decision or mercy_decision
        if base_decision:
            reason = "sequence"
        elif mercy_decision:
            reason = "mercy"
        else:
            reason = "none"

        state.piece_count += 1
        if is_float:
            state.total_floats_given += 1
            state.last_float_index = index

        if self._debug:
            if is_float:
                print(f"[DEBUG] FLOAT #{state.total_floats_given} at piece {index + 1} "
                      f"(height={stack_height}, mercy={percent:.1f}%, {reason})")
            else:
                print(f"[DEBUG] Normal piece #{index + 1} "
                      f"(height={stack_height}, mercy={percent:.1f}%)")

        return SpawnDecision(
            index=index,
            is_float=is_float,
            reason=reason,
            mercy_percent=percent,
            stack_height=stack_height
        )

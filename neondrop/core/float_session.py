"""
FLOAT Session
=============

One game session's view of the FLOAT subsystem: the daily sequence, the
mercy engine, and the session-owned counters.

The game controller calls ``should_spawn_float`` once per piece spawn, in
spawn order, from its event-loop thread.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from neondrop.core.config_loader import GameConfig, get_config
from neondrop.core.daily_seed import DailyPackage, coerce_daily_package
from neondrop.core.float_sequence import FloatSequence
from neondrop.core.mercy_engine import AdaptiveMercyEngine, MercyState, SpawnDecision


@dataclass
class FloatStats:
    """Read-only diagnostics for UI display."""
    date: str
    total_pieces: int
    total_floats: int
    float_percent: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "totalPieces": self.total_pieces,
            "totalFloats": self.total_floats,
            "floatPercent": round(self.float_percent, 1),
        }


class FloatSession:
    """
    FLOAT spawning for one game session.

    Orchestrates:
    - Daily sequence (built once from the seed)
    - Live probability model (mercy curve or oscillator, per config)
    - Session counters (reset on new game, sequence preserved)
    """

    def __init__(
        self,
        daily_package: Union[DailyPackage, Mapping[str, Any], None],
        config: Optional[GameConfig] = None,
        debug: bool = False
    ):
        """
        Initialize the session.

        Args:
            daily_package: ``DailyPackage`` or ``{"date": ..., "seed": ...}``.
            config: Game configuration. Uses default if None.
            debug: If True, enables verbose output for every spawn.

        Raises:
            ConfigurationError: If the package is missing or its seed invalid.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._package = coerce_daily_package(daily_package)
        self._debug = debug

        self._sequence = FloatSequence(self._package.seed, config, debug=debug)
        self._engine = AdaptiveMercyEngine(self._sequence, config, debug=debug)
        self._state = MercyState()

        if self._debug:
            print(f"[DEBUG] FloatSession initialized for {self._package.date} "
                  f"(model: {config.float.probability_model})")

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def daily_package(self) -> DailyPackage:
        return self._package

    @property
    def sequence(self) -> FloatSequence:
        return self._sequence

    @property
    def engine(self) -> AdaptiveMercyEngine:
        return self._engine

    @property
    def state(self) -> MercyState:
        """Session counters (mutated only through spawn calls and reset)."""
        return self._state

    def spawn(self, stack_height: int) -> SpawnDecision:
        """Decide the next spawn and return the full decision record."""
        return self._engine.decide(self._state, stack_height)

    def should_spawn_float(self, stack_height: int) -> bool:
        """
        Decide whether the next piece is a FLOAT.

        Raises:
            ConfigurationError: If ``stack_height`` is outside [0, board height].
        """
        return self.spawn(stack_height).is_float

    def get_stats(self) -> FloatStats:
        """Counters for the current game."""
        return FloatStats(
            date=self._package.date,
            total_pieces=self._state.piece_count,
            total_floats=self._state.total_floats_given,
            float_percent=self._state.realized_rate * 100.0
        )

    def reset_for_new_game(self) -> None:
        """Zero the counters; the daily sequence is kept."""
        self._state.reset()
        if self._debug:
            print("[DEBUG] Game reset - same daily FLOAT sequence")

"""
FLOAT Sequence
==============

Deterministic daily sequence of FLOAT candidate slots.

A seed expands into a fixed-length boolean array through a linear
congruential generator. Slot ``i`` is a FLOAT when the LCG roll falls under
the mercy percentage for an estimated stack height, and the slot keeps the
minimum gap to the previous FLOAT. Same seed, same array, on every machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from neondrop.core.config_loader import GameConfig, get_config
from neondrop.core.daily_seed import validate_seed
from neondrop.core.mercy_curve import height_mercy_percent


LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MODULUS = 2 ** 31


def lcg_step(state: int) -> int:
    """One step of the classic ANSI C linear congruential generator."""
    return (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS


@dataclass
class SequenceDistribution:
    """FLOAT density summary of a generated sequence."""
    total_floats: int
    first_100_percent: float
    first_500_percent: float
    total_percent: float
    early_floats: List[int]          # 1-indexed positions of the first FLOATs
    bootstrap_applied: bool

    def __repr__(self) -> str:
        return (
            f"SequenceDistribution({self.total_floats} floats, "
            f"{self.first_100_percent:.1f}% -> {self.first_500_percent:.1f}% -> "
            f"{self.total_percent:.1f}%, early={self.early_floats})"
        )


class FloatSequence:
    """
    Precomputed FLOAT flags for one daily seed.

    The flag array is read-only once construction (including the bootstrap
    correction) finishes. Lookups wrap modulo the sequence length so games
    longer than the sequence loop back to its start.
    """

    def __init__(
        self,
        seed: int,
        config: Optional[GameConfig] = None,
        debug: bool = False
    ):
        """
        Generate the sequence for a seed.

        Args:
            seed: Daily seed (signed 32-bit integer).
            config: Game configuration. Uses default if None.
            debug: If True, print the distribution after generation.

        Raises:
            ConfigurationError: If the seed is missing or not an integer.
        """
        if config is None:
            config = get_config()

        self._seed = validate_seed(seed)
        self._config = config
        self._debug = debug

        self._flags = self._generate()
        self._bootstrap_applied = self._apply_bootstrap()

        # Frozen from here on
        self._flags.flags.writeable = False
        self._float_indices = np.flatnonzero(self._flags)

        if self._debug:
            self._log_distribution()

    def _estimated_height(self, index: int, state: int) -> int:
        """Coarse stack danger proxy for a slot before any game exists."""
        fc = self._config.float
        jitter = (state >> 8) % 3 - 1
        height = index // fc.height_slot_span + jitter
        return max(0, min(height, self._config.board.height))

    def _generate(self) -> np.ndarray:
        """Run the LCG once per slot and place FLOATs."""
        fc = self._config.float
        flags = np.zeros(fc.sequence_length, dtype=bool)

        state = self._seed % LCG_MODULUS
        last_float_index: Optional[int] = None

        for i in range(fc.sequence_length):
            state = lcg_step(state)
            roll = (state >> 16) % 100

            percent = height_mercy_percent(self._estimated_height(i, state), fc.mercy_curve)
            if i < fc.early_bonus_slots:
                percent += fc.early_bonus_percent

            gap_ok = last_float_index is None or i - last_float_index >= fc.min_gap
            if gap_ok and roll < percent:
                flags[i] = True
                last_float_index = i

        return flags

    def _apply_bootstrap(self) -> bool:
        """
        Force early FLOATs when the opening window has none.

        Slots after the last forced slot are cleared up to the minimum gap so
        the rest of the sequence still honours it.
        """
        fc = self._config.float
        bs = fc.bootstrap
        if self._flags[:bs.window].any():
            return False

        for slot in bs.slots:
            self._flags[slot - 1] = True

        last_forced = max(bs.slots) - 1
        self._flags[last_forced + 1:last_forced + fc.min_gap] = False
        return True

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def flags(self) -> np.ndarray:
        """Read-only boolean array of FLOAT slots."""
        return self._flags

    @property
    def bootstrap_applied(self) -> bool:
        """True if the early-engagement correction was needed."""
        return self._bootstrap_applied

    def __len__(self) -> int:
        return len(self._flags)

    def __getitem__(self, index: int) -> bool:
        return self.is_float(index)

    def is_float(self, index: int) -> bool:
        """Flag for a spawn index, wrapping past the end of the sequence."""
        return bool(self._flags[index % len(self._flags)])

    def float_indices(self) -> np.ndarray:
        """0-indexed positions of every FLOAT slot."""
        return self._float_indices.copy()

    def distance_to_next_float(self, index: int) -> Optional[int]:
        """
        Spawn-index distance from ``index`` to the next FLOAT strictly after it.

        Returns None for a sequence with no FLOATs at all.
        """
        if self._float_indices.size == 0:
            return None

        n = len(self._flags)
        position = index % n
        k = int(np.searchsorted(self._float_indices, position, side="right"))
        if k < self._float_indices.size:
            return int(self._float_indices[k]) - position
        # Wrap into the next loop of the sequence
        return int(self._float_indices[0]) + n - position

    @property
    def rate_percent(self) -> float:
        """Intrinsic FLOAT share of the whole sequence."""
        return float(self._flags.mean() * 100.0)

    def tobytes(self) -> bytes:
        """Raw flag bytes, for byte-identity comparisons."""
        return self._flags.tobytes()

    def distribution(self) -> SequenceDistribution:
        """Summarize FLOAT density over the opening, middle, and full sequence."""
        flags = self._flags

        def percent_of(count: int) -> float:
            window = flags[:count]
            return float(window.mean() * 100.0) if window.size else 0.0

        return SequenceDistribution(
            total_floats=int(flags.sum()),
            first_100_percent=percent_of(100),
            first_500_percent=percent_of(500),
            total_percent=self.rate_percent,
            early_floats=[int(i) + 1 for i in self._float_indices[:5]],
            bootstrap_applied=self._bootstrap_applied
        )

    def _log_distribution(self) -> None:
        dist = self.distribution()
        print(f"[DEBUG] FLOAT sequence: seed={self._seed}, "
              f"{dist.total_floats}/{len(self)} slots ({dist.total_percent:.1f}%)")
        print(f"[DEBUG]   Distribution: {dist.first_100_percent:.1f}% (100) -> "
              f"{dist.first_500_percent:.1f}% (500) -> {dist.total_percent:.1f}% (all)")
        print(f"[DEBUG]   Early FLOATs: {dist.early_floats}"
              f"{' (bootstrap)' if dist.bootstrap_applied else ''}")

"""
Oscillator Modulation
=====================

Alternative live-probability model: a superposition of seeded sinusoidal
oscillators nudges a 7% -> 12% -> 23% height curve by up to +/-2 points.

Only one live model is wired into a session. This one is selected with
``float.probability_model: oscillator``; the default is the mercy curve.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from neondrop.core.config_loader import GameConfig, ModulationConfig, get_config
from neondrop.core.daily_seed import to_int32, validate_seed


HASH_PRIME = 7919


@dataclass(frozen=True)
class QuantumState:
    """One seeded oscillator."""
    amplitude: float
    phase: float        # Radians
    frequency: int


def derive_quantum_states(seed: int, count: int = 8) -> Tuple[QuantumState, ...]:
    """Derive ``count`` oscillators from the daily seed."""
    states = []
    current = seed
    for i in range(count):
        current = abs(to_int32((current << 5) - current + i * HASH_PRIME))
        states.append(QuantumState(
            amplitude=math.sin(current * 0.001),
            phase=(current % 360) * math.pi / 180.0,
            frequency=1 + current % 10
        ))
    return tuple(states)


class OscillatorModel:
    """
    Live FLOAT percentage from the oscillator superposition.

    At low stacks the piece-count term dominates; as the stack approaches
    the ramp end the height-resonance term takes over.
    """

    def __init__(self, seed: int, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._mod: ModulationConfig = config.float.modulation
        self._states = derive_quantum_states(validate_seed(seed), self._mod.oscillators)

        self._amplitude = np.array([s.amplitude for s in self._states], dtype=np.float64)
        self._phase = np.array([s.phase for s in self._states], dtype=np.float64)
        self._frequency = np.array([s.frequency for s in self._states], dtype=np.float64)

    @property
    def states(self) -> Tuple[QuantumState, ...]:
        return self._states

    def superposition(self, stack_height: int, piece_count: int) -> float:
        """Normalized superposition in [-1, 1]."""
        strength = min(stack_height / self._config.max_stack_height, 1.0)

        height_resonance = np.sin(stack_height * self._frequency * 0.1 + self._phase)
        time_evolution = np.cos(piece_count * self._frequency * 0.01 + self._phase)

        contribution = self._amplitude * (
            height_resonance * strength + time_evolution * (1.0 - strength)
        )
        total_amplitude = float(np.abs(self._amplitude).sum()) or 1.0
        return float(contribution.sum()) / total_amplitude

    def target_percent(self, stack_height: int) -> float:
        """Piecewise target before oscillator jitter."""
        mod = self._mod
        if stack_height >= mod.max_height:
            return mod.max_percent
        if stack_height >= mod.medium_height:
            t = (stack_height - mod.medium_height) / (mod.max_height - mod.medium_height)
            return mod.medium_percent + t * (mod.max_percent - mod.medium_percent)
        t = stack_height / mod.medium_height
        return mod.base_percent + t * (mod.medium_percent - mod.base_percent)

    def live_percent(self, stack_height: int, piece_count: int, total_floats: int) -> float:
        """Jittered, clamped live percentage. ``total_floats`` is unused here."""
        mod = self._mod
        percent = self.target_percent(stack_height)
        percent += self.superposition(stack_height, piece_count) * mod.jitter_percent
        return max(mod.base_percent, min(mod.max_percent, percent))

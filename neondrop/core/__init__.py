"""
NeonDrop Core - The piece-fairness and input kernel of the game.

This module provides the daily FLOAT sequence, the adaptive mercy engine, and
the input state machine that turns key events into game actions.

Main exports:
- FloatSession: Per-game FLOAT spawning (should_spawn_float / get_stats / reset)
- FloatSequence: Deterministic daily FLOAT slots for a seed
- AdaptiveMercyEngine: Sequence + live mercy decision logic
- InputStateMachine: Key events -> actions with DAS and phase gating
- GameConfig: Configuration loaded from game_config.yaml

The pygame adapter lives in neondrop.core.pygame_input and is imported on
demand so the core runs without a display library.
"""

from neondrop.core.config_loader import GameConfig, load_config, get_config
from neondrop.core.errors import ConfigurationError, UnroutableInput
from neondrop.core.daily_seed import DailyPackage
from neondrop.core.game_state import GamePhase, GameState, PieceType, stack_height_of
from neondrop.core.float_sequence import FloatSequence, SequenceDistribution
from neondrop.core.mercy_engine import AdaptiveMercyEngine, MercyState, SpawnDecision
from neondrop.core.modulation import OscillatorModel, QuantumState
from neondrop.core.float_session import FloatSession, FloatStats
from neondrop.core.spawn_recorder import SpawnRecorder, verify_recording
from neondrop.core.actions import Action, ActionType
from neondrop.core.key_map import Binding, KeyMap
from neondrop.core.input_state_machine import InputStateMachine, KeyState, TimerPhase

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "ConfigurationError",
    "UnroutableInput",
    "DailyPackage",
    "GamePhase",
    "GameState",
    "PieceType",
    "stack_height_of",
    "FloatSequence",
    "SequenceDistribution",
    "AdaptiveMercyEngine",
    "MercyState",
    "SpawnDecision",
    "OscillatorModel",
    "QuantumState",
    "FloatSession",
    "FloatStats",
    "SpawnRecorder",
    "verify_recording",
    "Action",
    "ActionType",
    "Binding",
    "KeyMap",
    "InputStateMachine",
    "KeyState",
    "TimerPhase",
]

"""
Spawn Recorder
==============

Records a session's spawn decisions so a score can later be checked against
the daily seed.

Usage:
    from neondrop.core import FloatSession, SpawnRecorder, verify_recording

    session = FloatSession({"date": "2026-10-19", "seed": 42})
    recorder = SpawnRecorder(session)

    for height in stack_heights:
        if recorder.should_spawn_float(height):
            ...

    recorder.save("game.json")
    assert verify_recording("game.json").matches
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from neondrop.core.config_loader import GameConfig, get_config
from neondrop.core.daily_seed import DailyPackage
from neondrop.core.float_session import FloatSession
from neondrop.core.mercy_engine import SpawnDecision


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Hash of every parameter that affects spawn decisions."""
    if config is None:
        config = get_config()

    fc = config.float
    hash_data = {
        "board_height": config.board.height,
        "sequence_length": fc.sequence_length,
        "min_gap": fc.min_gap,
        "height_slot_span": fc.height_slot_span,
        "early_bonus": [fc.early_bonus_slots, fc.early_bonus_percent],
        "probability_model": fc.probability_model,
        "bootstrap": [fc.bootstrap.window, list(fc.bootstrap.slots)],
        "mercy_curve": [
            fc.mercy_curve.low_height,
            fc.mercy_curve.low_percent,
            fc.mercy_curve.ramp_start_percent,
            fc.mercy_curve.ramp_end_percent,
            fc.mercy_curve.ramp_end_height,
        ],
        "rate_correction": [
            fc.rate_correction.target_rate,
            fc.rate_correction.min_height,
            fc.rate_correction.multiplier,
            fc.rate_correction.cap_percent,
        ],
        "modulation": [
            fc.modulation.oscillators,
            fc.modulation.base_percent,
            fc.modulation.medium_percent,
            fc.modulation.max_percent,
            fc.modulation.medium_height,
            fc.modulation.max_height,
            fc.modulation.jitter_percent,
        ],
    }
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


@dataclass
class VerificationResult:
    """Outcome of replaying a recording on a fresh session."""
    matches: bool
    checked: int
    first_mismatch: Optional[int] = None
    config_hash_matches: bool = True
    mismatches: List[int] = field(default_factory=list)


class SpawnRecorder:
    """
    Wrapper that records every spawn decision of a session.

    The session is reset when recording starts so the log always begins at
    spawn index 0.
    """

    def __init__(self, session: FloatSession):
        self.session = session
        self._heights: List[int] = []
        self._floats: List[bool] = []
        self._reasons: List[str] = []
        self._config_hash = compute_config_hash(session.config)
        self.session.reset_for_new_game()

    def spawn(self, stack_height: int) -> SpawnDecision:
        decision = self.session.spawn(stack_height)
        self._heights.append(decision.stack_height)
        self._floats.append(decision.is_float)
        self._reasons.append(decision.reason)
        return decision

    def should_spawn_float(self, stack_height: int) -> bool:
        return self.spawn(stack_height).is_float

    def reset(self) -> None:
        """Start a new game and a new recording."""
        self._heights = []
        self._floats = []
        self._reasons = []
        self.session.reset_for_new_game()

    def get_recording(self) -> Dict[str, Any]:
        package = self.session.daily_package
        return {
            "date": package.date,
            "seed": package.seed,
            "config_hash": self._config_hash,
            "stack_heights": self._heights.copy(),
            "floats": self._floats.copy(),
            "reasons": self._reasons.copy(),
            "total_pieces": len(self._heights),
            "total_floats": sum(self._floats),
        }

    def save(self, path: Union[str, Path], overwrite: bool = True) -> Path:
        """
        Save the recording to a JSON file.

        Raises:
            FileExistsError: If the file exists and ``overwrite`` is False.
        """
        path = Path(path)
        if path.exists() and not overwrite:
            raise FileExistsError(f"Recording already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.get_recording(), f, indent=2)
        return path


def load_recording(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r") as f:
        return json.load(f)


def verify_recording(
    recording: Union[Dict[str, Any], str, Path],
    config: Optional[GameConfig] = None
) -> VerificationResult:
    """
    Replay the recorded stack heights and compare every FLOAT decision.

    Args:
        recording: Recording dict or path to a saved JSON recording.
        config: Configuration to verify against. Uses default if None.
    """
    if not isinstance(recording, dict):
        recording = load_recording(recording)
    if config is None:
        config = get_config()

    package = DailyPackage(date=recording["date"], seed=recording["seed"])
    session = FloatSession(package, config)

    mismatches = []
    for i, (height, expected) in enumerate(zip(recording["stack_heights"], recording["floats"])):
        if session.should_spawn_float(height) != bool(expected):
            mismatches.append(i)

    return VerificationResult(
        matches=not mismatches,
        checked=len(recording["floats"]),
        first_mismatch=mismatches[0] if mismatches else None,
        config_hash_matches=recording.get("config_hash") == compute_config_hash(config),
        mismatches=mismatches
    )

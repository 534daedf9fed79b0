"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from neondrop.core.errors import ConfigurationError


PROBABILITY_MODELS = ("mercy", "oscillator")


@dataclass(frozen=True)
class BoardConfig:
    """Board geometry used to bound stack heights."""
    width: int
    height: int


@dataclass(frozen=True)
class BootstrapConfig:
    """Early-engagement correction applied once per generated sequence."""
    window: int                  # Slots that must contain at least one FLOAT
    slots: Tuple[int, ...]       # 1-indexed slots forced when the window is empty


@dataclass(frozen=True)
class MercyCurveConfig:
    """Two-segment piecewise-linear height law."""
    low_height: int
    low_percent: float
    ramp_start_percent: float
    ramp_end_percent: float
    ramp_end_height: int

    @property
    def ramp_span(self) -> int:
        """Number of rows between the start and the end of the ramp."""
        return self.ramp_end_height - self.low_height


@dataclass(frozen=True)
class RateCorrectionConfig:
    """Boost applied when the realized FLOAT rate lags the target."""
    target_rate: float
    min_height: int
    multiplier: float
    cap_percent: float


@dataclass(frozen=True)
class ModulationConfig:
    """Oscillator (superseded) probability model parameters."""
    oscillators: int
    base_percent: float
    medium_percent: float
    max_percent: float
    medium_height: int
    max_height: int
    jitter_percent: float


@dataclass(frozen=True)
class FloatConfig:
    """FLOAT sequence and mercy engine parameters."""
    sequence_length: int
    min_gap: int
    height_slot_span: int
    early_bonus_slots: int
    early_bonus_percent: float
    probability_model: str
    bootstrap: BootstrapConfig
    mercy_curve: MercyCurveConfig
    rate_correction: RateCorrectionConfig
    modulation: ModulationConfig


@dataclass(frozen=True)
class InputConfig:
    """Keyboard bindings and auto-repeat timing."""
    das_initial_ms: int
    das_repeat_ms: int
    bindings: Dict[str, Tuple[str, ...]]
    start_keys: Tuple[str, ...]
    resume_keys: Tuple[str, ...]
    menu_return_keys: Tuple[str, ...]
    float_up_keys: Tuple[str, ...]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    float: FloatConfig
    input: InputConfig

    @property
    def max_stack_height(self) -> int:
        """Largest valid stack height (the board row count)."""
        return self.board.height


def _parse_keys(data, section: str) -> Tuple[str, ...]:
    """Parse a list of key names, lower-cased and stripped."""
    if not isinstance(data, (list, tuple)):
        raise ConfigurationError(f"{section} must be a list of key names, got {data!r}")
    keys = []
    for key in data:
        if not isinstance(key, str) or not key.strip():
            raise ConfigurationError(f"{section} contains an invalid key name: {key!r}")
        keys.append(key.strip().lower())
    return tuple(keys)


def _parse_float_config(float_data: dict) -> FloatConfig:
    """Parse the float section."""
    bootstrap_data = float_data.get("bootstrap", {})
    bootstrap = BootstrapConfig(
        window=int(bootstrap_data.get("window", 15)),
        slots=tuple(int(s) for s in bootstrap_data.get("slots", (5, 10, 15)))
    )

    curve_data = float_data.get("mercy_curve", {})
    mercy_curve = MercyCurveConfig(
        low_height=int(curve_data.get("low_height", 3)),
        low_percent=float(curve_data.get("low_percent", 5.0)),
        ramp_start_percent=float(curve_data.get("ramp_start_percent", 8.0)),
        ramp_end_percent=float(curve_data.get("ramp_end_percent", 25.0)),
        ramp_end_height=int(curve_data.get("ramp_end_height", 20))
    )

    rate_data = float_data.get("rate_correction", {})
    rate_correction = RateCorrectionConfig(
        target_rate=float(rate_data.get("target_rate", 0.12)),
        min_height=int(rate_data.get("min_height", 5)),
        multiplier=float(rate_data.get("multiplier", 1.3)),
        cap_percent=float(rate_data.get("cap_percent", 30.0))
    )

    mod_data = float_data.get("modulation", {})
    modulation = ModulationConfig(
        oscillators=int(mod_data.get("oscillators", 8)),
        base_percent=float(mod_data.get("base_percent", 7.0)),
        medium_percent=float(mod_data.get("medium_percent", 12.0)),
        max_percent=float(mod_data.get("max_percent", 23.0)),
        medium_height=int(mod_data.get("medium_height", 5)),
        max_height=int(mod_data.get("max_height", 15)),
        jitter_percent=float(mod_data.get("jitter_percent", 2.0))
    )

    return FloatConfig(
        sequence_length=int(float_data.get("sequence_length", 1000)),
        min_gap=int(float_data.get("min_gap", 8)),
        height_slot_span=int(float_data.get("height_slot_span", 50)),
        early_bonus_slots=int(float_data.get("early_bonus_slots", 50)),
        early_bonus_percent=float(float_data.get("early_bonus_percent", 3.0)),
        probability_model=str(float_data.get("probability_model", "mercy")),
        bootstrap=bootstrap,
        mercy_curve=mercy_curve,
        rate_correction=rate_correction,
        modulation=modulation
    )


def _parse_input_config(input_data: dict) -> InputConfig:
    """Parse the input section."""
    bindings_data = input_data.get("bindings")
    if not isinstance(bindings_data, dict) or not bindings_data:
        raise ConfigurationError("input.bindings must be a non-empty mapping")

    bindings = {
        str(name).strip().lower(): _parse_keys(keys, f"input.bindings.{name}")
        for name, keys in bindings_data.items()
    }

    return InputConfig(
        das_initial_ms=int(input_data.get("das_initial_ms", 200)),
        das_repeat_ms=int(input_data.get("das_repeat_ms", 50)),
        bindings=bindings,
        start_keys=_parse_keys(input_data.get("start_keys", ["space", "return"]), "input.start_keys"),
        resume_keys=_parse_keys(input_data.get("resume_keys", ["escape", "p", "return"]), "input.resume_keys"),
        menu_return_keys=_parse_keys(
            input_data.get("menu_return_keys", ["space", "return", "escape"]),
            "input.menu_return_keys"
        ),
        float_up_keys=_parse_keys(input_data.get("float_up_keys", ["up", "w"]), "input.float_up_keys")
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.board.width <= 0 or config.board.height <= 0:
        raise ConfigurationError(
            f"Board must have positive dimensions, got {config.board.width}x{config.board.height}"
        )

    fc = config.float
    if fc.sequence_length <= 0:
        raise ConfigurationError(f"float.sequence_length must be positive, got {fc.sequence_length}")
    if fc.min_gap < 1:
        raise ConfigurationError(f"float.min_gap must be at least 1, got {fc.min_gap}")
    if fc.height_slot_span < 1:
        raise ConfigurationError(f"float.height_slot_span must be at least 1, got {fc.height_slot_span}")
    if fc.probability_model not in PROBABILITY_MODELS:
        raise ConfigurationError(
            f"float.probability_model must be one of {PROBABILITY_MODELS}, got '{fc.probability_model}'"
        )

    # Bootstrap slots are 1-indexed and must lie inside the window
    bs = fc.bootstrap
    if bs.window > fc.sequence_length:
        raise ConfigurationError(
            f"bootstrap.window ({bs.window}) exceeds sequence_length ({fc.sequence_length})"
        )
    for slot in bs.slots:
        if not 1 <= slot <= bs.window:
            raise ConfigurationError(f"bootstrap slot {slot} outside window 1..{bs.window}")

    curve = fc.mercy_curve
    if curve.ramp_span <= 0:
        raise ConfigurationError(
            f"mercy_curve.ramp_end_height ({curve.ramp_end_height}) must exceed "
            f"low_height ({curve.low_height})"
        )

    mod = fc.modulation
    if not mod.base_percent <= mod.medium_percent <= mod.max_percent:
        raise ConfigurationError("modulation percentages must be non-decreasing")
    if not 0 < mod.medium_height < mod.max_height:
        raise ConfigurationError("modulation heights must satisfy 0 < medium_height < max_height")

    ic = config.input
    if ic.das_initial_ms < 0 or ic.das_repeat_ms <= 0:
        raise ConfigurationError(
            f"DAS timings must be non-negative with a positive repeat, "
            f"got {ic.das_initial_ms}/{ic.das_repeat_ms}"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f) or {}

    board_data = raw.get("board", {})
    board = BoardConfig(
        width=int(board_data.get("width", 10)),
        height=int(board_data.get("height", 20))
    )

    config = GameConfig(
        board=board,
        float=_parse_float_config(raw.get("float", {})),
        input=_parse_input_config(raw.get("input", {}))
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config

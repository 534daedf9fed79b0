"""
Key Map
=======

Fixed binding table from physical keys to game bindings.

The mapping is many-to-one: several keys (arrow keys and letters) may share a
binding, but a key never belongs to two bindings. Key identifiers are pygame
key names ("left", "a", "space", "return", "left shift", ...).
"""

from __future__ import annotations

import enum
from typing import Dict, FrozenSet, Iterable, Optional

from neondrop.core.actions import Action, HARD_DROP, HOLD, PAUSE
from neondrop.core.config_loader import GameConfig, InputConfig, get_config
from neondrop.core.errors import ConfigurationError, UnroutableInput


class Binding(enum.Enum):
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    SOFT_DROP = "soft_drop"
    ROTATE_CW = "rotate_cw"
    ROTATE_CCW = "rotate_ccw"
    HARD_DROP = "hard_drop"
    HOLD = "hold"
    PAUSE = "pause"
    CONFIRM = "confirm"


# Gameplay action per binding. CONFIRM has no meaning during active play.
BINDING_ACTIONS: Dict[Binding, Optional[Action]] = {
    Binding.MOVE_LEFT: Action.move(-1, 0),
    Binding.MOVE_RIGHT: Action.move(1, 0),
    Binding.SOFT_DROP: Action.move(0, 1),
    Binding.ROTATE_CW: Action.rotate(1),
    Binding.ROTATE_CCW: Action.rotate(-1),
    Binding.HARD_DROP: HARD_DROP,
    Binding.HOLD: HOLD,
    Binding.PAUSE: PAUSE,
    Binding.CONFIRM: None,
}


def normalize_key(key: object) -> str:
    """
    Canonical form of a key identifier.

    Raises:
        UnroutableInput: For anything that is not a non-empty string.
    """
    if not isinstance(key, str):
        raise UnroutableInput(key, "malformed")
    name = key.strip().lower()
    if not name:
        raise UnroutableInput(key, "malformed")
    return name


class KeyMap:
    """
    Binding lookups and the key classes used for phase routing.

    Raises ConfigurationError at construction if a key is bound twice or a
    binding name is unknown.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        input_config: InputConfig = config.input
        self._key_to_binding: Dict[str, Binding] = {}

        for name, keys in input_config.bindings.items():
            try:
                binding = Binding(name)
            except ValueError:
                raise ConfigurationError(f"Unknown input binding '{name}'") from None
            for key in keys:
                existing = self._key_to_binding.get(key)
                if existing is not None and existing is not binding:
                    raise ConfigurationError(
                        f"Key '{key}' bound to both '{existing.value}' and '{binding.value}'"
                    )
                self._key_to_binding[key] = binding

        self._start_keys = frozenset(input_config.start_keys)
        self._resume_keys = frozenset(input_config.resume_keys)
        self._menu_return_keys = frozenset(input_config.menu_return_keys)
        self._float_up_keys = frozenset(input_config.float_up_keys)

        for key in self._float_up_keys:
            if self._key_to_binding.get(key) is not Binding.ROTATE_CW:
                raise ConfigurationError(f"FLOAT up key '{key}' must be bound to rotate_cw")

        self._game_keys = frozenset(self._key_to_binding).union(
            self._start_keys, self._resume_keys, self._menu_return_keys
        )

    def binding_for(self, key: object) -> Binding:
        """
        Binding of a key.

        Raises:
            UnroutableInput: If the key is malformed or unmapped.
        """
        name = normalize_key(key)
        binding = self._key_to_binding.get(name)
        if binding is None:
            raise UnroutableInput(key)
        return binding

    def action_for(self, key: object) -> Optional[Action]:
        """Gameplay action of a key (None for CONFIRM)."""
        return BINDING_ACTIONS[self.binding_for(key)]

    def keys_for(self, binding: Binding) -> FrozenSet[str]:
        return frozenset(k for k, b in self._key_to_binding.items() if b is binding)

    def is_game_key(self, key: object) -> bool:
        try:
            return normalize_key(key) in self._game_keys
        except UnroutableInput:
            return False

    def is_start_key(self, key: str) -> bool:
        return key in self._start_keys

    def is_resume_key(self, key: str) -> bool:
        return key in self._resume_keys

    def is_menu_return_key(self, key: str) -> bool:
        return key in self._menu_return_keys

    def is_float_up_key(self, key: str) -> bool:
        return key in self._float_up_keys

    def any_float_up_key(self, pressed: Iterable[str]) -> bool:
        return any(k in self._float_up_keys for k in pressed)

    def lateral_dx(self, key: str) -> int:
        """-1 / +1 for left / right movement keys, 0 otherwise."""
        binding = self._key_to_binding.get(key)
        if binding is Binding.MOVE_LEFT:
            return -1
        if binding is Binding.MOVE_RIGHT:
            return 1
        return 0

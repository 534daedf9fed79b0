"""
Input State Machine
===================

Turns raw key-down/key-up events into semantic game actions.

- Routing follows the controller's current GamePhase, pulled on every event.
- Held movement keys auto-repeat (DAS): one action on press, a pause of
  ``das_initial_ms``, then one action every ``das_repeat_ms``.
- FLOAT pieces move diagonally up when an up key and a lateral key are held
  together.

Timers are timestamp polls: the event loop calls ``tick(now_ms)`` every
frame and any due repeats fire inside that call. Nothing runs on another
thread, and an event delivered from inside ``on_action`` is queued until the
current dispatch completes.
"""

from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional, Tuple

from neondrop.core.actions import Action, ActionType, PAUSE, RETURN_TO_MENU, START_GAME
from neondrop.core.config_loader import GameConfig, get_config
from neondrop.core.errors import UnroutableInput
from neondrop.core.game_state import GamePhase, GameState
from neondrop.core.key_map import KeyMap, normalize_key


class TimerPhase(enum.Enum):
    NONE = "none"
    INITIAL_DELAY = "initial_delay"
    REPEATING = "repeating"


@dataclass(frozen=True)
class KeyState:
    """Pressed flag and auto-repeat phase of one physical key."""
    pressed: bool
    timer: TimerPhase


@dataclass
class _RepeatTimer:
    action: Action
    phase: TimerPhase
    next_fire_ms: float


class InputStateMachine:
    """
    Keyboard router for gameplay input.

    This object never changes game state. Its only job is to:
      - debounce presses (OS auto-repeat never re-triggers a held key)
      - gate keys by game phase
      - run DAS timers for held movement keys
      - call ``on_action`` for every action produced
    """

    def __init__(
        self,
        on_action: Callable[[Action], None],
        get_state: Callable[[], GameState],
        config: Optional[GameConfig] = None,
        key_map: Optional[KeyMap] = None,
        debug: bool = False
    ):
        """
        on_action:
            Callback receiving each produced Action.
        get_state:
            Pull query for the controller's current GameState.
        config:
            Game configuration. Uses default if None.
        key_map:
            Optional override for the binding table.
        """
        if config is None:
            config = get_config()

        self._on_action = on_action
        self._get_state = get_state
        self._key_map = key_map if key_map is not None else KeyMap(config)
        self._initial_ms = config.input.das_initial_ms
        self._repeat_ms = config.input.das_repeat_ms
        self._debug = debug

        # Press order matters for the diagonal: newest lateral key wins.
        self._pressed: Dict[str, float] = {}
        self._timers: Dict[str, _RepeatTimer] = {}

        # Run-to-completion queue for events raised during dispatch.
        self._pending: Deque[Tuple[Callable, tuple]] = deque()
        self._dispatching = False

        self._total_presses: int = 0
        self._ignored_presses: int = 0
        self._emitted_actions: int = 0

    # ------------------------------------------------------------------
    # Public API used by the event loop
    # ------------------------------------------------------------------

    def on_key_down(self, key: object, now_ms: float, text_focus: bool = False) -> None:
        """
        Handle a key press at ``now_ms``.

        ``text_focus`` is True when a text-entry widget has focus; the press
        is then left to that widget.
        """
        self._submit(self._handle_key_down, key, now_ms, text_focus)

    def on_key_up(self, key: object, now_ms: Optional[float] = None) -> None:
        """
        Release a key and cancel its timer, in every phase.

        Release is timestamp-independent; ``now_ms`` is accepted so event
        loops can call both handlers the same way, and is not used.
        """
        self._submit(self._handle_key_up, key)

    def tick(self, now_ms: float) -> None:
        """Fire every auto-repeat due at or before ``now_ms``."""
        self._submit(self._handle_tick, now_ms)

    def on_blur(self) -> None:
        """
        Window lost focus.

        Key-up events will not arrive while unfocused, so pressed state is
        dropped along with every timer.
        """
        self._submit(self._handle_focus_change, True)

    def on_focus(self) -> None:
        """Window regained focus."""
        self._submit(self._handle_focus_change, False)

    def cancel_all_timers(self) -> None:
        """Stop every auto-repeat. Safe to call repeatedly."""
        if self._timers and self._debug:
            print(f"[DEBUG] Cancelling {len(self._timers)} repeat timer(s)")
        self._timers.clear()

    def cancel_timer(self, key: str) -> None:
        """Stop the auto-repeat of one key. No-op if none is running."""
        self._timers.pop(key, None)

    def clear_pressed_keys(self) -> None:
        self._pressed.clear()

    def key_state(self, key: str) -> KeyState:
        name = normalize_key(key)
        timer = self._timers.get(name)
        return KeyState(
            pressed=name in self._pressed,
            timer=timer.phase if timer is not None else TimerPhase.NONE
        )

    @property
    def pressed_keys(self) -> Tuple[str, ...]:
        """Currently held game keys, oldest first."""
        return tuple(self._pressed)

    @property
    def active_timer_count(self) -> int:
        return len(self._timers)

    def stats(self) -> Dict[str, int]:
        return {
            "total_presses": self._total_presses,
            "ignored_presses": self._ignored_presses,
            "emitted_actions": self._emitted_actions,
        }

    def reset_stats(self) -> None:
        """Reset debugging counters. Does not change pressed key state."""
        self._total_presses = 0
        self._ignored_presses = 0
        self._emitted_actions = 0

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _submit(self, handler: Callable, *args) -> None:
        if self._dispatching:
            self._pending.append((handler, args))
            return

        self._dispatching = True
        try:
            handler(*args)
            while self._pending:
                queued, queued_args = self._pending.popleft()
                queued(*queued_args)
        finally:
            self._dispatching = False

    def _emit(self, action: Action) -> None:
        self._emitted_actions += 1
        if self._debug:
            print(f"[DEBUG] Input action: {action!r}")
        self._on_action(action)

    def _handle_key_down(self, key: object, now_ms: float, text_focus: bool) -> None:
        try:
            name = normalize_key(key)
        except UnroutableInput:
            self._ignored_presses += 1
            return

        if text_focus or name in self._pressed or not self._key_map.is_game_key(name):
            self._ignored_presses += 1
            return

        self._pressed[name] = now_ms
        self._total_presses += 1

        state = self._get_state()
        phase = state.phase
        if not phase.is_active_play:
            self.cancel_all_timers()

        if phase is GamePhase.MENU:
            if self._key_map.is_start_key(name):
                self._emit(START_GAME)
            return

        if phase is GamePhase.PAUSED:
            if self._key_map.is_resume_key(name):
                self._emit(PAUSE)
            return

        if phase.is_game_over:
            if self._key_map.is_menu_return_key(name):
                self._emit(RETURN_TO_MENU)
            return

        try:
            action = self._key_map.action_for(name)
        except UnroutableInput:
            # Class-only key (e.g. a start key) with no gameplay binding
            return
        if action is None:
            return

        self._dispatch_gameplay(name, action, state)

        if action.is_movement:
            self._start_repeat(name, action, now_ms)

    def _handle_key_up(self, key: object) -> None:
        try:
            name = normalize_key(key)
        except UnroutableInput:
            return
        self._pressed.pop(name, None)
        self.cancel_timer(name)

    def _handle_focus_change(self, lost: bool) -> None:
        self.cancel_all_timers()
        if lost:
            self.clear_pressed_keys()

    def _handle_tick(self, now_ms: float) -> None:
        # Timers never outlive a phase outside active play, due or not
        if self._timers and not self._get_state().phase.is_active_play:
            self.cancel_all_timers()
            return

        while self._timers:
            due_ms, key = min(
                (timer.next_fire_ms, key) for key, timer in self._timers.items()
            )
            if due_ms > now_ms:
                return

            state = self._get_state()
            if not state.phase.is_active_play:
                self.cancel_all_timers()
                return

            timer = self._timers[key]
            timer.phase = TimerPhase.REPEATING
            timer.next_fire_ms = due_ms + self._repeat_ms
            self._dispatch_gameplay(key, timer.action, state)

    def _start_repeat(self, key: str, action: Action, now_ms: float) -> None:
        # One timer per key
        if key in self._timers:
            return
        self._timers[key] = _RepeatTimer(
            action=action,
            phase=TimerPhase.INITIAL_DELAY,
            next_fire_ms=now_ms + self._initial_ms
        )

    # ------------------------------------------------------------------
    # Gameplay routing
    # ------------------------------------------------------------------

    def _held_lateral_dx(self) -> int:
        """Direction of the most recently pressed lateral key, 0 if none."""
        for key in reversed(tuple(self._pressed)):
            dx = self._key_map.lateral_dx(key)
            if dx:
                return dx
        return 0

    def _dispatch_gameplay(self, key: str, action: Action, state: GameState) -> None:
        if action.type is ActionType.PAUSE:
            self._emit(PAUSE)
            return

        if state.is_float_piece:
            # Up while a lateral key is held
            if action.type is ActionType.ROTATE and self._key_map.is_float_up_key(key):
                dx = self._held_lateral_dx()
                if dx:
                    self._emit(Action.move(dx, -1))
                    return

            # Lateral while an up key is held
            if action.is_lateral and self._key_map.any_float_up_key(self._pressed):
                self._emit(Action.move(action.dx, -1))
                return

        self._emit(action)

"""
Pygame Input Bridge
===================

Feeds pygame keyboard and window-focus events into an InputStateMachine.

Usage:
    bridge = PygameInputBridge(machine)
    while running:
        bridge.pump(pygame.event.get(), pygame.time.get_ticks())
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import pygame

from neondrop.core.input_state_machine import InputStateMachine


class PygameInputBridge:
    """
    Translates pygame events to state machine calls.

    Events the bridge does not handle are returned from ``pump`` so the
    caller can process them (QUIT, mouse, ...).
    """

    def __init__(
        self,
        machine: InputStateMachine,
        text_focus=None
    ):
        """
        machine:
            The InputStateMachine to drive.
        text_focus:
            Optional callable returning True while a text field has focus.
        """
        self._machine = machine
        self._text_focus = text_focus

    @staticmethod
    def key_name(event: pygame.event.Event) -> str:
        """pygame key name of a KEYDOWN/KEYUP event ("left", "space", ...)."""
        return pygame.key.name(event.key)

    def handle_event(self, event: pygame.event.Event, now_ms: float) -> bool:
        """
        Route one event.

        Returns True if the event was a keyboard or focus event.
        """
        if event.type == pygame.KEYDOWN:
            focused = bool(self._text_focus()) if self._text_focus is not None else False
            self._machine.on_key_down(self.key_name(event), now_ms, text_focus=focused)
            return True

        if event.type == pygame.KEYUP:
            self._machine.on_key_up(self.key_name(event), now_ms)
            return True

        if event.type == pygame.WINDOWFOCUSLOST:
            self._machine.on_blur()
            return True

        if event.type == pygame.WINDOWFOCUSGAINED:
            self._machine.on_focus()
            return True

        return False

    def pump(
        self,
        events: Iterable[pygame.event.Event],
        now_ms: Optional[float] = None
    ) -> List[pygame.event.Event]:
        """
        Route a batch of events, then tick auto-repeat timers.

        Args:
            events: Events from ``pygame.event.get()``.
            now_ms: Frame timestamp. Uses ``pygame.time.get_ticks()`` if None.

        Returns:
            Events the bridge did not consume.
        """
        if now_ms is None:
            now_ms = pygame.time.get_ticks()

        unhandled = [event for event in events if not self.handle_event(event, now_ms)]
        self._machine.tick(now_ms)
        return unhandled

"""
Human Play Harness
==================

Drives the FLOAT core from a real pygame event loop. The board is a toy:
each piece is a single block, so the harness shows input routing, DAS,
the FLOAT diagonal, and how spawn decisions follow the stack height.

Controls:
    - Space/Enter: Start game (menu), return to menu (game over)
    - Arrows / WASD: Move, Up/W rotates (moves diagonally up for FLOAT + lateral)
    - Space/F: Hard drop
    - C: Hold
    - Esc/P: Pause
    - Close the window to quit

Usage:
    python -m tools.play_human [--date 2026-10-19] [--seed SEED] [--debug]
"""

from __future__ import annotations

import argparse
import random
import sys
from collections import deque
from datetime import date
from typing import Deque, List, Optional

import numpy as np

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from neondrop.core.actions import Action, ActionType
from neondrop.core.config_loader import GameConfig, load_config
from neondrop.core.daily_seed import DailyPackage
from neondrop.core.float_session import FloatSession
from neondrop.core.game_state import STANDARD_PIECES, GamePhase, GameState, PieceType, stack_height_of
from neondrop.core.input_state_machine import InputStateMachine


CELL = 28
PIECE_COLORS = {
    PieceType.I: (0, 255, 255),
    PieceType.J: (0, 0, 255),
    PieceType.L: (255, 127, 0),
    PieceType.O: (255, 255, 0),
    PieceType.S: (0, 255, 0),
    PieceType.T: (138, 43, 226),
    PieceType.Z: (255, 0, 0),
    PieceType.FLOAT: (255, 255, 255),
}


class DemoController:
    """Minimal game controller: phase, a single-block piece, and a board."""

    def __init__(self, session: FloatSession, config: GameConfig, seed: int):
        self._session = session
        self._width = config.board.width
        self._height = config.board.height
        self._bag_rng = random.Random(seed)
        self._bag: List[PieceType] = []

        self.board = np.zeros((self._height, self._width), dtype=np.int8)
        self.phase = GamePhase.MENU
        self.current: Optional[PieceType] = None
        self.held: Optional[PieceType] = None
        self.x = 0
        self.y = 0
        self.log: Deque[str] = deque(maxlen=12)

    def get_state(self) -> GameState:
        return GameState(phase=self.phase, current_piece_type=self.current, board=self.board)

    def _next_from_bag(self) -> PieceType:
        if not self._bag:
            self._bag = list(STANDARD_PIECES)
            self._bag_rng.shuffle(self._bag)
        return self._bag.pop()

    def _column_top(self, x: int) -> int:
        """Row index where a block dropped in column x comes to rest."""
        filled = np.flatnonzero(self.board[:, x])
        return int(filled[0]) - 1 if filled.size else self._height - 1

    def _spawn(self) -> None:
        decision = self._session.spawn(stack_height_of(self.board))
        self.current = PieceType.FLOAT if decision.is_float else self._next_from_bag()
        self.x = self._width // 2
        self.y = 0
        if decision.is_float:
            self.log.append(f"FLOAT spawned ({decision.reason}, {decision.mercy_percent:.1f}%)")

    def apply(self, action: Action) -> None:
        self.log.append(repr(action))

        if action.type is ActionType.START_GAME:
            self.board[:] = 0
            self.held = None
            self._session.reset_for_new_game()
            self.phase = GamePhase.PLAYING
            self._spawn()
        elif action.type is ActionType.RETURN_TO_MENU:
            self.phase = GamePhase.MENU
            self.current = None
        elif action.type is ActionType.PAUSE:
            self.phase = GamePhase.PAUSED if self.phase is not GamePhase.PAUSED else GamePhase.PLAYING
        elif action.type is ActionType.MOVE:
            self.x = max(0, min(self._width - 1, self.x + action.dx))
            self.y = max(0, min(self._column_top(self.x), self.y + action.dy))
        elif action.type is ActionType.HOLD:
            self.current, self.held = (self.held or self._next_from_bag()), self.current
        elif action.type is ActionType.HARD_DROP:
            top = self._column_top(self.x)
            if top < 0:
                self.phase = GamePhase.GAME_OVER
                return
            self.board[top, self.x] = 1
            if top == 0:
                self.phase = GamePhase.GAME_OVER
                return
            self._spawn()


class HumanPlayer:
    """Pygame loop wiring the bridge, the state machine, and the controller."""

    def __init__(
        self,
        package: DailyPackage,
        config: Optional[GameConfig] = None,
        target_fps: int = 60,
        debug: bool = False
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        from neondrop.core.pygame_input import PygameInputBridge

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps
        self._session = FloatSession(package, config, debug=debug)
        self._controller = DemoController(self._session, config, package.seed)
        self._machine = InputStateMachine(
            self._controller.apply,
            self._controller.get_state,
            config,
            debug=debug
        )
        self._bridge = PygameInputBridge(self._machine)

        pygame.init()
        board_w = config.board.width * CELL
        board_h = config.board.height * CELL
        self._screen = pygame.display.set_mode((board_w + 320, board_h))
        pygame.display.set_caption(f"NeonDrop FLOAT harness - {package.date}")
        self._clock = pygame.time.Clock()
        self._font = pygame.font.Font(None, 22)
        self._running = True

    @property
    def session(self) -> FloatSession:
        return self._session

    def run(self) -> None:
        while self._running:
            for event in self._bridge.pump(pygame.event.get()):
                if event.type == pygame.QUIT:
                    self._running = False
            self._render()
            self._clock.tick(self._target_fps)
        pygame.quit()

    def _render(self) -> None:
        c = self._controller
        self._screen.fill((12, 12, 24))

        for row, col in zip(*np.nonzero(c.board)):
            pygame.draw.rect(self._screen, (90, 90, 140), (col * CELL, row * CELL, CELL - 1, CELL - 1))
        if c.current is not None and c.phase.is_gameplay:
            color = PIECE_COLORS.get(c.current, (200, 200, 200))
            pygame.draw.rect(self._screen, color, (c.x * CELL, c.y * CELL, CELL - 1, CELL - 1))

        stats = self._session.get_stats()
        lines = [
            f"Phase: {c.phase.value}",
            f"Piece: {c.current.value if c.current else '-'}  Hold: {c.held.value if c.held else '-'}",
            f"Stack height: {stack_height_of(c.board)}",
            f"FLOATs: {stats.total_floats}/{stats.total_pieces} ({stats.float_percent:.1f}%)",
            "",
        ] + list(c.log)

        x0 = self._config.board.width * CELL + 12
        for i, text in enumerate(lines):
            surface = self._font.render(text, True, (220, 220, 220))
            self._screen.blit(surface, (x0, 12 + i * 20))

        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play the NeonDrop FLOAT harness")
    parser.add_argument("--date", type=str, default=None, help="ISO date (default: today)")
    parser.add_argument("--seed", type=int, default=None, help="Explicit seed")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--debug", action="store_true", help="Print every decision and action")

    args = parser.parse_args()

    day = args.date or date.today().isoformat()
    package = DailyPackage(date=day, seed=args.seed) if args.seed is not None else DailyPackage.for_date(day)

    try:
        player = HumanPlayer(package, target_fps=args.fps, debug=args.debug)
        player.run()
        stats = player.session.get_stats()
        print(f"\nFLOATs: {stats.total_floats}/{stats.total_pieces} ({stats.float_percent:.1f}%)")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

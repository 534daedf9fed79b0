"""
Game State
==========

Read-only view of the game controller's state as seen by the FLOAT core.

The controller owns phase, board and pieces; the core only pulls a GameState
snapshot when it needs to route an input or measure the stack.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

import numpy as np


class GamePhase(enum.Enum):
    MENU = "MENU"
    PLAYING = "PLAYING"
    LOCKING = "LOCKING"
    PAUSED = "PAUSED"
    GAME_OVER = "GAME_OVER"
    GAME_OVER_SEQUENCE = "GAME_OVER_SEQUENCE"

    @property
    def is_active_play(self) -> bool:
        """Phases where movement and rotation are processed."""
        return self in (GamePhase.PLAYING, GamePhase.LOCKING)

    @property
    def is_gameplay(self) -> bool:
        """Phases that capture game keys (active play or paused)."""
        return self.is_active_play or self is GamePhase.PAUSED

    @property
    def is_game_over(self) -> bool:
        return self in (GamePhase.GAME_OVER, GamePhase.GAME_OVER_SEQUENCE)


class PieceType(enum.Enum):
    # Standard tetrominoes
    I = "I"
    J = "J"
    L = "L"
    O = "O"
    S = "S"
    T = "T"
    Z = "Z"
    # Mercy piece
    FLOAT = "FLOAT"


STANDARD_PIECES = (
    PieceType.I, PieceType.J, PieceType.L, PieceType.O,
    PieceType.S, PieceType.T, PieceType.Z,
)


@dataclass(frozen=True)
class GameState:
    """Snapshot pulled from the controller on every key event."""
    phase: GamePhase
    current_piece_type: Optional[PieceType] = None
    board: Optional[np.ndarray] = None

    @property
    def is_float_piece(self) -> bool:
        return self.current_piece_type is PieceType.FLOAT


def stack_height_of(board: np.ndarray) -> int:
    """
    Height of the tallest occupied column.

    Row 0 is the top of the board. An empty board has height 0, a board with
    a block in row 0 has height equal to its row count.
    """
    grid = np.asarray(board)
    if grid.ndim != 2:
        raise ValueError(f"Board must be 2-D, got shape {grid.shape}")

    occupied_rows = np.flatnonzero(grid.any(axis=1))
    if occupied_rows.size == 0:
        return 0
    return int(grid.shape[0] - occupied_rows[0])

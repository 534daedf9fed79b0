"""
Actions
=======

Semantic actions emitted by the input state machine and applied by the game
controller.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ActionType(enum.Enum):
    MOVE = "MOVE"
    ROTATE = "ROTATE"
    HARD_DROP = "HARD_DROP"
    HOLD = "HOLD"
    PAUSE = "PAUSE"
    START_GAME = "START_GAME"
    RETURN_TO_MENU = "RETURN_TO_MENU"


@dataclass(frozen=True)
class Action:
    """
    A single game action.

    ``dx``/``dy`` apply to MOVE (dy = -1 is up, +1 is down); ``direction``
    applies to ROTATE (1 clockwise, -1 counter-clockwise).
    """
    type: ActionType
    dx: int = 0
    dy: int = 0
    direction: int = 0

    @property
    def is_movement(self) -> bool:
        return self.type is ActionType.MOVE and (self.dx != 0 or self.dy != 0)

    @property
    def is_lateral(self) -> bool:
        return self.type is ActionType.MOVE and self.dx != 0 and self.dy == 0

    @classmethod
    def move(cls, dx: int, dy: int) -> "Action":
        return cls(ActionType.MOVE, dx=dx, dy=dy)

    @classmethod
    def rotate(cls, direction: int) -> "Action":
        return cls(ActionType.ROTATE, direction=direction)

    def __repr__(self) -> str:
        if self.type is ActionType.MOVE:
            return f"Action(MOVE, dx={self.dx}, dy={self.dy})"
        if self.type is ActionType.ROTATE:
            return f"Action(ROTATE, direction={self.direction})"
        return f"Action({self.type.value})"


START_GAME = Action(ActionType.START_GAME)
PAUSE = Action(ActionType.PAUSE)
RETURN_TO_MENU = Action(ActionType.RETURN_TO_MENU)
HARD_DROP = Action(ActionType.HARD_DROP)
HOLD = Action(ActionType.HOLD)

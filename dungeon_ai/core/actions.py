"""
Actions for the dungeon agent.

The hero moves one cell per turn in one of four directions. ``IDLE`` is a
sentinel: the search never picks it, but it is the safe answer whenever no
legal move exists.
"""
from __future__ import annotations
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, NamedTuple, Tuple

if TYPE_CHECKING:
    from dungeon_ai.core.world import WorldState


class Point(NamedTuple):
    """A grid coordinate; ``x`` grows to the right, ``y`` grows downwards."""
    x: int
    y: int

    def offset(self, dx: int, dy: int) -> 'Point':
        return Point(self.x + dx, self.y + dy)


class Action(Enum):
    """The closed set of hero actions."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3
    IDLE = 4

    @property
    def delta(self) -> Tuple[int, int]:
        """Grid offset produced by this action."""
        return ACTION_DELTAS[self]

    def is_move(self) -> bool:
        return self is not Action.IDLE

    def __str__(self) -> str:
        return self.name


ACTION_DELTAS: Dict[Action, Tuple[int, int]] = {
    Action.UP: (0, -1),
    Action.RIGHT: (1, 0),
    Action.DOWN: (0, 1),
    Action.LEFT: (-1, 0),
    Action.IDLE: (0, 0),
}

# Directions probed when enumerating legal moves, in a fixed order
MOVE_ACTIONS: List[Action] = [Action.UP, Action.RIGHT, Action.DOWN, Action.LEFT]


def next_position(position: Point, action: Action) -> Point:
    """
    Get the cell reached from ``position`` by ``action``.

    Args:
        position: Starting cell
        action: Action to take

    Returns:
        The neighbouring cell, or ``position`` itself for ``IDLE``
    """
    dx, dy = action.delta
    return position.offset(dx, dy)


def get_valid_moves(state: WorldState) -> List[Action]:
    """
    Get the legal moves of the hero in a world state.

    Each of the four directions is probed through the state's
    ``is_valid_move``. States without a hero have no legal moves.

    Args:
        state: Any ``WorldState``

    Returns:
        Legal move actions in ``MOVE_ACTIONS`` order
    """
    if not state.has_hero():
        return []
    return [
        action for action in MOVE_ACTIONS
        if state.is_valid_move(state.next_position(action))
    ]

"""
World state for the dungeon.

This module defines:
- WorldState: the abstract snapshot contract the planner reasons over
- Hero / Monster: the entities living in a dungeon
- DungeonMap: a small grid dungeon implementing WorldState
- Helper functions for creating, generating and playing out dungeons

The planner only ever talks to ``WorldState``; ``DungeonMap`` is a reference
world used to exercise it.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union
import copy
import math
import random

import numpy as np

from dungeon_ai.core.actions import Action, Point, next_position, get_valid_moves
from dungeon_ai.core.constants import (
    Tile, TILE_CHARS, TILE_SYMBOLS, HERO_CHAR, MONSTER_CHAR,
    HERO_HITPOINTS, HERO_DAMAGE, MONSTER_HITPOINTS, MONSTER_DAMAGE,
    POTION_HEAL, TREASURE_SCORE, MONSTER_SCORE,
    DEFAULT_WALL_DENSITY, DEFAULT_MONSTERS, DEFAULT_POTIONS,
    DEFAULT_TREASURES, DEFAULT_EXITS, MAX_GENERATION_ATTEMPTS
)


class WorldState(ABC):
    """
    Abstract snapshot of a world the hero acts in.

    Implementations must support independent deep copies: mutating a clone
    never affects the original.
    """

    @abstractmethod
    def clone(self) -> 'WorldState':
        """Return a deep, independent copy of this state."""

    @abstractmethod
    def apply(self, action: Action) -> 'WorldState':
        """Advance the world by one turn in place and return ``self``."""

    @abstractmethod
    def is_terminal(self) -> bool:
        """Whether the game has halted."""

    @abstractmethod
    def has_hero(self) -> bool:
        """Whether the state contains a hero at all."""

    @abstractmethod
    def hero_alive(self) -> bool:
        """Whether the hero exists and is alive."""

    @abstractmethod
    def hero_position(self) -> Optional[Point]:
        """Current hero cell, ``None`` without a hero."""

    @abstractmethod
    def next_position(self, action: Action) -> Optional[Point]:
        """Cell the hero would reach by ``action``, ``None`` without a hero."""

    @abstractmethod
    def is_valid_move(self, position: Optional[Point]) -> bool:
        """Whether the hero may step onto ``position``."""

    @abstractmethod
    def distance_to(self, target: Optional[Point]) -> float:
        """Path distance from the hero to ``target``; NaN when undefined."""

    @abstractmethod
    def score(self) -> int:
        """Hero's accumulated in-game score."""

    @abstractmethod
    def hitpoints(self) -> int:
        """Hero's remaining hit points."""

    @abstractmethod
    def get_exit(self, index: int) -> Optional[Point]:
        """Exit cell by index, ``None`` if out of range."""

    @abstractmethod
    def exit_count(self) -> int:
        """Number of exits on the map."""

    @abstractmethod
    def map_size(self) -> Tuple[int, int]:
        """Map dimensions as ``(size_x, size_y)``."""


@dataclass
class Hero:
    """The character controlled by an agent."""
    position: Point
    hitpoints: int = HERO_HITPOINTS
    max_hitpoints: int = HERO_HITPOINTS
    damage: int = HERO_DAMAGE
    score: int = 0
    alive: bool = True

    def take_damage(self, amount: int) -> None:
        self.hitpoints = max(0, self.hitpoints - amount)
        if self.hitpoints == 0:
            self.alive = False

    def heal(self, amount: int) -> None:
        self.hitpoints = min(self.max_hitpoints, self.hitpoints + amount)


@dataclass
class Monster:
    """A hostile that attacks the hero when adjacent."""
    position: Point
    hitpoints: int = MONSTER_HITPOINTS
    damage: int = MONSTER_DAMAGE

    @property
    def alive(self) -> bool:
        return self.hitpoints > 0

    def is_adjacent(self, position: Point) -> bool:
        return abs(self.position.x - position.x) + abs(self.position.y - position.y) == 1


class DungeonMap(WorldState):
    """
    Grid dungeon with walls, monsters, items and exits.

    The wall mask never changes after construction, so it and the distance
    fields derived from it are shared between clones. Everything else is
    copied.
    """

    def __init__(
        self,
        grid: np.ndarray,
        hero: Optional[Hero] = None,
        monsters: Optional[List[Monster]] = None,
        exits: Optional[List[Point]] = None,
    ):
        """
        Initialize a dungeon.

        Args:
            grid: 2D array of ``Tile`` codes indexed ``[y, x]``
            hero: The hero, or None for a hero-less state
            monsters: Monsters on the map
            exits: Exit cells; discovered from the grid when omitted
        """
        self.grid = np.asarray(grid, dtype=np.int8)
        if self.grid.ndim != 2:
            raise ValueError("grid must be two-dimensional")

        self.hero = hero
        self.monsters: List[Monster] = monsters or []
        if exits is None:
            ys, xs = np.nonzero(self.grid == Tile.EXIT)
            exits = [Point(int(x), int(y)) for y, x in zip(ys, xs)]
        self.exits: List[Point] = list(exits)

        self.turn = 0
        self.halted = False
        self.escaped = False

        self._walls = self.grid == Tile.WALL
        self._distance_fields: Dict[Point, np.ndarray] = {}

    # ------------------------------------------------------------------
    # WorldState contract

    def clone(self) -> 'DungeonMap':
        other = DungeonMap.__new__(DungeonMap)
        other.grid = self.grid.copy()
        other.hero = copy.deepcopy(self.hero)
        other.monsters = copy.deepcopy(self.monsters)
        other.exits = list(self.exits)
        other.turn = self.turn
        other.halted = self.halted
        other.escaped = self.escaped
        other._walls = self._walls
        other._distance_fields = self._distance_fields
        return other

    def apply(self, action: Action) -> 'DungeonMap':
        """
        Resolve one turn.

        The hero acts first: an invalid move or ``IDLE`` keeps it in place,
        stepping into a monster attacks it. Afterwards every monster next to
        the hero strikes once.
        """
        if self.halted or not self.hero_alive():
            return self

        if action.is_move():
            target = self.next_position(action)
            if self.is_valid_move(target):
                monster = self.monster_at(target)
                if monster is not None:
                    self._attack(monster)
                else:
                    self.hero.position = target
                    self._enter_cell(target)

        if not self.halted:
            for monster in self.monsters:
                if monster.is_adjacent(self.hero.position):
                    self.hero.take_damage(monster.damage)
            if not self.hero.alive:
                self.halted = True

        self.turn += 1
        return self

    def is_terminal(self) -> bool:
        return self.halted

    def has_hero(self) -> bool:
        return self.hero is not None

    def hero_alive(self) -> bool:
        return self.hero is not None and self.hero.alive

    def hero_position(self) -> Optional[Point]:
        return self.hero.position if self.hero is not None else None

    def next_position(self, action: Action) -> Optional[Point]:
        if self.hero is None:
            return None
        return next_position(self.hero.position, action)

    def is_valid_move(self, position: Optional[Point]) -> bool:
        if position is None or not self.in_bounds(position):
            return False
        return not self._walls[position.y, position.x]

    def distance_to(self, target: Optional[Point]) -> float:
        if self.hero is None or target is None or not self.in_bounds(target):
            return math.nan
        distances = self.distance_field(target)
        return float(distances[self.hero.position.y, self.hero.position.x])

    def score(self) -> int:
        return self.hero.score if self.hero is not None else 0

    def hitpoints(self) -> int:
        return self.hero.hitpoints if self.hero is not None else 0

    def get_exit(self, index: int) -> Optional[Point]:
        if 0 <= index < len(self.exits):
            return self.exits[index]
        return None

    def exit_count(self) -> int:
        return len(self.exits)

    def map_size(self) -> Tuple[int, int]:
        height, width = self.grid.shape
        return width, height

    # ------------------------------------------------------------------
    # Dungeon helpers

    @property
    def width(self) -> int:
        return self.grid.shape[1]

    @property
    def height(self) -> int:
        return self.grid.shape[0]

    def in_bounds(self, position: Point) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def tile_at(self, position: Point) -> Tile:
        return Tile(int(self.grid[position.y, position.x]))

    def monster_at(self, position: Point) -> Optional[Monster]:
        for monster in self.monsters:
            if monster.position == position:
                return monster
        return None

    def get_valid_moves(self) -> List[Action]:
        return get_valid_moves(self)

    def distance_field(self, target: Point) -> np.ndarray:
        """
        Get breadth-first path lengths from every cell to ``target``.

        Walls and cells with no path hold NaN. Fields are cached per target.

        Args:
            target: Destination cell

        Returns:
            Float array indexed ``[y, x]``
        """
        distances = self._distance_fields.get(target)
        if distances is None:
            distances = _wavefront(self._walls, target)
            self._distance_fields[target] = distances
        return distances

    def _attack(self, monster: Monster) -> None:
        monster.hitpoints -= self.hero.damage
        if not monster.alive:
            self.monsters.remove(monster)
            self.hero.score += MONSTER_SCORE

    def _enter_cell(self, position: Point) -> None:
        tile = self.tile_at(position)
        if tile == Tile.POTION:
            self.hero.heal(POTION_HEAL)
            self.grid[position.y, position.x] = Tile.FLOOR
        elif tile == Tile.TREASURE:
            self.hero.score += TREASURE_SCORE
            self.grid[position.y, position.x] = Tile.FLOOR
        elif tile == Tile.EXIT:
            self.halted = True
            self.escaped = True

    def render(self) -> str:
        """
        Get an ASCII picture of the dungeon.

        Returns:
            One line per row, hero and monsters drawn over their tiles
        """
        rows = [
            [TILE_SYMBOLS[Tile(int(code))] for code in row]
            for row in self.grid
        ]
        for monster in self.monsters:
            rows[monster.position.y][monster.position.x] = MONSTER_CHAR
        if self.hero is not None and self.hero.alive:
            rows[self.hero.position.y][self.hero.position.x] = HERO_CHAR
        return "\n".join("".join(row) for row in rows)

    def __str__(self) -> str:
        hero = (f"hp={self.hitpoints()}, score={self.score()}, at={tuple(self.hero.position)}"
                if self.hero is not None else "no hero")
        return (f"DungeonMap({self.width}x{self.height}, turn={self.turn}, "
                f"{hero}, monsters={len(self.monsters)}, halted={self.halted})")


def _wavefront(walls: np.ndarray, target: Point) -> np.ndarray:
    """Breadth-first distances to ``target`` over non-wall cells."""
    distances = np.full(walls.shape, np.nan)
    height, width = walls.shape
    if not (0 <= target.x < width and 0 <= target.y < height) or walls[target.y, target.x]:
        return distances

    passable = ~walls
    frontier = np.zeros(walls.shape, dtype=bool)
    frontier[target.y, target.x] = True
    visited = frontier.copy()
    distances[target.y, target.x] = 0.0

    step = 0
    while frontier.any():
        step += 1
        reached = np.zeros(walls.shape, dtype=bool)
        reached[1:, :] |= frontier[:-1, :]
        reached[:-1, :] |= frontier[1:, :]
        reached[:, 1:] |= frontier[:, :-1]
        reached[:, :-1] |= frontier[:, 1:]
        reached &= passable & ~visited
        distances[reached] = step
        visited |= reached
        frontier = reached

    return distances


def create_dungeon(layout: Union[str, Sequence[str]]) -> DungeonMap:
    """
    Create a dungeon from an ASCII layout.

    ``#`` wall, ``.`` floor, ``H`` hero, ``E`` exit, ``M`` monster,
    ``P`` potion, ``T`` treasure. A layout without ``H`` yields a hero-less
    state.

    Args:
        layout: Multi-line string or list of rows

    Returns:
        DungeonMap object

    Raises:
        ValueError: If the layout is empty, ragged, has unknown characters
            or more than one hero
    """
    if isinstance(layout, str):
        rows = [row for row in layout.strip("\n").splitlines()]
    else:
        rows = list(layout)

    if not rows or not rows[0]:
        raise ValueError("layout is empty")
    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise ValueError("layout rows must all have the same length")

    grid = np.zeros((len(rows), width), dtype=np.int8)
    hero: Optional[Hero] = None
    monsters: List[Monster] = []

    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            position = Point(x, y)
            if char == HERO_CHAR:
                if hero is not None:
                    raise ValueError("layout contains more than one hero")
                hero = Hero(position=position)
                grid[y, x] = Tile.FLOOR
            elif char == MONSTER_CHAR:
                monsters.append(Monster(position=position))
                grid[y, x] = Tile.FLOOR
            elif char in TILE_CHARS:
                grid[y, x] = TILE_CHARS[char]
            else:
                raise ValueError(f"unknown layout character {char!r} at ({x}, {y})")

    return DungeonMap(grid, hero=hero, monsters=monsters)


def generate_dungeon(
    width: int = 12,
    height: int = 8,
    rng: Optional[random.Random] = None,
    wall_density: float = DEFAULT_WALL_DENSITY,
    num_monsters: int = DEFAULT_MONSTERS,
    num_potions: int = DEFAULT_POTIONS,
    num_treasures: int = DEFAULT_TREASURES,
    num_exits: int = DEFAULT_EXITS,
) -> DungeonMap:
    """
    Generate a random walled dungeon with at least one reachable exit.

    Args:
        width: Map width including the border wall
        height: Map height including the border wall
        rng: Random source (a fresh unseeded one if None)
        wall_density: Fraction of interior cells turned into walls
        num_monsters: Monsters to place
        num_potions: Potions to place
        num_treasures: Treasures to place
        num_exits: Exits to place (at least 1)

    Returns:
        DungeonMap object

    Raises:
        ValueError: If the parameters cannot fit on the map
        RuntimeError: If no layout with a reachable exit was found
    """
    if width < 3 or height < 3:
        raise ValueError("dungeon must be at least 3x3")
    if num_exits < 1:
        raise ValueError("num_exits must be at least 1")
    if not 0 <= wall_density < 1:
        raise ValueError("wall_density must be in [0, 1)")

    interior = (width - 2) * (height - 2)
    needed = 1 + num_exits + num_monsters + num_potions + num_treasures
    if needed > interior:
        raise ValueError(f"cannot place {needed} entities on {interior} interior cells")

    rng = rng or random.Random()

    for _ in range(MAX_GENERATION_ATTEMPTS):
        grid = np.full((height, width), Tile.WALL, dtype=np.int8)
        grid[1:-1, 1:-1] = Tile.FLOOR

        cells = [Point(x, y) for y in range(1, height - 1) for x in range(1, width - 1)]
        rng.shuffle(cells)

        placed = cells[:needed]
        hero_cell = placed[0]
        exit_cells = placed[1:1 + num_exits]
        rest = placed[1 + num_exits:]
        monster_cells = rest[:num_monsters]
        potion_cells = rest[num_monsters:num_monsters + num_potions]
        treasure_cells = rest[num_monsters + num_potions:]

        for cell in cells[needed:]:
            if rng.random() < wall_density:
                grid[cell.y, cell.x] = Tile.WALL
        for cell in exit_cells:
            grid[cell.y, cell.x] = Tile.EXIT
        for cell in potion_cells:
            grid[cell.y, cell.x] = Tile.POTION
        for cell in treasure_cells:
            grid[cell.y, cell.x] = Tile.TREASURE

        dungeon = DungeonMap(
            grid,
            hero=Hero(position=hero_cell),
            monsters=[Monster(position=cell) for cell in monster_cells],
        )
        if any(not math.isnan(dungeon.distance_to(exit_cell)) for exit_cell in dungeon.exits):
            return dungeon

    raise RuntimeError("failed to generate a dungeon with a reachable exit")


def simulate_random_game(
    state: WorldState,
    rng: Optional[random.Random] = None,
    max_turns: int = 200
) -> WorldState:
    """
    Play random legal moves on a copy of ``state`` until it halts.

    Args:
        state: Starting state (left untouched)
        rng: Random source
        max_turns: Turn cap

    Returns:
        The final state
    """
    rng = rng or random.Random()
    state = state.clone()
    for _ in range(max_turns):
        if state.is_terminal() or not state.hero_alive():
            break
        moves = get_valid_moves(state)
        if not moves:
            break
        state.apply(rng.choice(moves))
    return state

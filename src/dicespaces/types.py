"""Core data structures for Dices-n-Spaces.

Rule reminders:
- Grid is W x H with coordinates (x, y) from top-left; ``grid[y][x]``.
- Cells hold owner codes: 0 empty, 1 player one, 2 player two.
- Player two starts in the corner diagonally opposite player one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Iterator, List, Optional, Tuple

Coord = Tuple[int, int]
Grid = List[List[int]]

EMPTY = 0


class Player(IntEnum):
    """Players in the game. Values double as the grid owner codes."""

    P1 = 1
    P2 = 2

    def opponent(self) -> "Player":
        """Return the opposing player."""

        return Player.P1 if self is Player.P2 else Player.P2


class Corner(str, Enum):
    """Grid corners used for starting positions."""

    TL = "TL"
    TR = "TR"
    BL = "BL"
    BR = "BR"

    def coord(self, width: int, height: int) -> Coord:
        if self is Corner.TL:
            return (0, 0)
        if self is Corner.TR:
            return (width - 1, 0)
        if self is Corner.BL:
            return (0, height - 1)
        return (width - 1, height - 1)

    def opposite(self) -> "Corner":
        return _OPPOSITE[self]


_OPPOSITE = {Corner.TL: Corner.BR, Corner.BR: Corner.TL, Corner.TR: Corner.BL, Corner.BL: Corner.TR}

# Default layout, assumed by AI code when a view carries no start cells.
HOME_CORNERS = {Player.P1: Corner.TL, Player.P2: Corner.BR}


class TurnPhase(Enum):
    """Turn state machine phases."""

    AWAITING_ROLL = "awaiting_roll"
    DICE_ROLLED = "dice_rolled"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle of cells."""

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def x_end(self) -> int:
        """Last column covered (inclusive)."""

        return self.x + self.width - 1

    @property
    def y_end(self) -> int:
        """Last row covered (inclusive)."""

        return self.y + self.height - 1

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def cells(self) -> Iterator[Coord]:
        for yy in range(self.y, self.y + self.height):
            for xx in range(self.x, self.x + self.width):
                yield xx, yy


@dataclass(frozen=True)
class Dice:
    """A roll of two dice."""

    a: int
    b: int

    @property
    def is_kush(self) -> bool:
        return self.a == self.b

    def dims(self, orientation: int) -> Tuple[int, int]:
        """Return ``(width, height)`` for the orientation bit (0 -> a x b, 1 -> b x a)."""

        if orientation not in (0, 1):
            raise ValueError(f"orientation must be 0 or 1, got {orientation}")
        return (self.a, self.b) if orientation == 0 else (self.b, self.a)

    def orientations(self) -> Tuple[int, ...]:
        return (0,) if self.is_kush else (0, 1)


@dataclass(frozen=True)
class Placement:
    """A candidate placement of the rolled rectangle."""

    x: int
    y: int
    orientation: int
    width: int
    height: int

    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass
class GameState:
    """Complete game state for Dices-n-Spaces.

    ``grid`` is a list of ``height`` rows of ``width`` owner codes.
    ``starts`` maps each player to its designated starting cell.
    """

    width: int
    height: int
    grid: Grid
    starts: Dict[Player, Coord]
    current: Player = Player.P1
    dice: Optional[Dice] = None
    orientation: int = 0
    phase: TurnPhase = TurnPhase.AWAITING_ROLL
    turn_number: int = 1

    @property
    def is_kush(self) -> bool:
        return self.dice is not None and self.dice.is_kush

    @property
    def game_over(self) -> bool:
        return self.phase is TurnPhase.GAME_OVER


@dataclass(frozen=True)
class GameView:
    """Read-only snapshot handed to AI code (the grid is a private copy)."""

    grid: Grid
    width: int
    height: int
    dice_values: Tuple[int, int]
    is_kush: bool
    current_player: Player
    turn_number: int
    # The mover's start cell; only consulted while the mover owns nothing.
    start_cell: Optional[Coord] = None

    @property
    def dice(self) -> Dice:
        return Dice(*self.dice_values)

    def mover_start(self) -> Coord:
        if self.start_cell is not None:
            return self.start_cell
        return HOME_CORNERS[self.current_player].coord(self.width, self.height)

"""Game engine for Dices-n-Spaces.

Rules:
- Each turn the mover rolls two dice (a, b) and places an a x b or b x a
  rectangle fully inside the grid.
- Normal roll: every target cell must be empty and the rectangle must touch
  (8-neighbourhood) a cell the mover owns; with no cells yet it must cover
  the mover's start cell.
- KUSH (a == b): the rectangle may go anywhere inside the grid, overwriting
  empty and opponent cells but not the mover's own cells.
- After a placement, enclosed cells flip to the mover (see ``contour``).
- The game ends when no empty cell remains; more cells wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .config import GameConfig
from .errors import PlacementRejection
from .types import EMPTY, Dice, GameState, Grid, Placement, Player, Rect

NEIGHBORS_8: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


@dataclass(frozen=True)
class PlacementCounts:
    """What a placement overwrote, for move logging."""

    was_empty: int
    stolen_from_opponent: int
    already_owned: int


def new_game(config: Optional[GameConfig] = None) -> GameState:
    """Create a new game; player one starts at ``config.p1_corner``."""

    cfg = (config or GameConfig()).validate()
    grid: Grid = [[EMPTY for _ in range(cfg.width)] for _ in range(cfg.height)]
    starts = {
        Player.P1: cfg.p1_corner.coord(cfg.width, cfg.height),
        Player.P2: cfg.p2_corner.coord(cfg.width, cfg.height),
    }
    if cfg.seed_start_cells:
        for player, (sx, sy) in starts.items():
            grid[sy][sx] = int(player)
    return GameState(width=cfg.width, height=cfg.height, grid=grid, starts=starts, current=cfg.first_player)


def in_bounds(state: GameState, x: int, y: int) -> bool:
    return 0 <= x < state.width and 0 <= y < state.height


def owner_at(state: GameState, x: int, y: int) -> int:
    return state.grid[y][x]


def count_owned(state: GameState, player: Player) -> int:
    code = int(player)
    return sum(row.count(code) for row in state.grid)


def count_empty(state: GameState) -> int:
    return sum(row.count(EMPTY) for row in state.grid)


def touches_player8(state: GameState, player: Player, x: int, y: int) -> bool:
    """Whether any of the 8 neighbours of ``(x, y)`` belongs to ``player``."""

    code = int(player)
    for dx, dy in NEIGHBORS_8:
        nx, ny = x + dx, y + dy
        if 0 <= nx < state.width and 0 <= ny < state.height and state.grid[ny][nx] == code:
            return True
    return False


def rect_in_bounds(state: GameState, rect: Rect) -> bool:
    return rect.x >= 0 and rect.y >= 0 and rect.x + rect.width <= state.width and rect.y + rect.height <= state.height


def check_placement(
    state: GameState,
    player: Player,
    rect: Rect,
    kush: bool,
    has_cells: Optional[bool] = None,
) -> Optional[PlacementRejection]:
    """Return ``None`` when ``rect`` is legal for ``player``, else the rejection reason.

    ``has_cells`` lets callers that test many rectangles pass the mover's
    "owns anything" flag once instead of recounting the grid.
    """

    if rect.width <= 0 or rect.height <= 0 or not rect_in_bounds(state, rect):
        return PlacementRejection.OUT_OF_BOUNDS

    code = int(player)
    grid = state.grid
    if kush:
        for x, y in rect.cells():
            if grid[y][x] == code:
                return PlacementRejection.OWN_CELLS
        return None

    for x, y in rect.cells():
        if grid[y][x] != EMPTY:
            return PlacementRejection.OCCUPIED

    if has_cells is None:
        has_cells = count_owned(state, player) > 0
    if not has_cells:
        sx, sy = state.starts[player]
        return None if rect.contains(sx, sy) else PlacementRejection.MUST_COVER_START

    for x, y in rect.cells():
        if touches_player8(state, player, x, y):
            return None
    return PlacementRejection.NOT_ADJACENT


def can_place(state: GameState, player: Player, rect: Rect, kush: bool) -> bool:
    return check_placement(state, player, rect, kush) is None


def place_rect(state: GameState, player: Player, rect: Rect) -> PlacementCounts:
    """Write ``player`` into every cell of ``rect`` without validation."""

    code = int(player)
    was_empty = stolen = owned = 0
    grid = state.grid
    for x, y in rect.cells():
        previous = grid[y][x]
        if previous == EMPTY:
            was_empty += 1
        elif previous == code:
            owned += 1
        else:
            stolen += 1
        grid[y][x] = code
    return PlacementCounts(was_empty=was_empty, stolen_from_opponent=stolen, already_owned=owned)


def _candidate_rects(state: GameState, dice: Dice) -> Iterable[Tuple[int, Rect]]:
    for orientation in dice.orientations():
        width, height = dice.dims(orientation)
        if width > state.width or height > state.height:
            continue
        for y in range(state.height - height + 1):
            for x in range(state.width - width + 1):
                yield orientation, Rect(x, y, width, height)


def generate_legal_moves(state: GameState, dice: Dice, player: Optional[Player] = None) -> List[Placement]:
    """All legal placements for ``dice`` in enumeration order (orientation, row, column).

    A saturated board has ended the game, so it yields no moves even for KUSH.
    """

    if is_terminal(state):
        return []
    mover = state.current if player is None else player
    kush = dice.is_kush
    has_cells = count_owned(state, mover) > 0
    moves: List[Placement] = []
    for orientation, rect in _candidate_rects(state, dice):
        if check_placement(state, mover, rect, kush, has_cells=has_cells) is None:
            moves.append(Placement(rect.x, rect.y, orientation, rect.width, rect.height))
    return moves


def has_any_move(state: GameState, dice: Dice, player: Optional[Player] = None) -> bool:
    if is_terminal(state):
        return False
    mover = state.current if player is None else player
    kush = dice.is_kush
    has_cells = count_owned(state, mover) > 0
    return any(
        check_placement(state, mover, rect, kush, has_cells=has_cells) is None
        for _, rect in _candidate_rects(state, dice)
    )


def is_terminal(state: GameState) -> bool:
    """Whether the board is saturated."""

    return count_empty(state) == 0


def winner(state: GameState) -> Player | None:
    """Return the player with more cells, or ``None`` on a tie."""

    p1 = count_owned(state, Player.P1)
    p2 = count_owned(state, Player.P2)
    if p1 > p2:
        return Player.P1
    if p2 > p1:
        return Player.P2
    return None


def format_grid(grid: Grid) -> str:
    """Render a grid as text: ``.`` empty, ``1``/``2`` owners."""

    return "\n".join("".join("." if cell == EMPTY else str(cell) for cell in row) for row in grid)

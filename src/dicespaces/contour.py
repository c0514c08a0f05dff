"""Contour capture: flip cells enclosed by the mover's territory.

The grid is embedded in an expanded grid with a one-cell ring around it.
Cells owned by the mover are walls. The ring is open air except where the
mover's shapes use the grid border as their missing wall:

- П-closure: a component touching one side at two or more cells walls the
  ring between its outermost touches on that side.
- Corner closure: a component touching two adjacent sides walls the ring
  from each touch to the shared corner. A component sitting on the corner
  cell itself gets none.
- A side touched exactly once can serve only one of its two corner
  closures; the one walling fewer ring cells wins, ties go to the earlier
  corner clockwise from top-left.

Air floods (4-connected) from every open ring cell; whatever it cannot
reach and the mover does not own is captured. The ring's own corner cells
are never walled, so expanded ``(0, 0)`` always seeds the flood.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

from .types import Coord, GameState, Grid, Player

logger = logging.getLogger(__name__)

TOP, RIGHT, BOTTOM, LEFT = 0, 1, 2, 3

# Clockwise from top-left; the order is the tie-break for closure conflicts.
CORNERS: Tuple[Tuple[str, int, int], ...] = (
    ("TL", TOP, LEFT),
    ("TR", TOP, RIGHT),
    ("BR", BOTTOM, RIGHT),
    ("BL", BOTTOM, LEFT),
)
_SIDE_CORNERS: Dict[int, Tuple[str, str]] = {
    TOP: ("TL", "TR"),
    RIGHT: ("TR", "BR"),
    BOTTOM: ("BR", "BL"),
    LEFT: ("BL", "TL"),
}
_DIRS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))
_DIRS_8 = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))

# Upper bound on fixpoint passes; each productive pass flips at least one cell.
_MAX_PASSES = 64


@dataclass
class SideTouch:
    """Cells of one component lying on one grid side."""

    count: int = 0
    lo: int = -1
    hi: int = -1

    def add(self, value: int) -> None:
        if self.count == 0:
            self.lo = self.hi = value
        else:
            self.lo = min(self.lo, value)
            self.hi = max(self.hi, value)
        self.count += 1


@dataclass
class Component:
    """An 8-connected group of the mover's cells and its border contacts."""

    size: int
    touches: List[SideTouch]
    corners: Set[str] = field(default_factory=set)


@dataclass
class CaptureResult:
    """Outcome of a single capture pass (no grid mutation)."""

    enclosed: List[Coord]
    walls: Set[Coord]
    suppressed: bool = False
    reason: Optional[str] = None


def _dims(grid: Grid) -> Tuple[int, int]:
    return (len(grid[0]) if grid else 0), len(grid)


def find_components(grid: Grid, player: Player) -> List[Component]:
    """Return the 8-connected components of ``player`` in row-major discovery order."""

    width, height = _dims(grid)
    code = int(player)
    seen = [[False] * width for _ in range(height)]
    corner_cells = {(0, 0): "TL", (width - 1, 0): "TR", (width - 1, height - 1): "BR", (0, height - 1): "BL"}
    components: List[Component] = []

    for sy in range(height):
        for sx in range(width):
            if grid[sy][sx] != code or seen[sy][sx]:
                continue
            touches = [SideTouch() for _ in range(4)]
            corners: Set[str] = set()
            size = 0
            seen[sy][sx] = True
            queue = deque([(sx, sy)])
            while queue:
                x, y = queue.popleft()
                size += 1
                if y == 0:
                    touches[TOP].add(x)
                if y == height - 1:
                    touches[BOTTOM].add(x)
                if x == 0:
                    touches[LEFT].add(y)
                if x == width - 1:
                    touches[RIGHT].add(y)
                if (x, y) in corner_cells:
                    corners.add(corner_cells[(x, y)])
                for dx, dy in _DIRS_8:
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height and not seen[ny][nx] and grid[ny][nx] == code:
                        seen[ny][nx] = True
                        queue.append((nx, ny))
            components.append(Component(size=size, touches=touches, corners=corners))
    return components


def _corner_segments(name: str, touches: List[SideTouch], width: int, height: int) -> List[Tuple[int, int, int]]:
    """Ring spans ``(side, first, last)`` a corner closure walls, in real-grid coordinates."""

    top, right, bottom, left = touches
    if name == "TL":
        return [(TOP, 0, top.lo), (LEFT, 0, left.lo)]
    if name == "TR":
        return [(TOP, top.hi, width - 1), (RIGHT, 0, right.lo)]
    if name == "BR":
        return [(BOTTOM, bottom.hi, width - 1), (RIGHT, right.hi, height - 1)]
    return [(BOTTOM, 0, bottom.lo), (LEFT, left.hi, height - 1)]


def _segment_length(segments: List[Tuple[int, int, int]]) -> int:
    return sum(last - first + 1 for _, first, last in segments)


def _ring_cell(side: int, pos: int, width: int, height: int) -> Coord:
    """Expanded-grid coordinate of the ring cell beside real border position ``pos``."""

    if side == TOP:
        return (pos + 1, 0)
    if side == BOTTOM:
        return (pos + 1, height + 1)
    if side == LEFT:
        return (0, pos + 1)
    return (width + 1, pos + 1)


def corner_closures(component: Component, width: int, height: int) -> List[str]:
    """Corner closures a component earns after conflict resolution."""

    touches = component.touches
    lengths: Dict[str, int] = {}
    for name, side_a, side_b in CORNERS:
        if touches[side_a].count == 0 or touches[side_b].count == 0:
            continue
        if name in component.corners:
            continue
        lengths[name] = _segment_length(_corner_segments(name, touches, width, height))

    order = [name for name, _, _ in CORNERS]
    for side in (TOP, RIGHT, BOTTOM, LEFT):
        if touches[side].count != 1:
            continue
        first, second = _SIDE_CORNERS[side]
        if first not in lengths or second not in lengths:
            continue
        a, b = sorted((first, second), key=order.index)
        loser = b if lengths[a] <= lengths[b] else a
        del lengths[loser]
    return [name for name in order if name in lengths]


def virtual_walls(grid: Grid, player: Player) -> Set[Coord]:
    """Ring cells (expanded coordinates) walled by ``player``'s border closures."""

    width, height = _dims(grid)
    walls: Set[Coord] = set()
    for component in find_components(grid, player):
        touches = component.touches
        for side in (TOP, RIGHT, BOTTOM, LEFT):
            touch = touches[side]
            if touch.count >= 2:
                for pos in range(touch.lo, touch.hi + 1):
                    walls.add(_ring_cell(side, pos, width, height))
        for name in corner_closures(component, width, height):
            for side, first, last in _corner_segments(name, touches, width, height):
                for pos in range(first, last + 1):
                    walls.add(_ring_cell(side, pos, width, height))
    return walls


def _ring(width: int, height: int) -> List[Coord]:
    ew, eh = width + 2, height + 2
    cells = [(x, 0) for x in range(ew)]
    cells += [(ew - 1, y) for y in range(1, eh)]
    cells += [(x, eh - 1) for x in range(ew - 2, -1, -1)]
    cells += [(0, y) for y in range(eh - 2, 0, -1)]
    return cells


def find_enclosed(grid: Grid, player: Player) -> CaptureResult:
    """Run one capture pass and report the cells it would flip."""

    width, height = _dims(grid)
    if width == 0 or height == 0:
        return CaptureResult(enclosed=[], walls=set())
    code = int(player)
    ew, eh = width + 2, height + 2
    wall = [[False] * ew for _ in range(eh)]
    for y in range(height):
        row = grid[y]
        for x in range(width):
            if row[x] == code:
                wall[y + 1][x + 1] = True

    ring_walls = virtual_walls(grid, player)
    for ex, ey in ring_walls:
        wall[ey][ex] = True

    corners = {(0, 0), (ew - 1, 0), (0, eh - 1), (ew - 1, eh - 1)}
    ring = _ring(width, height)
    open_ring = [cell for cell in ring if not wall[cell[1]][cell[0]]]
    # Every open ring cell seeds the flood, so only a fully walled side ring
    # (just the four corners left open) can leave the border unreachable.
    if not any(cell not in corners for cell in open_ring):
        return CaptureResult(enclosed=[], walls=ring_walls, suppressed=True, reason="sealed-border")

    reached = [[False] * ew for _ in range(eh)]
    queue = deque()
    for ex, ey in open_ring:
        reached[ey][ex] = True
        queue.append((ex, ey))
    while queue:
        x, y = queue.popleft()
        for dx, dy in _DIRS_4:
            nx, ny = x + dx, y + dy
            if 0 <= nx < ew and 0 <= ny < eh and not reached[ny][nx] and not wall[ny][nx]:
                reached[ny][nx] = True
                queue.append((nx, ny))

    enclosed: List[Coord] = []
    for y in range(height):
        row = grid[y]
        for x in range(width):
            if row[x] != code and not reached[y + 1][x + 1]:
                enclosed.append((x, y))
    return CaptureResult(enclosed=enclosed, walls=ring_walls)


def capture_grid(grid: Grid, player: Player) -> int:
    """Flip enclosed cells in ``grid`` to ``player`` until nothing else is enclosed.

    Returns the total number of flipped cells. Flipping can merge components
    and give them new border touches, so passes repeat to a fixpoint; a
    second call on the same grid therefore returns 0.
    """

    code = int(player)
    total = 0
    for _ in range(_MAX_PASSES):
        result = find_enclosed(grid, player)
        if result.suppressed:
            logger.warning("capture suppressed for player %d: %s", code, result.reason)
            break
        if not result.enclosed:
            break
        for x, y in result.enclosed:
            grid[y][x] = code
        total += len(result.enclosed)
        logger.debug("capture pass for player %d flipped %d cells", code, len(result.enclosed))
    return total


def capture_contours(target: Union[GameState, Grid], player: Player) -> int:
    """Apply contour capture for ``player`` to a game (or bare grid) and return the flip count."""

    grid = target.grid if isinstance(target, GameState) else target
    return capture_grid(grid, player)


def count_capturable(grid: Grid, player: Player) -> int:
    """How many cells a capture for ``player`` would flip, computed on a scratch copy."""

    scratch = [row[:] for row in grid]
    return capture_grid(scratch, player)

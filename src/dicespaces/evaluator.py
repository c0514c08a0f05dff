"""Heuristic move evaluation for the Medium AI.

A candidate placement scores as the sum of six terms::

    cell_gain + position + connection + contour + risk + lockdown

- cell_gain: rectangle area.
- position: grid corners covered, else a flat bonus for touching a border.
- connection: sides of the rectangle resting against the mover's cells.
- contour: one-pass capture swing for both players (see ``contour``),
  re-simulated only for placements that can change it.
- risk: penalties for being surrounded, isolated (KUSH only) or near a
  dense opponent cluster close to the border.
- lockdown: early-game bonus for besieging the opponent's home corner.

Under KUSH, an opponent still confined to a corner and small enough to fit
under the square is simply covered (``OVERRIDE_SCORE``).

Home corners follow the standard layout whatever the configured start
corner: player one top-left, player two bottom-right.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import FrozenSet, List, Optional, Sequence, Tuple

from .contour import find_enclosed
from .types import HOME_CORNERS, Coord, Corner, GameView, Grid, Placement, Player

logger = logging.getLogger(__name__)

OVERRIDE_SCORE = 99999.0

# Risk buckets: (threshold, penalty), checked in order.
SURROUND_PENALTIES: Tuple[Tuple[float, float], ...] = ((0.7, -200.0), (0.5, -100.0), (0.3, -30.0))
ISOLATION_PENALTIES: Tuple[Tuple[float, float], ...] = ((10, -150.0), (5, -80.0), (2, -30.0))
THREAT_PENALTIES = {"low": 0.0, "medium": -40.0, "high": -100.0, "immediate": -300.0}

THREAT_RADIUS = 3
LOCKDOWN_MAX_TURN = 15
LOCKDOWN_MAX_EXPANSION = 15
LOCKDOWN_WINDOW = 10
LARGE_PIECE_AREA = 16


@dataclass(frozen=True)
class HeuristicWeights:
    """Scalar weights of the Medium evaluator."""

    cell_gain: float = 10.0
    corner: float = 20.0
    edge: float = 10.0
    connection: float = 15.0
    kush_connection: float = 5.0
    contour: float = 10.0
    lockdown: float = 100.0
    # Scales every risk penalty.
    risk: float = 1.0
    name: str = "balanced"


def preset_weights(name: str) -> HeuristicWeights:
    preset = name.lower()
    base = HeuristicWeights()
    if preset == "balanced":
        return base
    if preset == "aggressive":
        return replace(base, contour=15.0, lockdown=150.0, risk=0.5, name="aggressive")
    if preset == "defensive":
        return replace(base, connection=25.0, lockdown=50.0, risk=1.5, name="defensive")
    raise ValueError(f"Unknown weight preset '{name}'")


@dataclass(frozen=True)
class MoveScore:
    """Per-term breakdown of one placement's score."""

    cell_gain: float = 0.0
    position: float = 0.0
    connection: float = 0.0
    contour: float = 0.0
    risk: float = 0.0
    lockdown: float = 0.0
    override: bool = False

    @property
    def total(self) -> float:
        if self.override:
            return OVERRIDE_SCORE
        return self.cell_gain + self.position + self.connection + self.contour + self.risk + self.lockdown

    def as_dict(self) -> dict:
        data = asdict(self)
        data["total"] = self.total
        return data


@dataclass(frozen=True)
class Decision:
    """The evaluator's pick for one turn."""

    move: Placement
    score: MoveScore

    @property
    def total(self) -> float:
        return self.score.total


@dataclass(frozen=True)
class CaptureBaseline:
    """Enclosed cells on the unmodified grid, shared by all candidates of a turn."""

    mover_cells: FrozenSet[Coord] = frozenset()
    opponent_cells: FrozenSet[Coord] = frozenset()

    @property
    def mover(self) -> int:
        return len(self.mover_cells)

    @property
    def opponent(self) -> int:
        return len(self.opponent_cells)


def _enclosed(grid: Grid, player: Player) -> FrozenSet[Coord]:
    """Cells a single capture pass for ``player`` would flip (none when suppressed)."""

    return frozenset(find_enclosed(grid, player).enclosed)


def _ring_cells(grid: Grid, move: Placement, margin: int):
    """In-bounds cells within ``margin`` of the rectangle, excluding the rectangle."""

    height = len(grid)
    width = len(grid[0]) if grid else 0
    for y in range(move.y - margin, move.y + move.height + margin):
        if not 0 <= y < height:
            continue
        inside_rows = move.y <= y < move.y + move.height
        for x in range(move.x - margin, move.x + move.width + margin):
            if not 0 <= x < width:
                continue
            if inside_rows and move.x <= x < move.x + move.width:
                continue
            yield x, y


def _owner_fraction(grid: Grid, move: Placement, owner: int, margin: int) -> float:
    total = owned = 0
    for x, y in _ring_cells(grid, move, margin):
        total += 1
        if grid[y][x] == owner:
            owned += 1
    return owned / total if total else 0.0


class _MirroredFrame:
    """Coordinates relative to a home corner, so that corner becomes the origin."""

    def __init__(self, corner: Corner, width: int, height: int) -> None:
        self.flip_x = corner in (Corner.TR, Corner.BR)
        self.flip_y = corner in (Corner.BL, Corner.BR)
        self.width = width
        self.height = height

    def cell(self, x: int, y: int) -> Tuple[int, int]:
        return (
            self.width - 1 - x if self.flip_x else x,
            self.height - 1 - y if self.flip_y else y,
        )

    def origin(self, move: Placement) -> Tuple[int, int]:
        """The rectangle's cell nearest the home corner, in mirrored coordinates."""

        x = move.x + move.width - 1 if self.flip_x else move.x
        y = move.y + move.height - 1 if self.flip_y else move.y
        return self.cell(x, y)


class HeuristicEvaluator:
    """Score candidate placements and pick the best one."""

    def __init__(self, weights: Optional[HeuristicWeights] = None) -> None:
        self.weights = weights or HeuristicWeights()

    def baseline(self, view: GameView) -> CaptureBaseline:
        mover = view.current_player
        return CaptureBaseline(
            mover_cells=_enclosed(view.grid, mover),
            opponent_cells=_enclosed(view.grid, mover.opponent()),
        )

    def choose(self, view: GameView, moves: Sequence[Placement]) -> Optional[Decision]:
        """Return the highest scoring move; ties keep the earliest candidate."""

        if not moves:
            return None
        override = self.override_move(view, moves)
        if override is not None:
            logger.info(
                "P%d KUSH covers the opponent's corner at (%d,%d)",
                int(view.current_player),
                override.x,
                override.y,
            )
            return Decision(override, MoveScore(override=True))

        baseline = self.baseline(view)
        best: Optional[Decision] = None
        for move in moves:
            score = self.evaluate_move(view, move, baseline=baseline)
            if best is None or score.total > best.total:
                best = Decision(move, score)
        assert best is not None
        logger.debug(
            "P%d best of %d moves: (%d,%d) o=%d %s",
            int(view.current_player),
            len(moves),
            best.move.x,
            best.move.y,
            best.move.orientation,
            best.score.as_dict(),
        )
        return best

    def evaluate_move(
        self, view: GameView, move: Placement, baseline: Optional[CaptureBaseline] = None
    ) -> MoveScore:
        if baseline is None:
            baseline = self.baseline(view)
        return MoveScore(
            cell_gain=self.score_cell_gain(move),
            position=self.score_position(view, move),
            connection=self.score_connection(view, move),
            contour=self.score_contour(view, move, baseline),
            risk=self.score_risk(view, move),
            lockdown=self.score_lockdown(view, move),
        )

    # -- individual terms -------------------------------------------------

    def score_cell_gain(self, move: Placement) -> float:
        return move.width * move.height * self.weights.cell_gain

    def score_position(self, view: GameView, move: Placement) -> float:
        rect = move.rect()
        covered = sum(1 for corner in Corner if rect.contains(*corner.coord(view.width, view.height)))
        if covered:
            return covered * self.weights.corner
        on_edge = rect.x == 0 or rect.y == 0 or rect.x + rect.width == view.width or rect.y + rect.height == view.height
        return self.weights.edge if on_edge else 0.0

    def connected_sides(self, view: GameView, move: Placement) -> int:
        grid = view.grid
        code = int(view.current_player)
        x, y, w, h = move.x, move.y, move.width, move.height
        sides = 0
        if y > 0 and any(grid[y - 1][xx] == code for xx in range(x, x + w)):
            sides += 1
        if y + h < view.height and any(grid[y + h][xx] == code for xx in range(x, x + w)):
            sides += 1
        if x > 0 and any(grid[yy][x - 1] == code for yy in range(y, y + h)):
            sides += 1
        if x + w < view.width and any(grid[yy][x + w] == code for yy in range(y, y + h)):
            sides += 1
        return sides

    def score_connection(self, view: GameView, move: Placement) -> float:
        weight = self.weights.kush_connection if view.is_kush else self.weights.connection
        return self.connected_sides(view, move) * weight

    def score_contour(self, view: GameView, move: Placement, baseline: CaptureBaseline) -> float:
        mover = view.current_player
        resim_mover = self._may_change_mover_capture(view, move, baseline)
        resim_opponent = self._covers_opponent(view, move)
        if not resim_mover and not resim_opponent:
            return 0.0

        code = int(mover)
        scratch = [row[:] for row in view.grid]
        for x, y in move.rect().cells():
            scratch[y][x] = code
        mover_gain = 0
        if resim_mover:
            mover_gain = len(_enclosed(scratch, mover)) - baseline.mover
        opponent_loss = 0
        if resim_opponent:
            opponent_loss = baseline.opponent - len(_enclosed(scratch, mover.opponent()))
        return (mover_gain + opponent_loss) * self.weights.contour

    def _may_change_mover_capture(self, view: GameView, move: Placement, baseline: CaptureBaseline) -> bool:
        """Whether the placement can alter what the mover encloses.

        A rectangle off the border that neither 8-touches the mover's cells
        nor overlaps an enclosed cell forms a lone convex wall: it closes
        nothing and opens nothing.
        """

        if move.x == 0 or move.y == 0 or move.x + move.width == view.width or move.y + move.height == view.height:
            return True
        code = int(view.current_player)
        for y in range(move.y - 1, move.y + move.height + 1):
            row = view.grid[y]
            for x in range(move.x - 1, move.x + move.width + 1):
                if row[x] == code or (x, y) in baseline.mover_cells:
                    return True
        return False

    def _covers_opponent(self, view: GameView, move: Placement) -> bool:
        # Only stolen cells change the opponent's walls; empty cells turned into
        # mover cells stay non-opponent, so its enclosed count cannot move.
        code = int(view.current_player.opponent())
        return any(view.grid[y][x] == code for x, y in move.rect().cells())

    def score_risk(self, view: GameView, move: Placement) -> float:
        penalty = self.surround_penalty(view, move)
        if view.is_kush:
            penalty += self.isolation_penalty(view, move)
        penalty += THREAT_PENALTIES[self.threat_level(view, move)]
        return penalty * self.weights.risk

    def surround_penalty(self, view: GameView, move: Placement) -> float:
        ratio = _owner_fraction(view.grid, move, int(view.current_player.opponent()), margin=1)
        for threshold, penalty in SURROUND_PENALTIES:
            if ratio > threshold:
                return penalty
        return 0.0

    def isolation_penalty(self, view: GameView, move: Placement) -> float:
        if self.connected_sides(view, move):
            return 0.0
        distance = self.distance_to_own(view, move)
        for threshold, penalty in ISOLATION_PENALTIES:
            if distance > threshold:
                return penalty
        return 0.0

    def distance_to_own(self, view: GameView, move: Placement) -> float:
        """Manhattan distance from the rectangle centre to the mover's nearest cell."""

        cx = move.x + move.width // 2
        cy = move.y + move.height // 2
        code = int(view.current_player)
        best = float("inf")
        for y, row in enumerate(view.grid):
            for x, cell in enumerate(row):
                if cell == code:
                    best = min(best, abs(x - cx) + abs(y - cy))
        return best

    def threat_level(self, view: GameView, move: Placement) -> str:
        """Coarse chance that the opponent closes a contour around the rectangle."""

        opponent = int(view.current_player.opponent())
        grid = view.grid
        nearby = 0
        for y in range(max(0, move.y - THREAT_RADIUS), min(view.height, move.y + move.height + THREAT_RADIUS)):
            row = grid[y]
            for x in range(max(0, move.x - THREAT_RADIUS), min(view.width, move.x + move.width + THREAT_RADIUS)):
                if row[x] == opponent:
                    nearby += 1

        border = 0
        if move.x < 3:
            border += 1
        if move.y < 3:
            border += 1
        if move.x + move.width > view.width - 3:
            border += 1
        if move.y + move.height > view.height - 3:
            border += 1

        if nearby > 30 and border >= 2:
            return "immediate"
        if nearby > 20 and border >= 1:
            return "high"
        if nearby > 10:
            return "medium"
        return "low"

    def opponent_expansion(self, view: GameView) -> int:
        """Opponent cells inside the window anchored at its home corner."""

        opponent = view.current_player.opponent()
        frame = _MirroredFrame(HOME_CORNERS[opponent], view.width, view.height)
        code = int(opponent)
        count = 0
        for dy in range(min(LOCKDOWN_WINDOW, view.height)):
            for dx in range(min(LOCKDOWN_WINDOW, view.width)):
                x, y = frame.cell(dx, dy)
                if view.grid[y][x] == code:
                    count += 1
        return count

    def score_lockdown(self, view: GameView, move: Placement) -> float:
        if view.turn_number > LOCKDOWN_MAX_TURN:
            return 0.0
        expansion = self.opponent_expansion(view)
        if expansion > LOCKDOWN_MAX_EXPANSION:
            return 0.0
        value = self.blocking_value(view, move, expansion)
        if not value:
            return 0.0
        multiplier = 2.0 if view.is_kush else 1.0
        if view.turn_number <= 5:
            multiplier *= 3.0
        elif view.turn_number <= 10:
            multiplier *= 1.5
        return value * multiplier * self.weights.lockdown

    def blocking_value(self, view: GameView, move: Placement, expansion: int) -> float:
        """How well ``move`` hems the opponent into its home corner, in ``[0, 1]``."""

        opponent = view.current_player.opponent()
        frame = _MirroredFrame(HOME_CORNERS[opponent], view.width, view.height)
        mx, my = frame.origin(move)
        distance = max(mx, my)
        area = move.width * move.height

        if area >= LARGE_PIECE_AREA:
            if _owner_fraction(view.grid, move, int(opponent), margin=1) > 0:
                return 1.0
            if distance <= 3:
                return 0.9
            if distance <= 7:
                return 0.7
            if distance <= 10:
                return 0.5
            return 0.0

        if area <= 2:
            min_safe, max_effective = 8, 14
        elif area <= 4:
            min_safe, max_effective = 6, 12
        else:
            min_safe, max_effective = 3, 10

        if distance < min_safe and area <= 2:
            return 0.0

        value = 0.0
        if min_safe <= distance <= max_effective:
            optimal = (min_safe + max_effective) / 2
            max_deviation = (max_effective - min_safe) / 2
            value = 1.0 - (abs(distance - optimal) / max_deviation) * 0.3
        if my <= 5 and mx > expansion and mx >= min_safe and mx < 15:
            value += 0.3
        if mx <= 5 and my > expansion and my >= min_safe and my < 15:
            value += 0.3
        if mx >= min_safe and my >= min_safe and mx < 15 and my < 15 and abs(mx - my) < 3:
            value += 0.2

        if area <= 2 and _owner_fraction(view.grid, move, int(opponent), margin=2) > 0.6:
            value *= 0.1
        return min(value, 1.0)

    def override_move(self, view: GameView, moves: Sequence[Placement]) -> Optional[Placement]:
        """Under KUSH, the move covering an opponent still confined to its home corner."""

        if not view.is_kush:
            return None
        opponent = view.current_player.opponent()
        code = int(opponent)
        cells: List[Tuple[int, int]] = [
            (x, y) for y, row in enumerate(view.grid) for x, cell in enumerate(row) if cell == code
        ]
        if not cells:
            return None
        min_x = min(x for x, _ in cells)
        max_x = max(x for x, _ in cells)
        min_y = min(y for _, y in cells)
        max_y = max(y for _, y in cells)
        side = view.dice_values[0]
        if max_x - min_x + 1 > side or max_y - min_y + 1 > side:
            return None

        home = HOME_CORNERS[opponent]
        if home is Corner.TL:
            if (min_x, min_y) != (0, 0):
                return None
            target = (0, 0)
        else:
            if (max_x, max_y) != (view.width - 1, view.height - 1):
                return None
            target = (view.width - side, view.height - side)

        for move in moves:
            if (move.x, move.y) == target:
                return move
        logger.debug("override target (%d,%d) is not a legal move", *target)
        return None

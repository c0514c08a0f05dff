"""Move log records and grid snapshots.

Each entry mirrors the browser game's history list: an ``init`` record for
the empty board, then one ``place`` or ``skip`` record per turn. The grid
snapshot is the row-major string of owner digits, so a record can be
replayed onto a fresh grid with :func:`grid_from_snapshot`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, TextIO

from .types import Dice, Grid, Player, Rect

RECORD_TYPES = ("init", "place", "skip")


def grid_snapshot(grid: Grid) -> str:
    """Row-major digit string of the grid (``"0"`` empty, ``"1"``/``"2"`` owners)."""

    return "".join(str(cell) for row in grid for cell in row)


def grid_from_snapshot(snapshot: str, width: int, height: int) -> Grid:
    """Rebuild a grid from :func:`grid_snapshot` output."""

    if len(snapshot) != width * height:
        raise ValueError(f"snapshot has {len(snapshot)} cells, expected {width * height}")
    if any(ch not in "012" for ch in snapshot):
        raise ValueError("snapshot may only contain the digits 0, 1 and 2")
    return [[int(ch) for ch in snapshot[row * width : (row + 1) * width]] for row in range(height)]


@dataclass(frozen=True)
class MoveRecord:
    """One history entry."""

    type: str
    turn: int
    player: Optional[Player] = None
    dice: Optional[Dice] = None
    rect: Optional[Rect] = None
    is_kush: bool = False
    stolen_cells: int = 0
    captured_by_contour: int = 0
    reason: Optional[str] = None
    score_p1: int = 0
    score_p2: int = 0
    free_after: int = 0
    grid_snapshot: str = ""

    def __post_init__(self) -> None:
        if self.type not in RECORD_TYPES:
            raise ValueError(f"unknown record type '{self.type}'")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "turn": self.turn,
            "player": int(self.player) if self.player is not None else None,
            "dice": {"a": self.dice.a, "b": self.dice.b} if self.dice is not None else None,
            "rect": (
                {"x": self.rect.x, "y": self.rect.y, "w": self.rect.width, "h": self.rect.height}
                if self.rect is not None
                else None
            ),
            "isKush": self.is_kush,
            "stolenCells": self.stolen_cells,
            "capturedByContour": self.captured_by_contour,
            "scoreAfter": {"p1": self.score_p1, "p2": self.score_p2},
            "freeAfter": self.free_after,
            "gridSnapshot": self.grid_snapshot,
        }
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoveRecord":
        dice = data.get("dice")
        rect = data.get("rect")
        player = data.get("player")
        scores = data.get("scoreAfter") or {}
        return cls(
            type=data["type"],
            turn=int(data.get("turn", 0)),
            player=Player(player) if player is not None else None,
            dice=Dice(dice["a"], dice["b"]) if dice else None,
            rect=Rect(rect["x"], rect["y"], rect["w"], rect["h"]) if rect else None,
            is_kush=bool(data.get("isKush", False)),
            stolen_cells=int(data.get("stolenCells", 0)),
            captured_by_contour=int(data.get("capturedByContour", 0)),
            reason=data.get("reason"),
            score_p1=int(scores.get("p1", 0)),
            score_p2=int(scores.get("p2", 0)),
            free_after=int(data.get("freeAfter", 0)),
            grid_snapshot=data.get("gridSnapshot", ""),
        )


def dump_records(records: Iterable[MoveRecord], stream: TextIO) -> int:
    """Write records as JSON lines; returns how many were written."""

    count = 0
    for record in records:
        stream.write(json.dumps(record.to_dict(), separators=(",", ":")))
        stream.write("\n")
        count += 1
    return count


def load_records(stream: TextIO) -> List[MoveRecord]:
    records: List[MoveRecord] = []
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(MoveRecord.from_dict(json.loads(line)))
        except (KeyError, TypeError, json.JSONDecodeError) as exc:
            raise ValueError(f"invalid move record on line {lineno}: {exc}") from exc
    return records

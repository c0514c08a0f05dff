"""Turn controller for scripted, UI-driven or AI play.

The controller owns one :class:`GameState` and sequences each turn:
roll (or inject) dice, pick an orientation, then place or skip. Rule
checks live in :mod:`engine` and :mod:`contour`; this module only enforces
the phase order and keeps the move history.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from . import engine
from .config import GameConfig
from .contour import capture_contours
from .errors import IllegalAction, IllegalPlacement
from .record import MoveRecord, grid_snapshot
from .types import Dice, GameState, GameView, Placement, Player, Rect, TurnPhase

logger = logging.getLogger(__name__)


class GameController:
    """Manage a single Dices-n-Spaces game, including dice, phases and history."""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = (config or GameConfig()).validate()
        self.rng = rng or random.Random()
        self.state: GameState
        self.history: List[MoveRecord]
        self.new_game()

    def new_game(self, config: Optional[GameConfig] = None) -> None:
        """Start a new game, optionally with a different configuration."""

        if config is not None:
            self.config = config.validate()
        self.state = engine.new_game(self.config)
        self.history = [self._record("init")]
        logger.info(
            "new %dx%d game, P1 at %s, P2 at %s",
            self.config.width,
            self.config.height,
            self.config.p1_corner.value,
            self.config.p2_corner.value,
        )

    @property
    def phase(self) -> TurnPhase:
        return self.state.phase

    @property
    def current_player(self) -> Player:
        return self.state.current

    @property
    def dice(self) -> Optional[Dice]:
        return self.state.dice

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    def scores(self) -> Dict[Player, int]:
        return {player: engine.count_owned(self.state, player) for player in Player}

    def winner(self) -> Optional[Player]:
        return engine.winner(self.state)

    def _require_phase(self, phase: TurnPhase, action: str) -> None:
        if self.state.phase is not phase:
            raise IllegalAction(
                f"cannot {action} now",
                context={"phase": self.state.phase.value, "expected": phase.value},
            )

    def roll_dice(self, rng: Optional[random.Random] = None) -> Dice:
        """Roll two dice for the current player.

        When no placement exists for the roll the turn is skipped
        automatically; the returned dice are still the ones rolled.
        """

        self._require_phase(TurnPhase.AWAITING_ROLL, "roll")
        generator = rng or self.rng
        dice = Dice(generator.randint(1, 6), generator.randint(1, 6))
        return self._accept_dice(dice)

    def set_dice(self, a: int, b: int) -> Dice:
        """Inject a roll instead of drawing one."""

        self._require_phase(TurnPhase.AWAITING_ROLL, "set dice")
        if not (1 <= a <= 6 and 1 <= b <= 6):
            raise ValueError("dice must be between 1 and 6")
        return self._accept_dice(Dice(a, b))

    def _accept_dice(self, dice: Dice) -> Dice:
        state = self.state
        state.dice = dice
        state.orientation = 0
        state.phase = TurnPhase.DICE_ROLLED
        logger.info(
            "turn %d: P%d rolled %d,%d%s",
            state.turn_number,
            int(state.current),
            dice.a,
            dice.b,
            " (KUSH)" if dice.is_kush else "",
        )
        if not engine.has_any_move(state, dice):
            self._finish_skip("auto-no-moves")
        return dice

    def set_orientation(self, orientation: int) -> None:
        self._require_phase(TurnPhase.DICE_ROLLED, "change orientation")
        if orientation not in (0, 1):
            raise ValueError(f"orientation must be 0 or 1, got {orientation}")
        if self.state.is_kush:
            return
        self.state.orientation = orientation

    def swap_orientation(self) -> int:
        self._require_phase(TurnPhase.DICE_ROLLED, "change orientation")
        if not self.state.is_kush:
            self.state.orientation ^= 1
        return self.state.orientation

    def legal_moves(self) -> List[Placement]:
        if self.state.dice is None or self.state.phase is not TurnPhase.DICE_ROLLED:
            raise IllegalAction("dice not rolled", context={"phase": self.state.phase.value})
        return engine.generate_legal_moves(self.state, self.state.dice)

    def place(self, x: int, y: int, orientation: Optional[int] = None) -> MoveRecord:
        """Place the rolled rectangle with its top-left cell at ``(x, y)``.

        Raises :class:`IllegalPlacement` (nothing changes) when the rules
        reject the rectangle.
        """

        self._require_phase(TurnPhase.DICE_ROLLED, "place")
        state = self.state
        assert state.dice is not None
        if orientation is None:
            orientation = state.orientation
        if state.is_kush:
            orientation = 0
        width, height = state.dice.dims(orientation)
        rect = Rect(x, y, width, height)
        player = state.current

        rejection = engine.check_placement(state, player, rect, state.is_kush)
        if rejection is not None:
            raise IllegalPlacement(rejection, context={"x": x, "y": y, "w": width, "h": height})

        counts = engine.place_rect(state, player, rect)
        captured = capture_contours(state, player)
        record = self._record(
            "place",
            player=player,
            dice=state.dice,
            rect=rect,
            is_kush=state.is_kush,
            stolen_cells=counts.stolen_from_opponent,
            captured_by_contour=captured,
        )
        self.history.append(record)
        logger.debug(
            "P%d placed %dx%d at (%d,%d): stole %d, captured %d",
            int(player),
            width,
            height,
            x,
            y,
            counts.stolen_from_opponent,
            captured,
        )
        self._end_turn()
        return record

    def skip(self) -> MoveRecord:
        """Pass the turn; only allowed when the roll cannot be placed anywhere."""

        self._require_phase(TurnPhase.DICE_ROLLED, "skip")
        state = self.state
        assert state.dice is not None
        if state.is_kush:
            raise IllegalAction("cannot skip a KUSH roll")
        if engine.has_any_move(state, state.dice):
            raise IllegalAction("cannot skip while a legal placement exists")
        return self._finish_skip("manual")

    def _finish_skip(self, reason: str) -> MoveRecord:
        state = self.state
        record = self._record("skip", player=state.current, dice=state.dice, is_kush=state.is_kush, reason=reason)
        self.history.append(record)
        logger.info("turn %d: P%d skipped (%s)", state.turn_number, int(state.current), reason)
        self._end_turn()
        return record

    def _end_turn(self) -> None:
        state = self.state
        state.dice = None
        state.orientation = 0
        if engine.is_terminal(state):
            state.phase = TurnPhase.GAME_OVER
            scores = self.scores()
            victor = engine.winner(state)
            logger.info(
                "game over after %d turns: %d-%d, %s",
                state.turn_number,
                scores[Player.P1],
                scores[Player.P2],
                f"P{int(victor)} wins" if victor is not None else "tie",
            )
            return
        state.current = state.current.opponent()
        state.turn_number += 1
        state.phase = TurnPhase.AWAITING_ROLL

    def _record(self, kind: str, **fields) -> MoveRecord:
        state = self.state
        return MoveRecord(
            type=kind,
            turn=state.turn_number,
            score_p1=engine.count_owned(state, Player.P1),
            score_p2=engine.count_owned(state, Player.P2),
            free_after=engine.count_empty(state),
            grid_snapshot=grid_snapshot(state.grid),
            **fields,
        )

    def snapshot(self) -> GameView:
        """Read-only view of the game for AI code."""

        state = self.state
        dice = state.dice
        return GameView(
            grid=[row[:] for row in state.grid],
            width=state.width,
            height=state.height,
            dice_values=(dice.a, dice.b) if dice is not None else (0, 0),
            is_kush=state.is_kush,
            current_player=state.current,
            turn_number=state.turn_number,
            start_cell=state.starts[state.current],
        )

    def format_board(self) -> str:
        return engine.format_grid(self.state.grid)
